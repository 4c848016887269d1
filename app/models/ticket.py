from uuid import uuid4

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.utils.time import utcnow

class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid4()))

    # Foreign key to Property
    property_id = Column(String, ForeignKey("properties.id"), nullable=False, index=True)
    property = relationship("Property", back_populates="tickets")

    # Who filed it / who works on it
    reporter_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    reporter = relationship("Profile", foreign_keys=[reporter_id])
    assignee_id = Column(String, ForeignKey("profiles.id"), nullable=True, index=True)
    assignee = relationship("Profile", foreign_keys=[assignee_id])

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(String, nullable=False, default="medium")  # low/medium/high/urgent
    category = Column(String, nullable=False, default="general")  # plumbing/electrical/locksmith/general
    status = Column(String, nullable=False, default="new", index=True)  # new -> ... -> closed

    # SLA
    sla_deadline = Column(DateTime(timezone=True), nullable=True, index=True)

    comments = relationship(
        "TicketComment", back_populates="ticket", order_by="TicketComment.created_at"
    )
    history = relationship("TicketHistory", back_populates="ticket")

    # timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now(), nullable=False)


class TicketComment(Base):
    __tablename__ = "ticket_comments"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid4()))
    ticket_id = Column(String, ForeignKey("tickets.id"), nullable=False, index=True)
    ticket = relationship("Ticket", back_populates="comments")
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    author = relationship("Profile")
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class TicketHistory(Base):
    __tablename__ = "ticket_history"

    # Integer id doubles as insertion order for rows sharing a timestamp
    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(String, ForeignKey("tickets.id"), nullable=False, index=True)
    ticket = relationship("Ticket", back_populates="history")
    changed_by = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    change_type = Column(String, nullable=False)  # status_change/assignment/priority_change
    old_value = Column(String, nullable=True)
    new_value = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

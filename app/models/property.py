from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.utils.time import utcnow


class Property(Base):
    __tablename__ = "properties"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid4()))

    title = Column(String, nullable=False)
    address = Column(String, nullable=True)

    # Owner sees every ticket filed against this property
    owner_id = Column(String, ForeignKey("profiles.id"), nullable=True, index=True)
    owner = relationship("Profile")

    # ONE property has MANY tickets (tickets are never hard-deleted)
    tickets = relationship("Ticket", back_populates="property")

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from app.core.database import Base
from app.utils.time import utcnow


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the auth provider's user (JWT "sub")
    id = Column(String, primary_key=True, index=True)

    email = Column(String, nullable=True, index=True)
    full_name = Column(String, nullable=True)

    # tenant / owner / manager / agent / service / admin
    role = Column(String, nullable=False, default="tenant", index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

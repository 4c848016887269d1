from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from app.core.lifecycle import ROLES, normalize_role


class ProfileOut(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: str
    created_at: datetime

    class Config:
        from_attributes = True


class RoleUpdate(BaseModel):
    role: str

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        role = normalize_role(v)
        if role not in ROLES:
            raise ValueError(f"role must be one of: {', '.join(ROLES)}")
        return role

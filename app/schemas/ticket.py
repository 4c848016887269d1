from pydantic import BaseModel, field_validator, model_validator
from datetime import datetime
from typing import Optional

from app.core.lifecycle import (
    PRIORITIES,
    PRIORITY_ALIASES,
    PRIORITY_HOURS,
    STATUS_ALIASES,
    STATUS_SEQUENCE,
)
from app.utils.time import as_utc


def _clean_priority(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    priority = v.strip().lower()
    priority = PRIORITY_ALIASES.get(priority, priority)
    if priority not in PRIORITY_HOURS:
        raise ValueError(f"priority must be one of: {', '.join(PRIORITIES)}")
    return priority


def _clean_status(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    status = v.strip().lower()
    status = STATUS_ALIASES.get(status, status)
    if status not in STATUS_SEQUENCE:
        raise ValueError(f"status must be one of: {', '.join(STATUS_SEQUENCE)}")
    return status


class TicketCreate(BaseModel):
    title: str
    description: str
    property_id: str  # REQUIRED - every ticket must belong to a property
    priority: Optional[str] = None  # low/medium/high/urgent ("critical" -> urgent); default medium
    category: Optional[str] = None  # suggested from the description when omitted

    @field_validator('title', 'description', 'property_id')
    @classmethod
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator('priority')
    @classmethod
    def validate_priority(cls, v):
        return _clean_priority(v)

    @field_validator('category')
    @classmethod
    def lower_category(cls, v):
        return v.strip().lower() if v and v.strip() else None


class TicketUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None  # "open" is read as "new"
    assignee_id: Optional[str] = None  # explicit null un-assigns

    @field_validator('title', 'description')
    @classmethod
    def not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("must not be empty")
        return v.strip() if v else v

    @field_validator('priority')
    @classmethod
    def validate_priority(cls, v):
        return _clean_priority(v)

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return _clean_status(v)

    @model_validator(mode="after")
    def reject_null_required(self) -> "TicketUpdate":
        # Only assignee_id may be explicitly cleared
        for field in ("title", "description", "priority", "category", "status"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class TicketOut(BaseModel):
    id: str
    property_id: str
    reporter_id: str
    assignee_id: Optional[str] = None
    title: str
    description: str
    priority: str
    category: str
    status: str
    sla_deadline: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    # Joined display fields
    property_title: Optional[str] = None
    reporter_name: Optional[str] = None
    reporter_email: Optional[str] = None
    assignee_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def flatten_joins(cls, data):
        """Pull property/reporter/assignee display fields off an ORM ticket."""
        if isinstance(data, dict) or not hasattr(data, "__table__"):
            return data
        row = {c.name: getattr(data, c.name) for c in data.__table__.columns}
        if data.property is not None:
            row["property_title"] = data.property.title
        if data.reporter is not None:
            row["reporter_name"] = data.reporter.full_name
            row["reporter_email"] = data.reporter.email
        if data.assignee is not None:
            row["assignee_name"] = data.assignee.full_name
        return row

    @field_validator('sla_deadline', 'created_at', 'updated_at')
    @classmethod
    def to_utc(cls, v):
        return as_utc(v)

    class Config:
        from_attributes = True


class TicketSlaOut(BaseModel):
    ticket_id: str
    status: str
    priority: str
    sla_deadline: Optional[datetime]
    sla_status: str  # met / overdue / at-risk / on-track
    hours_remaining: Optional[float]


class CommentCreate(BaseModel):
    content: str

    @field_validator('content', mode='before')
    @classmethod
    def strip_content(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class CommentOut(BaseModel):
    id: str
    ticket_id: str
    user_id: str
    content: str
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    created_at: datetime

    @model_validator(mode="before")
    @classmethod
    def flatten_author(cls, data):
        if isinstance(data, dict) or not hasattr(data, "__table__"):
            return data
        row = {c.name: getattr(data, c.name) for c in data.__table__.columns}
        if data.author is not None:
            row["author_name"] = data.author.full_name
            row["author_email"] = data.author.email
        return row

    @field_validator('created_at')
    @classmethod
    def to_utc(cls, v):
        return as_utc(v)

    class Config:
        from_attributes = True


class TicketHistoryOut(BaseModel):
    id: int
    ticket_id: str
    changed_by: str
    change_type: str
    old_value: Optional[str]
    new_value: Optional[str]
    created_at: datetime

    @field_validator('created_at')
    @classmethod
    def to_utc(cls, v):
        return as_utc(v)

    class Config:
        from_attributes = True


class ClassifyRequest(BaseModel):
    title: Optional[str] = None
    description: str


class ClassifyOut(BaseModel):
    category: str
    priority: str
    advice: Optional[str] = None

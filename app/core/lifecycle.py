"""
Ticket vocabulary: priorities, statuses and roles.

Tickets usually move through

    new -> classified -> assigned -> in_progress -> resolved -> closed

but the order is not enforced. Any permitted caller may write any known
status, including an earlier one.
"""
from typing import Dict, Optional

from app.core.errors import BadRequest

PRIORITY_HOURS: Dict[str, int] = {
    "urgent": 24,
    "high": 48,
    "medium": 72,
    "low": 168,
}
PRIORITIES = tuple(PRIORITY_HOURS)
DEFAULT_PRIORITY = "medium"

# Older clients send these
PRIORITY_ALIASES = {"critical": "urgent"}
STATUS_ALIASES = {"open": "new"}
ROLE_ALIASES = {"admin_uk": "admin"}

STATUS_SEQUENCE = ("new", "classified", "assigned", "in_progress", "resolved", "closed")
FINISHED_STATUSES = frozenset({"resolved", "closed"})

ROLES = ("tenant", "owner", "manager", "agent", "service", "admin")


def normalize_priority(value: Optional[str]) -> str:
    if value is None or not value.strip():
        return DEFAULT_PRIORITY
    priority = value.strip().lower()
    priority = PRIORITY_ALIASES.get(priority, priority)
    if priority not in PRIORITY_HOURS:
        raise BadRequest(f"priority must be one of: {', '.join(PRIORITIES)}")
    return priority


def normalize_status(value: str) -> str:
    status = (value or "").strip().lower()
    status = STATUS_ALIASES.get(status, status)
    if status not in STATUS_SEQUENCE:
        raise BadRequest(f"status must be one of: {', '.join(STATUS_SEQUENCE)}")
    return status


def normalize_role(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    role = value.strip().lower()
    return ROLE_ALIASES.get(role, role)

from datetime import datetime, timedelta
from typing import Optional

from app.core.config import settings
from app.core.lifecycle import FINISHED_STATUSES, PRIORITY_HOURS, normalize_priority
from app.utils.time import as_utc, utcnow

SLA_MET = "met"
SLA_OVERDUE = "overdue"
SLA_AT_RISK = "at-risk"
SLA_ON_TRACK = "on-track"


def hours_for_priority(priority: Optional[str]) -> int:
    return PRIORITY_HOURS[normalize_priority(priority)]


def compute_sla_deadline(priority: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Deadline = now + 24h/48h/72h/168h for urgent/high/medium/low."""
    now = as_utc(now) if now is not None else utcnow()
    return now + timedelta(hours=hours_for_priority(priority))


def classify_sla(
    status: str,
    deadline: Optional[datetime],
    now: Optional[datetime] = None,
    at_risk_hours: Optional[float] = None,
) -> str:
    """
    Display-only SLA state for a ticket.

    met       -> ticket is resolved or closed (deadline ignored)
    overdue   -> now is past the deadline
    at-risk   -> less than `at_risk_hours` left
    on-track  -> anything else, including tickets without a deadline
    """
    if status in FINISHED_STATUSES:
        return SLA_MET
    if deadline is None:
        return SLA_ON_TRACK

    now = as_utc(now) if now is not None else utcnow()
    deadline = as_utc(deadline)
    if at_risk_hours is None:
        at_risk_hours = settings.SLA_AT_RISK_HOURS

    if now > deadline:
        return SLA_OVERDUE
    if deadline - now < timedelta(hours=at_risk_hours):
        return SLA_AT_RISK
    return SLA_ON_TRACK


def hours_remaining(deadline: Optional[datetime], now: Optional[datetime] = None) -> Optional[float]:
    """Negative once the deadline has passed."""
    if deadline is None:
        return None
    now = as_utc(now) if now is not None else utcnow()
    return round((as_utc(deadline) - now).total_seconds() / 3600, 2)

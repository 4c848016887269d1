from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.ticket import Ticket, TicketHistory

# field on the ticket -> change_type written to ticket_history
TRACKED_FIELDS = {
    "status": "status_change",
    "assignee_id": "assignment",
    "priority": "priority_change",
}


def log_change(
    db: Session,
    *,
    ticket_id: str,
    changed_by: str,
    change_type: str,
    old_value: Optional[str],
    new_value: Optional[str],
) -> TicketHistory:
    """Stage a history row; the caller commits it together with the ticket."""
    entry = TicketHistory(
        ticket_id=ticket_id,
        changed_by=changed_by,
        change_type=change_type,
        old_value=old_value,
        new_value=new_value,
    )
    db.add(entry)
    return entry


def log_ticket_changes(
    db: Session,
    *,
    ticket: Ticket,
    changed_by: str,
    before: Dict[str, Any],
) -> List[TicketHistory]:
    entries = []
    for field, change_type in TRACKED_FIELDS.items():
        old_value, new_value = before.get(field), getattr(ticket, field)
        if old_value == new_value:
            continue
        entries.append(
            log_change(
                db,
                ticket_id=ticket.id,
                changed_by=changed_by,
                change_type=change_type,
                old_value=old_value,
                new_value=new_value,
            )
        )
    return entries

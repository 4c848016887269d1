import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InternalError, NotFound
from app.core.events import TICKET_CREATED, TICKET_STATUS_CHANGED, TicketEvent, subscribe
from app.models.notification import Notification

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    *,
    user_id: str,
    title: str,
    message: str,
    type: str = "info",
    metadata: Optional[Dict[str, Any]] = None,
) -> Notification:
    row = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        metadata_=metadata,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _deliver(db: Session, **fields) -> None:
    """Single write attempt; a failure is logged and never re-raised."""
    try:
        create_notification(db, **fields)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to write notification for user %s", fields.get("user_id"))


def notify_ticket_created(event: TicketEvent) -> None:
    ticket = event.ticket
    _deliver(
        event.db,
        user_id=ticket.reporter_id,
        title="Ticket Created",
        message="Your ticket has been successfully created.",
        type="success",
        metadata={"ticket_id": ticket.id},
    )


def notify_status_changed(event: TicketEvent) -> None:
    ticket = event.ticket
    _deliver(
        event.db,
        user_id=ticket.reporter_id,
        title="Ticket Updated",
        message=f"Your ticket status has been updated to: {ticket.status}",
        type="info",
        metadata={"ticket_id": ticket.id, "old_status": event.old_status},
    )


subscribe(TICKET_CREATED, notify_ticket_created)
subscribe(TICKET_STATUS_CHANGED, notify_status_changed)


# --- Recipient inbox ---

def list_notifications(db: Session, user_id: str, limit: Optional[int] = None) -> List[Notification]:
    try:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit or settings.NOTIFICATION_LIST_LIMIT)
            .all()
        )
    except SQLAlchemyError as e:
        raise InternalError(str(e))


def list_unread(db: Session, user_id: str) -> List[Notification]:
    try:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .filter(Notification.is_read == False)  # noqa: E712
            .order_by(Notification.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise InternalError(str(e))


def mark_as_read(db: Session, notification_id: str, user_id: str) -> Notification:
    # Filtering on user_id keeps callers away from other people's rows
    row = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not row:
        raise NotFound("Notification not found")

    row.is_read = True
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError(str(e))
    db.refresh(row)
    return row


def mark_all_as_read(db: Session, user_id: str) -> int:
    try:
        updated = (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .filter(Notification.is_read == False)  # noqa: E712
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError(str(e))
    return updated

"""
Ticket persistence: create, read, update, comments and history.

Tickets are never deleted. Any known status may be written, in any
order, and the row update plus its history entries share one
commit. Notifications are published as events after that commit and are
best-effort.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.audit import TRACKED_FIELDS, log_ticket_changes
from app.core.auth import Principal
from app.core.classifier import suggest_classification
from app.core.errors import BadRequest, InternalError, NotFound
from app.core.events import TICKET_CREATED, TICKET_STATUS_CHANGED, TicketEvent, publish
from app.core.lifecycle import normalize_priority, normalize_status
from app.core.sla import compute_sla_deadline
from app.models.profile import Profile
from app.models.property import Property
from app.models.ticket import Ticket, TicketComment, TicketHistory
from app.schemas.ticket import TicketCreate, TicketUpdate
from app.utils.time import as_utc, utcnow

# Importing registers the notification subscribers on the event bus
import app.core.notifications  # noqa: F401

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "priority", "category", "status", "assignee_id")


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to %s: %s", action, e)
        raise InternalError(str(e))


def _ticket_query(db: Session):
    return db.query(Ticket).options(
        joinedload(Ticket.property),
        joinedload(Ticket.reporter),
        joinedload(Ticket.assignee),
    )


def create_ticket(
    db: Session,
    principal: Principal,
    payload: TicketCreate,
    now: Optional[datetime] = None,
) -> Ticket:
    now = as_utc(now) if now is not None else utcnow()

    for field in ("title", "description", "property_id"):
        if not (getattr(payload, field) or "").strip():
            raise BadRequest(f"{field} is required")

    if not db.query(Property.id).filter(Property.id == payload.property_id).first():
        raise NotFound("Property not found")

    priority = normalize_priority(payload.priority)
    category = payload.category or suggest_classification(
        f"{payload.title} {payload.description}"
    ).category

    ticket = Ticket(
        title=payload.title,
        description=payload.description,
        property_id=payload.property_id,
        reporter_id=principal.id,
        priority=priority,
        category=category,
        status="new",
        sla_deadline=compute_sla_deadline(priority, now),
        created_at=now,
        updated_at=now,
    )
    db.add(ticket)
    _commit(db, "create ticket")
    db.refresh(ticket)
    logger.info("Ticket %s created by %s (priority=%s)", ticket.id, principal.id, priority)

    publish(TicketEvent(type=TICKET_CREATED, db=db, ticket=ticket, actor_id=principal.id))
    return ticket


def get_ticket(db: Session, ticket_id: str) -> Ticket:
    try:
        ticket = _ticket_query(db).filter(Ticket.id == ticket_id).first()
    except SQLAlchemyError as e:
        raise InternalError(str(e))
    if not ticket:
        raise NotFound("Ticket not found")
    return ticket


def update_ticket(
    db: Session,
    principal: Principal,
    ticket_id: str,
    patch: TicketUpdate,
) -> Ticket:
    ticket = get_ticket(db, ticket_id)
    updates = {
        k: v for k, v in patch.model_dump(exclude_unset=True).items() if k in UPDATABLE_FIELDS
    }

    if "status" in updates:
        updates["status"] = normalize_status(updates["status"])
    if "priority" in updates:
        updates["priority"] = normalize_priority(updates["priority"])
    if updates.get("assignee_id"):
        if not db.query(Profile.id).filter(Profile.id == updates["assignee_id"]).first():
            raise BadRequest("Assignee not found")

    before = {field: getattr(ticket, field) for field in TRACKED_FIELDS}
    for k, v in updates.items():
        setattr(ticket, k, v)

    log_ticket_changes(db, ticket=ticket, changed_by=principal.id, before=before)
    _commit(db, f"update ticket {ticket_id}")
    db.refresh(ticket)

    if "status" in updates:
        logger.info(
            "Ticket %s status %s -> %s by %s",
            ticket.id, before["status"], ticket.status, principal.id,
        )
        publish(
            TicketEvent(
                type=TICKET_STATUS_CHANGED,
                db=db,
                ticket=ticket,
                actor_id=principal.id,
                old_status=before["status"],
            )
        )
    return ticket


def add_comment(db: Session, principal: Principal, ticket_id: str, content: str) -> TicketComment:
    if not content or not content.strip():
        raise BadRequest("Comment content must not be empty")
    get_ticket(db, ticket_id)

    comment = TicketComment(ticket_id=ticket_id, user_id=principal.id, content=content.strip())
    db.add(comment)
    _commit(db, "add comment")
    db.refresh(comment)
    return comment


def list_comments(db: Session, ticket_id: str) -> List[TicketComment]:
    get_ticket(db, ticket_id)
    try:
        return (
            db.query(TicketComment)
            .options(joinedload(TicketComment.author))
            .filter(TicketComment.ticket_id == ticket_id)
            .order_by(TicketComment.created_at.asc())
            .all()
        )
    except SQLAlchemyError as e:
        raise InternalError(str(e))


def list_history(db: Session, ticket_id: str) -> List[TicketHistory]:
    get_ticket(db, ticket_id)
    try:
        return (
            db.query(TicketHistory)
            .filter(TicketHistory.ticket_id == ticket_id)
            .order_by(TicketHistory.created_at.desc(), TicketHistory.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise InternalError(str(e))

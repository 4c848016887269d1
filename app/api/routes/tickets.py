from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.api.deps import get_db
from app.core.auth import Principal, get_principal, require_roles
from app.core.classifier import suggest_classification
from app.core.sla import classify_sla, hours_remaining
from app.core import ticket_scope, ticket_store
from app.schemas.ticket import (
    ClassifyOut,
    ClassifyRequest,
    CommentCreate,
    CommentOut,
    TicketCreate,
    TicketHistoryOut,
    TicketOut,
    TicketSlaOut,
    TicketUpdate,
)
from app.utils.time import as_utc

router = APIRouter(prefix="/tickets", tags=["tickets"])

CAN_CREATE = ("tenant", "admin", "manager", "owner")
CAN_LIST = ("admin", "manager", "owner", "agent", "service")
CAN_LIST_OWN = ("tenant", "admin", "manager")
CAN_VIEW = ("admin", "manager", "tenant", "owner")
CAN_UPDATE = ("admin", "manager", "owner", "agent")
CAN_COMMENT = ("tenant", "admin", "manager", "owner", "agent")


@router.post("", response_model=TicketOut, status_code=201)
def create_ticket(
    payload: TicketCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*CAN_CREATE)),
):
    return ticket_store.create_ticket(db, principal, payload)


@router.get("", response_model=List[TicketOut])
def list_tickets(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*CAN_LIST)),
):
    """Role-scoped list: owners see their properties, agents their assignments, staff everything."""
    return ticket_scope.tickets_for_principal(db, principal)


@router.get("/my", response_model=List[TicketOut])
def list_my_tickets(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*CAN_LIST_OWN)),
):
    return ticket_scope.tickets_reported_by(db, principal.id)


@router.post("/classify", response_model=ClassifyOut)
def classify_ticket(
    payload: ClassifyRequest,
    principal: Principal = Depends(get_principal),
):
    """Suggest category and priority from the ticket text (keyword match)."""
    text = f"{payload.title or ''} {payload.description}"
    return suggest_classification(text)._asdict()


@router.get("/{ticket_id}", response_model=TicketOut)
def get_ticket(
    ticket_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*CAN_VIEW)),
):
    return ticket_store.get_ticket(db, ticket_id)


@router.get("/{ticket_id}/sla", response_model=TicketSlaOut)
def get_ticket_sla(
    ticket_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*CAN_VIEW)),
):
    ticket = ticket_store.get_ticket(db, ticket_id)
    return TicketSlaOut(
        ticket_id=ticket.id,
        status=ticket.status,
        priority=ticket.priority,
        sla_deadline=as_utc(ticket.sla_deadline),
        sla_status=classify_sla(ticket.status, ticket.sla_deadline),
        hours_remaining=hours_remaining(ticket.sla_deadline),
    )


@router.patch("/{ticket_id}", response_model=TicketOut)
def update_ticket(
    ticket_id: str,
    payload: TicketUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*CAN_UPDATE)),
):
    return ticket_store.update_ticket(db, principal, ticket_id, payload)


@router.get("/{ticket_id}/history", response_model=List[TicketHistoryOut])
def get_ticket_history(
    ticket_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*CAN_UPDATE)),
):
    return ticket_store.list_history(db, ticket_id)


@router.post("/{ticket_id}/comments", response_model=CommentOut, status_code=201)
def add_comment(
    ticket_id: str,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*CAN_COMMENT)),
):
    return ticket_store.add_comment(db, principal, ticket_id, payload.content)


@router.get("/{ticket_id}/comments", response_model=List[CommentOut])
def get_comments(
    ticket_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*CAN_COMMENT)),
):
    return ticket_store.list_comments(db, ticket_id)

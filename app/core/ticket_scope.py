from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.auth import Principal
from app.core.errors import InternalError
from app.models.property import Property
from app.models.ticket import Ticket


def _base_query(db: Session):
    return db.query(Ticket).options(
        joinedload(Ticket.property),
        joinedload(Ticket.reporter),
        joinedload(Ticket.assignee),
    )


def tickets_for_principal(db: Session, principal: Principal) -> List[Ticket]:
    """
    Tickets the caller may see, newest first:

    - owner          -> tickets on properties they own
    - agent/service  -> tickets assigned to them
    - manager/admin  -> everything
    - anything else  -> nothing
    """
    q = _base_query(db)

    if principal.role == "owner":
        q = q.join(Property, Ticket.property_id == Property.id).filter(
            Property.owner_id == principal.id
        )
    elif principal.role in ("agent", "service"):
        q = q.filter(Ticket.assignee_id == principal.id)
    elif principal.role in ("manager", "admin"):
        pass
    else:
        return []

    try:
        return q.order_by(Ticket.created_at.desc()).all()
    except SQLAlchemyError as e:
        raise InternalError(str(e))


def tickets_reported_by(db: Session, user_id: str) -> List[Ticket]:
    try:
        return (
            _base_query(db)
            .filter(Ticket.reporter_id == user_id)
            .order_by(Ticket.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise InternalError(str(e))

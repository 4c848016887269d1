"""
In-process, synchronous domain events.

Publishers call `publish()` after their own commit. Every subscriber runs
in turn; a subscriber that raises is logged and skipped, so a failing side
effect never fails the operation that published the event.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, List, Optional

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

TICKET_CREATED = "ticket.created"
TICKET_STATUS_CHANGED = "ticket.status_changed"


@dataclass
class TicketEvent:
    type: str
    db: Session
    ticket: Any
    actor_id: str
    old_status: Optional[str] = None


Handler = Callable[[TicketEvent], None]

_subscribers: DefaultDict[str, List[Handler]] = defaultdict(list)


def subscribe(event_type: str, handler: Handler) -> None:
    if handler not in _subscribers[event_type]:
        _subscribers[event_type].append(handler)


def unsubscribe(event_type: str, handler: Handler) -> None:
    if handler in _subscribers[event_type]:
        _subscribers[event_type].remove(handler)


def publish(event: TicketEvent) -> None:
    for handler in list(_subscribers[event.type]):
        try:
            handler(event)
        except Exception:
            logger.exception(
                "Subscriber %s failed on %s for ticket %s",
                getattr(handler, "__name__", handler),
                event.type,
                getattr(event.ticket, "id", None),
            )

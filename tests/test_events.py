from types import SimpleNamespace

from app.core import events


def test_failing_subscriber_does_not_stop_the_others():
    seen = []

    def broken(event):
        raise RuntimeError("mail server down")

    def recorder(event):
        seen.append(event.ticket.id)

    events.subscribe("test.event", broken)
    events.subscribe("test.event", recorder)
    try:
        events.publish(
            events.TicketEvent(
                type="test.event", db=None, ticket=SimpleNamespace(id="t-1"), actor_id="u-1"
            )
        )
    finally:
        events.unsubscribe("test.event", broken)
        events.unsubscribe("test.event", recorder)

    assert seen == ["t-1"]


def test_subscribing_twice_registers_once():
    calls = []

    def handler(event):
        calls.append(event)

    events.subscribe("test.once", handler)
    events.subscribe("test.once", handler)
    try:
        events.publish(
            events.TicketEvent(
                type="test.once", db=None, ticket=SimpleNamespace(id="t-2"), actor_id="u-1"
            )
        )
    finally:
        events.unsubscribe("test.once", handler)

    assert len(calls) == 1

from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import BadRequest
from app.core.sla import (
    SLA_AT_RISK,
    SLA_MET,
    SLA_ON_TRACK,
    SLA_OVERDUE,
    classify_sla,
    compute_sla_deadline,
    hours_for_priority,
    hours_remaining,
)

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "priority,hours",
    [("urgent", 24), ("high", 48), ("medium", 72), ("low", 168)],
)
def test_deadline_offset_per_priority(priority, hours):
    assert compute_sla_deadline(priority, T0) - T0 == timedelta(hours=hours)


def test_critical_is_treated_as_urgent():
    assert hours_for_priority("critical") == 24


def test_missing_priority_defaults_to_medium():
    assert hours_for_priority(None) == 72


def test_unknown_priority_is_rejected():
    with pytest.raises(BadRequest):
        hours_for_priority("whenever")


def test_naive_now_is_read_as_utc():
    naive = T0.replace(tzinfo=None)
    assert compute_sla_deadline("high", naive) == T0 + timedelta(hours=48)


def test_overdue_when_past_deadline():
    deadline = T0 - timedelta(minutes=1)
    assert classify_sla("in_progress", deadline, now=T0) == SLA_OVERDUE


def test_at_risk_inside_warning_window():
    deadline = T0 + timedelta(hours=3, minutes=59)
    assert classify_sla("assigned", deadline, now=T0) == SLA_AT_RISK


def test_on_track_outside_warning_window():
    deadline = T0 + timedelta(hours=4)
    assert classify_sla("new", deadline, now=T0) == SLA_ON_TRACK


@pytest.mark.parametrize("status", ["resolved", "closed"])
def test_finished_tickets_are_met_even_when_late(status):
    deadline = T0 - timedelta(days=3)
    assert classify_sla(status, deadline, now=T0) == SLA_MET


def test_custom_warning_window():
    deadline = T0 + timedelta(hours=10)
    assert classify_sla("new", deadline, now=T0, at_risk_hours=12) == SLA_AT_RISK


def test_no_deadline_is_on_track():
    assert classify_sla("new", None, now=T0) == SLA_ON_TRACK


def test_hours_remaining_goes_negative_after_deadline():
    assert hours_remaining(T0 + timedelta(hours=6), now=T0) == 6.0
    assert hours_remaining(T0 - timedelta(minutes=30), now=T0) == -0.5
    assert hours_remaining(None, now=T0) is None

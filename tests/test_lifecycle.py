import pytest

from app.core.errors import BadRequest
from app.core.lifecycle import (
    STATUS_SEQUENCE,
    normalize_priority,
    normalize_role,
    normalize_status,
)


@pytest.mark.parametrize("status", STATUS_SEQUENCE)
def test_every_known_status_is_accepted(status):
    assert normalize_status(status) == status


def test_legacy_open_is_new():
    assert normalize_status("open") == "new"
    assert normalize_status(" In_Progress ") == "in_progress"


def test_unknown_status_is_bad_request():
    with pytest.raises(BadRequest):
        normalize_status("waiting")


def test_priority_normalisation():
    assert normalize_priority("CRITICAL") == "urgent"
    assert normalize_priority("") == "medium"
    assert normalize_priority("low") == "low"


def test_admin_uk_role_is_admin():
    assert normalize_role("admin_uk") == "admin"
    assert normalize_role("Owner") == "owner"
    assert normalize_role(None) is None

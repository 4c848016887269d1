from tests.conftest import auth


def _ids(response):
    assert response.status_code == 200, response.text
    return [t["id"] for t in response.json()]


def _setup_tickets(client, create_ticket):
    on_prop_1 = create_ticket("tenant-1", property_id="prop-1", title="Broken window")
    on_prop_2 = create_ticket("tenant-2", property_id="prop-2", title="Mould in bathroom")
    assigned = create_ticket("tenant-2", property_id="prop-2", title="Heater")
    client.patch(
        f"/tickets/{assigned['id']}", json={"assignee_id": "agent-1"}, headers=auth("manager-1")
    )
    return on_prop_1, on_prop_2, assigned


def test_owner_sees_only_tickets_on_owned_properties(client, create_ticket):
    on_prop_1, on_prop_2, assigned = _setup_tickets(client, create_ticket)

    assert _ids(client.get("/tickets", headers=auth("owner-1"))) == [on_prop_1["id"]]
    assert _ids(client.get("/tickets", headers=auth("owner-2"))) == [assigned["id"], on_prop_2["id"]]


def test_agent_sees_only_assigned_tickets(client, create_ticket):
    _, _, assigned = _setup_tickets(client, create_ticket)

    assert _ids(client.get("/tickets", headers=auth("agent-1"))) == [assigned["id"]]
    assert _ids(client.get("/tickets", headers=auth("service-1"))) == []


def test_staff_see_everything_newest_first(client, create_ticket):
    on_prop_1, on_prop_2, assigned = _setup_tickets(client, create_ticket)
    expected = [assigned["id"], on_prop_2["id"], on_prop_1["id"]]

    assert _ids(client.get("/tickets", headers=auth("manager-1"))) == expected
    assert _ids(client.get("/tickets", headers=auth("admin-1"))) == expected


def test_tenant_cannot_use_dispatched_list(client, create_ticket):
    _setup_tickets(client, create_ticket)
    assert client.get("/tickets", headers=auth("tenant-1")).status_code == 403


def test_unrecognised_role_gets_empty_list(client, create_ticket):
    from app.core.auth import Principal
    from app.core.ticket_scope import tickets_for_principal
    from tests.conftest import TestingSessionLocal

    _setup_tickets(client, create_ticket)
    db = TestingSessionLocal()
    try:
        assert tickets_for_principal(db, Principal("vendor-1", "vendor")) == []
        assert tickets_for_principal(db, Principal("tenant-1", "tenant")) == []
    finally:
        db.close()


def test_my_tickets_lists_what_the_caller_reported(client, create_ticket):
    on_prop_1, on_prop_2, assigned = _setup_tickets(client, create_ticket)

    assert _ids(client.get("/tickets/my", headers=auth("tenant-1"))) == [on_prop_1["id"]]
    assert _ids(client.get("/tickets/my", headers=auth("tenant-2"))) == [assigned["id"], on_prop_2["id"]]
    assert _ids(client.get("/tickets/my", headers=auth("manager-1"))) == []

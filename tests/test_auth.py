from app.models.profile import Profile
from tests.conftest import auth, make_token


def test_missing_token_is_401(client):
    response = client.get("/tickets")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_garbage_token_is_401(client):
    response = client.get("/tickets", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_expired_token_is_401(client):
    headers = {"Authorization": f"Bearer {make_token('manager-1', expires_in=-60)}"}
    response = client.get("/tickets", headers=headers)
    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"


def test_user_without_profile_is_403(client):
    response = client.get("/tickets", headers=auth("nobody"))
    assert response.status_code == 403
    assert response.json()["detail"] == "User profile not found"


def test_role_is_cached_until_invalidated(client, db):
    assert client.get("/tickets", headers=auth("tenant-1")).status_code == 403

    # A direct write bypasses invalidation, so the cached role still applies
    db.get(Profile, "tenant-1").role = "manager"
    db.commit()
    assert client.get("/tickets", headers=auth("tenant-1")).status_code == 403

    response = client.patch(
        "/profiles/tenant-1/role", json={"role": "manager"}, headers=auth("admin-1")
    )
    assert response.status_code == 200
    assert client.get("/tickets", headers=auth("tenant-1")).status_code == 200


def test_profile_endpoints(client):
    me = client.get("/profiles/me", headers=auth("owner-1"))
    assert me.status_code == 200
    assert me.json()["full_name"] == "Olga Owner"

    assert client.get("/profiles", headers=auth("tenant-1")).status_code == 403
    names = [p["full_name"] for p in client.get("/profiles", headers=auth("manager-1")).json()]
    assert names == sorted(names)


def test_only_admin_changes_roles(client):
    response = client.patch("/profiles/tenant-1/role", json={"role": "owner"}, headers=auth("manager-1"))
    assert response.status_code == 403

    response = client.patch("/profiles/tenant-1/role", json={"role": "emperor"}, headers=auth("admin-1"))
    assert response.status_code == 422

    response = client.patch("/profiles/ghost/role", json={"role": "owner"}, headers=auth("admin-1"))
    assert response.status_code == 404

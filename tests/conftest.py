import os
import time

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.auth import invalidate_role
from app.core.database import Base
from app.main import app
from app.models.profile import Profile
from app.models.property import Property

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

USERS = {
    "tenant-1": ("tenant", "Tina Tenant"),
    "tenant-2": ("tenant", "Tom Tenant"),
    "owner-1": ("owner", "Olga Owner"),
    "owner-2": ("owner", "Oscar Owner"),
    "agent-1": ("agent", "Ada Agent"),
    "service-1": ("service", "Sam Service"),
    "manager-1": ("manager", "Mia Manager"),
    "admin-1": ("admin_uk", "Alan Admin"),
    "vendor-1": ("vendor", "Vic Vendor"),
}


def make_token(user_id: str, expires_in: int = 3600) -> str:
    claims = {
        "sub": user_id,
        "email": f"{user_id}@example.com",
        "aud": "authenticated",
        "exp": int(time.time()) + expires_in,
    }
    return jwt.encode(claims, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


def auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.create_all(bind=engine)
    invalidate_role()
    yield
    invalidate_role()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(reset_database):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    for user_id, (role, name) in USERS.items():
        db.add(Profile(id=user_id, email=f"{user_id}@example.com", full_name=name, role=role))
    db.add(Property(id="prop-1", title="Maple Court 4B", owner_id="owner-1"))
    db.add(Property(id="prop-2", title="Harbor View 12", owner_id="owner-2"))
    db.commit()
    return db


@pytest.fixture
def client(seed):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def create_ticket(client):
    def _create(user_id="tenant-1", **fields):
        body = {
            "title": "Kitchen sink leaking",
            "description": "Water under the sink since this morning",
            "property_id": "prop-1",
        }
        body.update(fields)
        response = client.post("/tickets", json=body, headers=auth(user_id))
        assert response.status_code == 201, response.text
        return response.json()
    return _create

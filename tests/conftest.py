# tests/conftest.py
import os
import tempfile

# Settings are read at import time, so the environment is fixed before vgosti loads.
_tmp = tempfile.mkdtemp(prefix="vgosti-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp, 'test.sqlite')}"
os.environ["UPLOAD_DIR"] = os.path.join(_tmp, "uploads")
os.environ["FRONTEND_DIR"] = os.path.join(_tmp, "dist")
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["MAX_UPLOAD_SIZE"] = "2048"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from vgosti import database
from vgosti.main import app

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


@pytest.fixture(autouse=True)
def fresh_db():
    database.Base.metadata.drop_all(bind=database.engine)
    database.init_db(database.engine)
    yield


@pytest.fixture
def db():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    # drop the cookie so only the bearer header authenticates
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def console(client):
    """Client logged in to the admin console at the default path."""
    response = client.post(
        "/admin/login",
        data={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client


def cabin_payload(**overrides):
    payload = {
        "name": "Лесной уголок",
        "description": "Домик у соснового бора",
        "pricePerNight": 6200,
        "location": "Каспийск",
        "bedrooms": 2,
        "bathrooms": 1,
        "maxGuests": 4,
        "amenities": ["Wi-Fi", "Парковка"],
        "images": ["/uploads/forest.jpg"],
        "featured": False,
    }
    payload.update(overrides)
    return payload

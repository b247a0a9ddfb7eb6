from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from eventhub_api.app.core.config import Settings
from eventhub_api.app.core.db import EntityStore, to_db_timestamp
from eventhub_api.app.main import create_app

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=str(tmp_path / "eventhub-test.db"),
        secret_key="test-secret",
        access_token_expire_minutes=60,
        cancellation_lead_days=7,
        cancel_requires_creator=True,
        top_events_limit=5,
    )


@pytest.fixture
def store(settings) -> EntityStore:
    store = EntityStore(settings.database_url, timeout=settings.db_timeout_seconds)
    store.init_db()
    return store


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


def make_user(store: EntityStore, name: str) -> Dict[str, Any]:
    return store.insert("users", {"username": name, "email": f"{name}@example.com", "password": "x$00"})


def make_event(
    store: EntityStore,
    creator: Dict[str, Any],
    *,
    name: str = "Meetup",
    days_ahead: float = 10,
    capacity: int = 3,
    rating: float = 0,
    now: datetime = NOW,
) -> Dict[str, Any]:
    return store.insert(
        "events",
        {
            "name": name,
            "description": f"{name} description",
            "date": to_db_timestamp(now + timedelta(days=days_ahead)),
            "capacity": capacity,
            "price": 0,
            "rating": rating,
            "creator": creator["id"],
        },
    )


def signup(client: TestClient, name: str) -> Dict[str, str]:
    """Register and log in a user; return the Authorization header."""
    email = f"{name}@example.com"
    client.post("/api/users/register", json={"username": name, "email": email, "password": "pw-" + name})
    response = client.post("/api/users/login", json={"email": email, "password": "pw-" + name})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def post_event(client: TestClient, headers: Dict[str, str], *, days_ahead: float = 10, capacity: int = 2, name: str = "Meetup") -> Dict[str, Any]:
    date = (datetime.now(timezone.utc) + timedelta(days=days_ahead)).isoformat()
    response = client.post(
        "/api/events/create",
        json={"name": name, "description": "talks", "date": date, "capacity": capacity, "price": 5},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()

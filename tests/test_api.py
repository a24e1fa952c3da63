from datetime import datetime, timedelta, timezone

import pytest
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cinemate.api.routes import admin, bookings, misc, payments, shows, webhooks
from cinemate.core.security import create_access_token
from cinemate.db import models
from cinemate.db.session import get_db
from cinemate.events import EventBus
from cinemate.services import notification_service
from cinemate.workers.handlers import register_handlers
from cinemate.workers.scheduler import HoldExpiryScheduler

from conftest import sqlite_engine


@pytest.fixture()
def api_client(monkeypatch):
    engine = sqlite_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    sent = []
    monkeypatch.setattr(notification_service, "send_email", lambda message: sent.append(message) or True)
    scheduler = BackgroundScheduler(jobstores={"default": MemoryJobStore()}, timezone=timezone.utc)
    expiry_scheduler = HoldExpiryScheduler(scheduler, retry_delay=timedelta(seconds=30), max_attempts=3)
    bus = EventBus()
    register_handlers(bus, expiry_scheduler, TestingSessionLocal, timedelta(minutes=10))

    test_app = FastAPI()
    for module in (shows, bookings, payments, webhooks, admin, misc):
        test_app.include_router(module.router, prefix="/api/v1")
    test_app.dependency_overrides[get_db] = override_get_db
    test_app.state.event_bus = bus

    with TestClient(test_app) as client:
        yield client, TestingSessionLocal, expiry_scheduler, sent

    test_app.dependency_overrides.clear()
    engine.dispose()


def auth_header(user_id="user_1", role=None):
    claims = {"sub": user_id}
    if role:
        claims["role"] = role
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


def seed(SessionLocal, *user_ids):
    with SessionLocal() as db:
        for index, user_id in enumerate(user_ids or ("user_1",)):
            db.add(models.User(id=user_id, name=f"User {index}", email=f"{user_id}@example.com"))
        movie = models.Movie(title="Inside Out 2")
        db.add(movie)
        db.commit()
        show = models.Show(
            movie_id=movie.id,
            show_datetime=datetime.now(timezone.utc) + timedelta(days=2),
            show_price=10,
            occupied_seats={},
        )
        db.add(show)
        db.commit()
        return movie.id, show.id


def test_health(api_client):
    client, *_ = api_client

    assert client.get("/api/v1/health").json() == {"status": "ok"}


def test_create_booking_holds_seats_and_schedules_expiry(api_client):
    client, SessionLocal, expiry_scheduler, _ = api_client
    _, show_id = seed(SessionLocal)

    response = client.post(
        "/api/v1/bookings",
        json={"show_id": show_id, "selected_seats": ["A1", "A2"]},
        headers=auth_header(),
    )

    assert response.status_code == 200
    body = response.json()
    booking_id = body["booking"]["id"]
    assert body["booking"]["is_paid"] is False
    assert body["booking"]["amount"] == 20
    assert body["payment_url"]
    assert expiry_scheduler.scheduler.get_job(f"release-seats-{booking_id}") is not None

    seats = client.get(f"/api/v1/shows/{show_id}/occupied-seats").json()
    assert seats == {"show_id": show_id, "occupied_seats": ["A1", "A2"]}


def test_create_booking_conflict_returns_409(api_client):
    client, SessionLocal, _, _ = api_client
    _, show_id = seed(SessionLocal, "user_1", "user_2")
    first = client.post(
        "/api/v1/bookings",
        json={"show_id": show_id, "selected_seats": ["A1"]},
        headers=auth_header("user_1"),
    )
    assert first.status_code == 200

    second = client.post(
        "/api/v1/bookings",
        json={"show_id": show_id, "selected_seats": ["A1", "A2"]},
        headers=auth_header("user_2"),
    )

    assert second.status_code == 409
    assert second.json()["detail"] == "Seats already taken: A1"
    seats = client.get(f"/api/v1/shows/{show_id}/occupied-seats").json()
    assert seats["occupied_seats"] == ["A1"]


def test_create_booking_unknown_show_returns_404(api_client):
    client, SessionLocal, _, _ = api_client
    seed(SessionLocal)

    response = client.post(
        "/api/v1/bookings",
        json={"show_id": 999, "selected_seats": ["A1"]},
        headers=auth_header(),
    )

    assert response.status_code == 404


def test_create_booking_requires_token(api_client):
    client, SessionLocal, _, _ = api_client
    _, show_id = seed(SessionLocal)

    response = client.post("/api/v1/bookings", json={"show_id": show_id, "selected_seats": ["A1"]})
    assert response.status_code == 401

    response = client.post(
        "/api/v1/bookings",
        json={"show_id": show_id, "selected_seats": ["A1"]},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


def test_payment_webhook_confirms_booking(api_client):
    client, SessionLocal, _, sent = api_client
    _, show_id = seed(SessionLocal)
    booking_id = client.post(
        "/api/v1/bookings",
        json={"show_id": show_id, "selected_seats": ["B7"]},
        headers=auth_header(),
    ).json()["booking"]["id"]

    response = client.post(
        "/api/v1/payments/webhook",
        json={"booking_id": booking_id, "status": "succeeded"},
    )

    assert response.json() == {"status": "ok"}
    mine = client.get("/api/v1/bookings/me", headers=auth_header()).json()
    assert [(b["id"], b["is_paid"], b["payment_link"]) for b in mine] == [(booking_id, True, None)]
    assert len(sent) == 1


def test_payment_webhook_ignores_unpaid_status_and_rejects_garbage(api_client):
    client, *_ = api_client

    ignored = client.post("/api/v1/payments/webhook", json={"booking_id": 1, "status": "failed"})
    invalid = client.post("/api/v1/payments/webhook", json={"status": "succeeded"})

    assert ignored.json() == {"status": "ignored"}
    assert invalid.status_code == 400


def test_identity_webhook_syncs_users(api_client):
    client, SessionLocal, _, _ = api_client
    created = {
        "type": "user.created",
        "data": {
            "id": "user_abc",
            "first_name": "Alan",
            "last_name": "Turing",
            "email_addresses": [{"email_address": "alan@example.com"}],
            "image_url": "https://img.example.com/alan.png",
        },
    }

    assert client.post("/api/v1/webhooks/identity", json=created).json() == {"status": "ok"}
    with SessionLocal() as db:
        user = db.get(models.User, "user_abc")
        assert (user.name, user.email) == ("Alan Turing", "alan@example.com")

    deleted = {"type": "user.deleted", "data": {"id": "user_abc", "deleted": True}}
    assert client.post("/api/v1/webhooks/identity", json=deleted).json() == {"status": "ok"}
    with SessionLocal() as db:
        assert db.get(models.User, "user_abc") is None


def test_identity_webhook_ignores_other_events(api_client):
    client, *_ = api_client

    response = client.post("/api/v1/webhooks/identity", json={"type": "session.created", "data": {}})

    assert response.json() == {"status": "ignored"}


def test_admin_routes_require_admin_role(api_client):
    client, SessionLocal, _, _ = api_client
    movie_id, _ = seed(SessionLocal)

    forbidden = client.get("/api/v1/admin/dashboard", headers=auth_header())
    assert forbidden.status_code == 403

    new_show = client.post(
        "/api/v1/shows",
        json={
            "movie_id": movie_id,
            "show_datetime": (datetime.now(timezone.utc) + timedelta(days=3)).isoformat(),
            "show_price": 12.5,
        },
        headers=auth_header(role="admin"),
    )
    assert new_show.status_code == 200
    assert new_show.json()["movie"]["title"] == "Inside Out 2"

    dashboard = client.get("/api/v1/admin/dashboard", headers=auth_header(role="admin")).json()
    assert dashboard["total_users"] == 1
    assert dashboard["pending_bookings"] == 0
    assert len(client.get("/api/v1/shows").json()) == 2


def test_admin_dashboard_totals_paid_and_pending(api_client):
    client, SessionLocal, _, _ = api_client
    _, show_id = seed(SessionLocal, "user_1", "user_2")
    paid_id = client.post(
        "/api/v1/bookings",
        json={"show_id": show_id, "selected_seats": ["A1", "A2"]},
        headers=auth_header("user_1"),
    ).json()["booking"]["id"]
    client.post(
        "/api/v1/bookings",
        json={"show_id": show_id, "selected_seats": ["C3"]},
        headers=auth_header("user_2"),
    )
    client.post("/api/v1/payments/webhook", json={"booking_id": paid_id, "status": "paid"})

    dashboard = client.get("/api/v1/admin/dashboard", headers=auth_header(role="admin"))

    assert dashboard.status_code == 200
    assert dashboard.json() == {
        "total_bookings": 1,
        "pending_bookings": 1,
        "total_revenue": 20.0,
        "total_users": 2,
    }


def test_booking_status_follows_payment(api_client):
    client, SessionLocal, _, _ = api_client
    _, show_id = seed(SessionLocal, "user_1", "user_2")
    booking_id = client.post(
        "/api/v1/bookings",
        json={"show_id": show_id, "selected_seats": ["D4"]},
        headers=auth_header("user_1"),
    ).json()["booking"]["id"]

    pending = client.get(f"/api/v1/bookings/{booking_id}/status", headers=auth_header("user_1"))
    assert pending.json() == {"booking_id": booking_id, "state": "pending"}
    stranger = client.get(f"/api/v1/bookings/{booking_id}/status", headers=auth_header("user_2"))
    assert stranger.status_code == 404

    client.post("/api/v1/payments/webhook", json={"booking_id": booking_id, "status": "succeeded"})

    paid = client.get(f"/api/v1/bookings/{booking_id}/status", headers=auth_header("user_1"))
    assert paid.json()["state"] == "paid"
    missing = client.get("/api/v1/bookings/999/status", headers=auth_header("user_1"))
    assert missing.json() == {"booking_id": 999, "state": "released"}

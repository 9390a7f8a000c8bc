# tests/test_api_key_dependency.py
from http import HTTPStatus

from roombook.api.dependencies import api_key as auth_module
from roombook.api.dependencies.api_key import AccessScope, resolve_scope

BOOKING_KEY = "booking-secret"
DISPLAY_KEY = "lobby-display"


class DummySettingsProd:
    APP_ENV = "prod"
    API_KEY = BOOKING_KEY
    READONLY_API_KEY = DISPLAY_KEY


class DummySettingsProdUnconfigured:
    APP_ENV = "prod"
    API_KEY = None
    READONLY_API_KEY = None


class DummySettingsLocalDisplayOnly:
    APP_ENV = "local"
    API_KEY = None
    READONLY_API_KEY = DISPLAY_KEY


def _booking() -> dict:
    return {
        "title": "Budget review",
        "date": "2025-11-14",
        "start_time": {"hour": 13, "minute": 0},
        "end_time": {"hour": 14, "minute": 0},
        "location": "Room B",
        "participants": ["alice@example.com"],
        "created_by": "carol@example.com",
    }


def test_resolve_scope_maps_keys_to_scopes():
    settings = DummySettingsProd()

    assert resolve_scope(BOOKING_KEY, settings) == AccessScope.WRITE
    assert resolve_scope(DISPLAY_KEY, settings) == AccessScope.READ
    assert resolve_scope("guess", settings) is None
    assert resolve_scope(None, settings) is None


def test_calendar_401_without_key_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())

    resp = client.get("/meetings")
    assert resp.status_code == HTTPStatus.UNAUTHORIZED
    assert "invalid or missing" in resp.json()["detail"].lower()


def test_calendar_401_with_unknown_key_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())

    resp = client.post("/meetings", json=_booking(), headers={"X-Api-Key": "guess"})
    assert resp.status_code == HTTPStatus.UNAUTHORIZED


def test_display_key_can_view_but_not_book(monkeypatch, client, sender):
    """
    A lobby display may read the calendar and check availability, but any
    booking, edit or cancellation is refused with 403 and leaves no trace.
    """
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())
    headers = {"X-Api-Key": DISPLAY_KEY}

    assert client.get("/meetings", headers=headers).status_code == HTTPStatus.OK
    availability = client.post(
        "/meetings/availability",
        json={
            "date": "2025-11-14",
            "start_time": {"hour": 13, "minute": 0},
            "end_time": {"hour": 14, "minute": 0},
        },
        headers=headers,
    )
    assert availability.status_code == HTTPStatus.OK

    resp = client.post("/meetings", json=_booking(), headers=headers)
    assert resp.status_code == HTTPStatus.FORBIDDEN
    assert client.patch(
        "/meetings/1", json={"title": "Hijack", "updated_by": "x@example.com"}, headers=headers
    ).status_code == HTTPStatus.FORBIDDEN
    assert client.post("/meetings/1/cancel", headers=headers).status_code == HTTPStatus.FORBIDDEN

    assert client.get("/meetings", headers=headers).json() == []
    assert sender.sent == []


def test_booking_key_can_book_and_cancel(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())
    headers = {"X-Api-Key": BOOKING_KEY}

    created = client.post("/meetings", json=_booking(), headers=headers)
    assert created.status_code == HTTPStatus.CREATED

    meeting_id = created.json()["id"]
    cancelled = client.post(f"/meetings/{meeting_id}/cancel", headers=headers)
    assert cancelled.status_code == HTTPStatus.OK
    assert client.get(f"/meetings/{meeting_id}", headers=headers).json()["is_cancelled"] is True


def test_calendar_500_when_no_key_configured_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProdUnconfigured())

    resp = client.get("/meetings")
    assert resp.status_code == HTTPStatus.INTERNAL_SERVER_ERROR


def test_local_display_key_alone_closes_booking(monkeypatch, client):
    """
    Once any key is configured, even locally, anonymous callers are refused
    and the display key never grants booking.
    """
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsLocalDisplayOnly())

    assert client.get("/meetings").status_code == HTTPStatus.UNAUTHORIZED
    assert client.get("/meetings", headers={"X-Api-Key": DISPLAY_KEY}).status_code == HTTPStatus.OK
    resp = client.post("/meetings", json=_booking(), headers={"X-Api-Key": DISPLAY_KEY})
    assert resp.status_code == HTTPStatus.FORBIDDEN


def test_health_and_rooms_are_public(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())

    assert client.get("/health").status_code == HTTPStatus.OK
    assert client.get("/rooms").status_code == HTTPStatus.OK

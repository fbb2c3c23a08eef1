from datetime import timedelta

from adwarden.models import NotificationRead
from adwarden.models.enums import VisitorEventType


def test_domains_are_canonical_and_distinct(client, seed):
    seed.platform("instagram.com")
    seed.platform("www.instagram.com")
    seed.platform("https://www.YouTube.com/")
    seed.platform("retired.com", is_active=False)

    response = client.get("/api/extension/domains")

    assert response.status_code == 200
    assert response.json() == {"domains": ["instagram.com", "youtube.com"]}


def test_domains_empty(client):
    assert client.get("/api/extension/domains").json() == {"domains": []}


def test_notifications_pull_returns_unread_once(client, seed, now):
    seed.notification("Open", "No window")
    seed.notification("Current", "In window", start_date=now - timedelta(days=1), end_date=now + timedelta(days=1))
    seed.notification("Future", "Not yet", start_date=now + timedelta(days=1))
    seed.notification("Past", "Over", end_date=now - timedelta(days=1))

    first = client.post("/api/extension/notifications", json={"visitorId": "v1"})
    second = client.post("/api/extension/notifications", json={"visitorId": "v1"})
    other = client.post("/api/extension/notifications", json={"visitorId": "v2"})

    assert first.status_code == 200
    assert [n["title"] for n in first.json()["notifications"]] == ["Open", "Current"]
    assert second.json() == {"notifications": []}
    assert len(other.json()["notifications"]) == 2

    reads = seed.session.query(NotificationRead).filter(NotificationRead.visitor_id == "v1").count()
    assert reads == 2


def test_notifications_pull_logs_an_event(client, seed):
    seed.notification()

    client.post("/api/extension/notifications", json={"visitorId": "v1"}, headers={"cf-ipcountry": "DE"})

    events = seed.events("v1")
    assert len(events) == 1
    assert events[0].type == VisitorEventType.NOTIFICATION
    assert events[0].campaign_id is None
    assert events[0].domain == "extension"
    assert events[0].country == "DE"


def test_notifications_pull_requires_visitor_id(client):
    response = client.post("/api/extension/notifications", json={})

    assert response.status_code == 400
    assert response.json()["error"] == "visitorId is required"


def test_notifications_pull_rejects_overlong_visitor_id(client, seed):
    response = client.post("/api/extension/notifications", json={"visitorId": "v" * 256})

    assert response.status_code == 400
    assert response.json()["error"] == "visitorId must be at most 255 characters"
    assert seed.events() == []


def test_notifications_pull_requires_json(client):
    response = client.post("/api/extension/notifications", data={"visitorId": "v1"})

    assert response.status_code == 400
    assert response.json()["error"] == "Content-Type must be application/json"

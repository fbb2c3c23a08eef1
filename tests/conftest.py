import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("REDIS_URL", "")

from collections.abc import Generator
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from adwarden.core.clock import utcnow
from adwarden.core.database import Base
from adwarden.core.deps import get_session_factory
from adwarden.core.redis import get_redis
from adwarden.core.security import get_password_hash
from adwarden.main import app
from adwarden.models import (
    Ad,
    Campaign,
    CampaignAd,
    CampaignCountry,
    CampaignNotification,
    CampaignPlatform,
    Notification,
    Platform,
    User,
    VisitorEvent,
)
from adwarden.models.enums import (
    CampaignStatus,
    CampaignType,
    FrequencyType,
    TargetAudience,
    UserRole,
    VisitorEventType,
)


class Seeder:
    """Inserts rows through a sync session on the test database"""

    def __init__(self, session):
        self.session = session
        self._admin = None

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def user(self, email="user@adwarden.io", password="pass1234", role=UserRole.USER, is_active=True):
        return self._save(
            User(
                email=email,
                password_hash=get_password_hash(password),
                display_name=email.split("@")[0],
                role=role,
                is_active=is_active,
            )
        )

    @property
    def admin(self):
        if self._admin is None:
            self._admin = self.user(email="admin@adwarden.io", role=UserRole.ADMIN)
        return self._admin

    def platform(self, domain, is_active=True, name=None):
        return self._save(Platform(name=name or domain, domain=domain, is_active=is_active))

    def ad(self, name="Ad", **kwargs):
        return self._save(Ad(name=name, **kwargs))

    def notification(self, title="Heads up", message="Hello", **kwargs):
        return self._save(Notification(title=title, message=message, **kwargs))

    def campaign(
        self,
        campaign_type=CampaignType.ADS,
        platforms=(),
        ad=None,
        notification=None,
        countries=(),
        **kwargs,
    ):
        kwargs.setdefault("name", f"{campaign_type.value} campaign")
        kwargs.setdefault("target_audience", TargetAudience.ALL_USERS)
        kwargs.setdefault("frequency_type", FrequencyType.ALWAYS)
        kwargs.setdefault("status", CampaignStatus.ACTIVE)
        campaign = self._save(
            Campaign(campaign_type=campaign_type, created_by=self.admin.id, **kwargs)
        )

        links = [CampaignPlatform(campaign_id=campaign.id, platform_id=p.id) for p in platforms]
        links += [CampaignCountry(campaign_id=campaign.id, country_code=code) for code in countries]
        if ad is not None:
            links.append(CampaignAd(campaign_id=campaign.id, ad_id=ad.id))
        if notification is not None:
            links.append(CampaignNotification(campaign_id=campaign.id, notification_id=notification.id))
        self.session.add_all(links)
        self.session.commit()
        return campaign

    def event(self, visitor_id, campaign=None, created_at=None, domain="example.com", type=None):
        if type is None:
            type = VisitorEventType.AD if campaign is not None else VisitorEventType.REQUEST
        event = VisitorEvent(
            visitor_id=visitor_id,
            campaign_id=campaign.id if campaign is not None else None,
            domain=domain,
            type=type,
        )
        if created_at is not None:
            event.created_at = created_at
        return self._save(event)

    def events(self, visitor_id=None):
        self.session.expire_all()
        stmt = select(VisitorEvent).order_by(VisitorEvent.id)
        if visitor_id is not None:
            stmt = stmt.where(VisitorEvent.visitor_id == visitor_id)
        return list(self.session.scalars(stmt))


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "adwarden-test.db"


@pytest.fixture()
def seed(db_path) -> Generator[Seeder, None, None]:
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(bind=engine)
    SeedSession = sessionmaker(bind=engine, expire_on_commit=False)
    session = SeedSession()
    try:
        yield Seeder(session)
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def session_factory(db_path, seed) -> async_sessionmaker[AsyncSession]:
    # NullPool: each asyncio.run / TestClient loop opens its own connections
    async_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
def redis_client():
    """Override point for tests that need a Redis double"""
    return None


@pytest.fixture()
def client(session_factory, redis_client) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_redis] = lambda: redis_client

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def login(client):
    """Returns a callable: email -> bearer auth headers"""

    def _login(email, password="pass1234"):
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200
        token = response.json()["data"]["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture()
def now() -> datetime:
    return utcnow()


class FakePubSub:
    """In-memory stand-in for a redis.asyncio PubSub connection"""

    def __init__(self, redis):
        self.redis = redis
        self.channels = set()
        self.messages = []
        self.closed = False

    async def subscribe(self, *channels):
        self.channels.update(channels)
        self.redis.subscribers.append(self)

    async def unsubscribe(self, *channels):
        self.channels.clear()

    async def get_message(self, ignore_subscribe_messages=False, timeout=0.0):
        if self.messages:
            return self.messages.pop(0)
        return None

    async def aclose(self):
        self.closed = True
        if self in self.redis.subscribers:
            self.redis.subscribers.remove(self)


class FakeRedis:
    """Minimal async Redis double covering the commands the app issues"""

    def __init__(self):
        self.values = {}
        self.expiries = {}
        self.published = []
        self.subscribers = []
        self.pubsubs = []

    async def ping(self):
        return True

    async def get(self, key):
        value = self.values.get(key)
        return None if value is None else str(value)

    async def set(self, key, value):
        self.values[key] = int(value)
        return True

    async def incr(self, key):
        self.values[key] = int(self.values.get(key, 0)) + 1
        return self.values[key]

    async def decr(self, key):
        self.values[key] = int(self.values.get(key, 0)) - 1
        return self.values[key]

    async def expire(self, key, seconds):
        self.expiries[key] = seconds
        return True

    async def publish(self, channel, data):
        self.published.append((channel, data))
        receivers = [p for p in self.subscribers if channel in p.channels]
        for pubsub in receivers:
            pubsub.messages.append({"type": "message", "channel": channel, "data": data})
        return len(receivers)

    def pubsub(self):
        pubsub = FakePubSub(self)
        self.pubsubs.append(pubsub)
        return pubsub


@pytest.fixture()
def fake_redis():
    return FakeRedis()

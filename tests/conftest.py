import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.data.database import Base, init_db
from storefront.services.confirmation_store import ConfirmationStore
from storefront.services.lock_service import LockService


class MemoryRedis:
    """The handful of redis commands LockService and ConfirmationStore issue, kept in a dict."""

    def __init__(self):
        self.data = {}

    def get(self, name):
        return self.data.get(name)

    def set(self, name, value, nx=False, ex=None):
        if nx and name in self.data:
            return None
        self.data[name] = value
        return True

    def delete(self, *names):
        return sum(1 for n in names if self.data.pop(n, None) is not None)

    def eval(self, script, numkeys, key, token):
        # compare-and-delete, the only script in use
        if self.data.get(key) == token:
            del self.data[key]
            return 1
        return 0


class Clock:
    def __init__(self, start=None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def redis_client():
    return MemoryRedis()


@pytest.fixture()
def lock_service(redis_client):
    return LockService(client=redis_client)


@pytest.fixture()
def confirmation_store(redis_client):
    return ConfirmationStore(client=redis_client)


@pytest.fixture()
def notifier():
    return MagicMock()


@pytest.fixture()
def clock():
    return Clock()

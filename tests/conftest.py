import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quotedesk.auth import get_current_user
from quotedesk.database import Base, get_db
from quotedesk.dependencies import get_notifier, get_rate_limiter
from quotedesk.main import app
from quotedesk.models import Agent, User
from quotedesk.services.notifications import Notifier
from quotedesk.services.rate_limit import InMemoryRateLimiter


class RecordingNotifier(Notifier):
    """Keeps every event so tests can assert on what the user was told."""

    def __init__(self):
        self.events = []

    def notify(self, event):
        self.events.append(event)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def user(db):
    user = User(email="agent@example.com", full_name="Test Agent", role="Agent", password_hash="x")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin(db):
    admin = User(email="admin@example.com", full_name="Admin", role="Admin", password_hash="x")
    db.add(admin)
    db.commit()
    return admin


@pytest.fixture
def agent(db):
    agent = Agent(name="Dana Reyes", company_name="Reyes Telecom", commission_rate=15)
    db.add(agent)
    db.commit()
    return agent


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def rate_limiter():
    return InMemoryRateLimiter(max_requests=100, window_seconds=60)


@pytest.fixture
def client(db, user, notifier, rate_limiter):
    """API client logged in as `user`, sharing the test session."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

import time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.db import models  # noqa: F401
from app.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter


class FakeEventLogger:
    def __init__(self):
        self.events = []

    def log(self, event):
        self.events.append(event)

    def codes(self):
        return [e.reason_code for e in self.events]


def now_ms() -> int:
    return int(time.time() * 1000)


def lead_payload(**overrides):
    data = {
        "full_name": "Jane Doe",
        "email": "Jane@Example.com",
        "phone_e164": "+14155552671",
        "phone_country": "US",
        "phone_calling_code": "+1",
        "goal_primary": "more_leads",
        "budget_currency": "USD",
        "monthly_budget_range": "6000-10000",
        "response_within_5_min": True,
        "decision_maker": True,
        "timeline": "immediate",
        "consent": True,
        "honeypot": "",
        "_submit_timestamp": now_ms() - 5000,
    }
    data.update(overrides)
    return data


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False, "timeout": 30})
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def events():
    return FakeEventLogger()


@pytest.fixture
def client(engine, events):
    from app.main import app
    from app.db.session import get_session
    from app.routers.deps import get_event_logger, get_rate_limiter

    limiter = InMemoryRateLimiter()

    def override_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_event_logger] = lambda: events
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    yield TestClient(app)
    app.dependency_overrides.clear()

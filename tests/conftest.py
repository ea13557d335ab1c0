"""Shared fixtures: a controllable clock, both store strategies and the API app."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import api_server
from budget_store import LocalBudgetStore, RemoteBudgetStore
from database import Base, get_db
from storage import DocumentStore

NOW = datetime(2026, 3, 15, 12, 0, 0)


class Clock:
    """Callable clock that tests can move around."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def days_ago(self, days: float) -> datetime:
        return self.now - timedelta(days=days)


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def documents(tmp_path) -> DocumentStore:
    return DocumentStore(root=tmp_path / "docs")


@pytest.fixture
def local_store(documents, clock) -> LocalBudgetStore:
    return LocalBudgetStore(documents, clock=clock)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def api_client(session_factory, clock):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    api_server.app.dependency_overrides[get_db] = override_get_db
    api_server.app.dependency_overrides[api_server.get_clock] = lambda: clock
    yield TestClient(api_server.app)
    api_server.app.dependency_overrides.clear()


@pytest.fixture
def remote_store(api_client) -> RemoteBudgetStore:
    return RemoteBudgetStore("http://testserver", session=api_client)


@pytest.fixture(params=["local", "remote"])
def store(request):
    """Each contract test runs once per persistence strategy."""
    return request.getfixturevalue(f"{request.param}_store")

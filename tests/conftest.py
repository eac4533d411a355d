from __future__ import annotations

from contextlib import contextmanager
import os
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from inspection_api.core.config import settings
from inspection_api.db.base import Base
from inspection_api.db.session import get_db
from inspection_api.main import create_app

# Ensure all models are registered with SQLAlchemy metadata
import inspection_api.models  # noqa: F401

WIDGETS_DDL = """
CREATE TABLE widgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT,
    price REAL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, _connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    with engine.begin() as conn:
        conn.exec_driver_sql(WIDGETS_DDL)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def _client_for(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app = create_app(engine=engine)
    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client_factory(monkeypatch):
    """Builds a client after the test has prepared its tables."""
    monkeypatch.setattr(settings, "AUTH_MODE", "legacy_header")
    return _client_for


@pytest.fixture(scope="function")
def client(engine, client_factory):
    with client_factory(engine) as test_client:
        yield test_client


def insert_widget(client, name: str, description: str | None = None, price: float | None = None) -> int:
    payload = {"name": name}
    if description is not None:
        payload["description"] = description
    if price is not None:
        payload["price"] = price
    r = client.post("/api/widgets", json=payload)
    assert r.status_code == 201, r.text
    return r.json()["id"]

"""
Shared pytest fixtures — in‑memory SQLite, a fresh receipt form and a FastAPI TestClient.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.customers.database import Base, get_db
from app.customers.models import CustomerModel  # noqa: F401  — register model
from app.main import app
from app.receipts.routers.receipts import get_entry_store, get_recognition_engine
from app.receipts.store import EntryStore
from tests.helpers import FakeEngine

# StaticPool ensures all connections share the same in-memory database
_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_Session = sessionmaker(autocommit=False, autoflush=False, bind=_ENGINE)


@pytest.fixture(autouse=True)
def _reset_tables():
    Base.metadata.create_all(bind=_ENGINE)
    yield
    Base.metadata.drop_all(bind=_ENGINE)


@pytest.fixture()
def db():
    session = _Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def entry_store():
    return EntryStore()


@pytest.fixture()
def fake_engine():
    return FakeEngine()


@pytest.fixture()
def client(db, entry_store, fake_engine):
    def _override():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_entry_store] = lambda: entry_store
    app.dependency_overrides[get_recognition_engine] = lambda: fake_engine
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

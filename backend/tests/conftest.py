import os, tempfile
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["DASHBOARD_PASSWORD"] = "test-pass"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, delete
from sqlalchemy.orm import sessionmaker

from main import app
from db import Base, get_db
from models import SurveyResponse
from schemas import SurveyResponseOut
from security import verify_dashboard
from questions import RATING_KEYS
from store import StoreError, StoreResult

@pytest.fixture(scope="session")
def tmp_db_path():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    return path

@pytest.fixture(scope="session")
def test_engine(tmp_db_path):
    url = f"sqlite:///{tmp_db_path}"
    engine = create_engine(url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    return engine

@pytest.fixture(scope="session")
def TestingSessionLocal(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

@pytest.fixture(scope="session", autouse=True)
def override_di(TestingSessionLocal):
    def _get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[verify_dashboard] = lambda: None

@pytest.fixture(autouse=True)
def clean_table(TestingSessionLocal):
    yield
    with TestingSessionLocal() as db:
        db.execute(delete(SurveyResponse))
        db.commit()

@pytest.fixture
def db_session(TestingSessionLocal):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client():
    return TestClient(app)


def ratings(value="3", **overrides):
    out = {k: value for k in RATING_KEYS}
    out.update(overrides)
    return out


@pytest.fixture
def make_record():
    """Build in-memory records; ids count up, created_at counts down (newest first)."""
    base = datetime(2026, 10, 19, 13, 35, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _make(name="Alice Smith", email="alice@example.com", responses=None, suggestions=""):
        counter["n"] += 1
        n = counter["n"]
        return SurveyResponseOut(
            id=n,
            name=name,
            email=email,
            responses=responses or ratings(),
            suggestions=suggestions,
            created_at=base - timedelta(minutes=n),
        )
    return _make


class FakeStore:
    """In-memory stand-in for ResponseStore that can be told to fail."""

    def __init__(self, records=(), fail_reads=False, fail_writes=False):
        self.records = list(records)
        self.inserted = []
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    def list_all(self):
        if self.fail_reads:
            return StoreResult(error=StoreError("connection refused", "list_all"))
        return StoreResult(data=list(self.records))

    def insert_one(self, record):
        if self.fail_writes:
            return StoreResult(error=StoreError("connection refused", "insert_one"))
        self.inserted.append(record)
        return StoreResult(data=record)


@pytest.fixture
def fake_store():
    return FakeStore


@pytest.fixture
def rate():
    return ratings

"""Shared test fixtures for Sponta tests.

- In-memory SQLite database per test (schema created from the models)
- Factories for users and catalog challenges
- A scripted stand-in for the photo verifier
- FastAPI test client wired to the test database

Usage:
    def test_something(db, make_user, make_challenge):
        user = make_user()
        ...
"""

import os

# Settings are read at import time; pin them before sponta is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = ""
os.environ["GOOGLE_API_KEY"] = ""
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["AUTO_CREATE_SCHEMA"] = "0"

from collections.abc import Generator
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sponta.crud.challenges import create_challenge
from sponta.crud.user import upsert_user
from sponta.models import Base
from sponta.services.challenges import complete_challenge
from sponta.services.verification import VerificationResult, Verdict


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


# ─────────────────────────────────────────────────────────────────────────────
# Data Factories
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_user(db):
    def _make(user_id: str = "user-1", display_name: str = "Test User"):
        return upsert_user(db, user_id, display_name)

    return _make


@pytest.fixture
def make_challenge(db):
    def _make(**overrides):
        data = {
            "title": "Go for a 10-minute run",
            "description": "Run around the block for ten minutes.",
            "category": "fitness",
            "difficulty": "easy",
            "points": 10,
            "frequency": "daily",
        }
        data.update(overrides)
        return create_challenge(db, data)

    return _make


def at(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, 0, tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────────────────────
# Verifier Stand-in
# ─────────────────────────────────────────────────────────────────────────────


class ScriptedVerifier:
    """Returns queued results in order; repeats the last one when the queue runs dry."""

    def __init__(self, *results: VerificationResult):
        self.results = list(results) or [rejected()]
        self.calls = []

    def verify(self, challenge, photo_url, location=None) -> VerificationResult:
        self.calls.append({"challenge": challenge, "photo_url": photo_url, "location": location})
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


def approved(confidence: float = 0.9) -> VerificationResult:
    return VerificationResult(outcome=Verdict.VERIFIED, confidence=confidence, reasoning="looks right")


def rejected(confidence: float = 0.2) -> VerificationResult:
    return VerificationResult(outcome=Verdict.NOT_VERIFIED, confidence=confidence, reasoning="indoors at a desk")


class CompletingElsewhere:
    """Approves, but first lets a second session complete the same challenge.

    Reproduces two overlapping completion requests: the second one lands
    while the first is still waiting on its verdict.
    """

    def __init__(self, session_factory, user_id: str, challenge_id: str):
        self.session_factory = session_factory
        self.user_id = user_id
        self.challenge_id = challenge_id
        self.inner_points = None

    def verify(self, challenge, photo_url, location=None) -> VerificationResult:
        if self.inner_points is None:
            with self.session_factory() as other:
                result = complete_challenge(
                    other,
                    self.user_id,
                    self.challenge_id,
                    "https://img/other.jpg",
                    verifier=ScriptedVerifier(approved()),
                )
                self.inner_points = result.points_earned
        return approved()


@pytest.fixture
def approving_verifier() -> ScriptedVerifier:
    return ScriptedVerifier(approved())


@pytest.fixture
def rejecting_verifier() -> ScriptedVerifier:
    return ScriptedVerifier(rejected())


# ─────────────────────────────────────────────────────────────────────────────
# API Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def api_verifier() -> ScriptedVerifier:
    return ScriptedVerifier(approved())


@pytest.fixture
def client(session_factory, api_verifier):
    """Test client with the database and verifier dependencies swapped out.

    Used without a ``with`` block so startup seeding does not run.
    """
    from fastapi.testclient import TestClient

    from api_main import app
    from sponta.api.deps import get_db, get_photo_verifier

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_photo_verifier] = lambda: api_verifier
    yield TestClient(app)
    app.dependency_overrides.clear()

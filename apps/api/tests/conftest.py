"""
Pytest configuration and fixtures

Every test gets its own in-memory SQLite database with the schema created
from the models, so nothing leaks between tests. Time and text generation
are pinned through FixedClock and FakeTextGenerator.
"""
import os
import sys
from datetime import datetime, timezone

# Must be set before core.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("USE_AI", "false")

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.clock import FixedClock, get_clock
from core.database import Base, get_db
from services.sleep_repository import SleepRepository
from services.text_generation import get_text_generator
from tests.fakes import FakeTextGenerator
import models  # noqa: F401

NOW = datetime(2025, 2, 12, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Session on a throwaway database; discarded with the engine."""
    Session = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def repo(db_session):
    return SleepRepository(db_session)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def fake_generator():
    return FakeTextGenerator()


@pytest.fixture
def test_user(repo, db_session):
    user = repo.upsert_user("Layla", "layla@example.com", 21, NOW)
    db_session.commit()
    return user


@pytest.fixture
def test_profile(repo, db_session, test_user):
    profile = repo.create_profile(test_user.id, "23:00", "07:00", ["phone", "stress"], NOW)
    db_session.commit()
    return profile


@pytest.fixture
def client(db_engine, clock, fake_generator):
    """TestClient wired to the per-test database, clock and generator."""
    from fastapi.testclient import TestClient
    from main import app

    Session = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)

    def _get_db():
        db = Session()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_text_generator] = lambda: fake_generator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

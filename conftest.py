"""
Shared pytest fixtures - in-memory SQLite database per test
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fixture_models import FixtureBase


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    FixtureBase.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def token_sequence(monkeypatch):
    """
    Make the generator return the given values first, then random ones

    Usage:
        calls = token_sequence("AAAA", "BBBB")
    """
    import secure_token.core.secure_token as core

    real = core.generate_secure_token

    def install(*values):
        pending = list(values)
        calls = []

        def fake(length):
            value = pending.pop(0) if pending else real(length)
            calls.append(value)
            return value

        monkeypatch.setattr(core, "generate_secure_token", fake)
        return calls

    return install

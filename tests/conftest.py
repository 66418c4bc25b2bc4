"""Pytest configuration and fixtures for draftable tests"""

import sys
from pathlib import Path

import pytest

# Ensure the src directory is importable without an install
project_root = Path(__file__).resolve().parent.parent
src_path = project_root / "src"

for path in (project_root, src_path):
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from draftable.clock import FixedClock, set_clock
from tests.draftable.models import Base


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh in-memory database for each test"""
    # StaticPool makes every connection share the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for each test"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    """Pin the wall clock to 2024-06-01 12:00 UTC for the duration of a test"""
    fixed = FixedClock("2024-06-01T12:00:00+00:00")
    previous = set_clock(fixed)
    yield fixed
    set_clock(previous)

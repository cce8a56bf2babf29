"""Shared test fixtures for the scoring engine tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add scripts directory to path so all tests can import from it
SCRIPTS_DIR = str(Path(__file__).resolve().parent.parent / "scripts")
if SCRIPTS_DIR not in sys.path:
    sys.path.insert(0, SCRIPTS_DIR)

PROJECT_ROOT = str(Path(__file__).resolve().parent.parent)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture
def db_session():
    """In-memory SQLite session with the assessment schema.

    Each test gets a fresh database to avoid conflicts.
    """
    import sqlalchemy
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker

    from models.base import Base

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
    )

    @sqlalchemy.event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def deletion_call():
    from assessment.records import CNVCall

    return CNVCall(id="cnv-del-1", type="Deletion")


@pytest.fixture
def amplification_call():
    from assessment.records import CNVCall

    return CNVCall(id="cnv-amp-1", type="Amplification")


@pytest.fixture
def loss_criteria():
    """Default (empty) Loss framework criteria."""
    from scoring.criteria_schema import default_criteria

    return default_criteria("Loss")


@pytest.fixture
def gain_criteria():
    """Default (empty) Gain framework criteria."""
    from scoring.criteria_schema import default_criteria

    return default_criteria("Gain")

"""Pytest configuration and shared fixtures."""

import datetime as dt

import pytest

from shiftplan.config import SchedulerConfig
from shiftplan.domain.db import DatabaseManager
from shiftplan.domain.models import Profile, ShiftTemplate


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    db = DatabaseManager("sqlite:///:memory:")
    db.create_tables()
    session = db.get_session()
    yield session
    session.close()


@pytest.fixture
def cfg():
    return SchedulerConfig(timezone="Europe/Bucharest")


@pytest.fixture
def profiles(db_session):
    """One admin and three members."""
    people = [
        Profile(id="admin-1", full_name="Ana Admin", email="ana@example.com", role="admin"),
        Profile(id="u-1", full_name="Bogdan Pop", email="bogdan@example.com", role="member"),
        Profile(id="u-2", full_name="Carmen Ion", email="carmen@example.com", role="member"),
        Profile(id="u-3", full_name="Dan Radu", email="dan@example.com", role="member"),
    ]
    db_session.add_all(people)
    db_session.commit()
    return {p.id: p for p in people}


@pytest.fixture
def admin(profiles):
    return profiles["admin-1"]


@pytest.fixture
def member(profiles):
    return profiles["u-1"]


@pytest.fixture
def templates(db_session):
    """Regular day, overnight and split templates."""
    rows = [
        ShiftTemplate(name="Day", start_time=dt.time(9, 0), end_time=dt.time(17, 0)),
        ShiftTemplate(name="Night", start_time=dt.time(22, 0), end_time=dt.time(6, 0), is_overnight=True),
        ShiftTemplate(
            name="Split",
            start_time=dt.time(9, 0),
            end_time=dt.time(12, 0),
            is_split=True,
            split_start_time=dt.time(14, 0),
            split_end_time=dt.time(18, 0),
        ),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return {t.name: t for t in rows}

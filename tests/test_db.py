"""Tests for database initialization helpers."""

import datetime as dt

from sqlalchemy import inspect

from shiftplan.domain.db import DatabaseManager, create_db_engine, get_session, init_database, reset_database
from shiftplan.domain.models import Profile, utc_now
from shiftplan.services.tasks import ScheduledTaskService


def test_init_database_creates_tables(tmp_path):
    url = f"sqlite:///{tmp_path / 'plan.db'}"
    init_database(url)

    tables = set(inspect(create_db_engine(url)).get_table_names())
    assert {"profiles", "shift_templates", "user_schedules", "scheduled_tasks", "routine_tasks", "personal_events"} <= tables


def test_reset_database_clears_rows(tmp_path):
    url = f"sqlite:///{tmp_path / 'plan.db'}"
    init_database(url)
    session = get_session(url)
    session.add(Profile(id="u-1", full_name="Bogdan Pop", role="member"))
    session.commit()
    session.close()

    reset_database(url)

    session = get_session(url)
    assert session.query(Profile).count() == 0
    session.close()


def test_database_manager_drop_tables(tmp_path):
    db = DatabaseManager(f"sqlite:///{tmp_path / 'plan.db'}")
    db.create_tables()
    assert "user_schedules" in inspect(db.engine).get_table_names()

    db.drop_tables()
    assert inspect(db.engine).get_table_names() == []


def test_utc_now_is_naive_utc():
    before = dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)
    stamp = utc_now()
    assert stamp.tzinfo is None
    assert before <= stamp <= before + dt.timedelta(seconds=5)


def test_created_at_defaults_to_naive_utc(db_session, member):
    task = ScheduledTaskService(db_session).create_task(member, "Report", dt.date(2025, 11, 24), "09:00", "10:00")
    assert task.created_at.tzinfo is None
    assert abs(task.created_at - utc_now()) < dt.timedelta(minutes=1)

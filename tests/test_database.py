"""
Tests for database ORM models and helpers (job_tracker/database/db.py).

Uses SQLite in-memory databases with foreign keys switched on by the
engine's connect hook.
"""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from job_tracker.database.db import (
    Application,
    Company,
    StatusHistoryEntry,
    User,
    create_db_engine,
    init_database,
)
from job_tracker.services.applications import update_application


# ============================================================
# Engine
# ============================================================


class TestEngine:
    def test_sqlite_foreign_keys_enabled(self, engine):
        with engine.connect() as connection:
            assert connection.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_init_database_creates_tables(self):
        engine = create_db_engine("sqlite://")
        init_database(engine)
        with engine.connect() as connection:
            names = {row[0] for row in connection.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))}
        engine.dispose()
        assert {"users", "companies", "applications", "status_history", "interviews", "tasks", "documents"} <= names


# ============================================================
# Models
# ============================================================


class TestModels:
    def test_application_defaults(self, db_session, user, company):
        application = Application(user_id=user.id, company_id=company.id, position_title="Analyst")
        db_session.add(application)
        db_session.commit()

        assert application.status == "applied"
        assert application.priority == "medium"
        assert application.employment_type == "full_time"
        assert application.work_type == "remote"
        assert application.application_date is not None

    def test_company_name_unique_per_user(self, db_session, user):
        db_session.add(Company(user_id=user.id, name="Duplicate"))
        db_session.commit()

        db_session.add(Company(user_id=user.id, name="Duplicate"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_email_unique(self, db_session, user):
        db_session.add(User(email=user.email, password_hash="x"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_application_requires_existing_company(self, db_session, user):
        db_session.add(Application(user_id=user.id, company_id=9999, position_title="Ghost"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_history_ordered_by_time(self, db_session, user, application):
        update_application(db_session, user.id, application.id, {"status": "reviewing"})
        update_application(db_session, user.id, application.id, {"status": "rejected"})
        db_session.expire_all()

        history = db_session.get(Application, application.id).status_history
        assert [entry.new_status for entry in history] == ["applied", "reviewing", "rejected"]
        assert all(isinstance(entry, StatusHistoryEntry) for entry in history)

    def test_deleting_user_removes_their_data(self, db_session, user, application):
        db_session.delete(user)
        db_session.commit()
        db_session.expire_all()

        assert db_session.query(Company).count() == 0
        assert db_session.query(Application).count() == 0
        assert db_session.query(StatusHistoryEntry).count() == 0

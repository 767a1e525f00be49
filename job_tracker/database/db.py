"""
Database connection and models for the Job Tracker
Uses SQLAlchemy; SQLite locally, PostgreSQL in deployment
"""

import sqlite3
from datetime import datetime, timezone
from typing import Generator, Optional

from loguru import logger
from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text,
    UniqueConstraint, create_engine, event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from job_tracker.config import config
from job_tracker.core.field_mapper import (
    ApplicationStatus, DocumentType, EmploymentType, InterviewType, Priority, WorkType,
)

Base = declarative_base()


def utc_now() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================
# MODELS
# ============================================

class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    companies = relationship("Company", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    applications = relationship("Application", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)


class Company(Base):
    __tablename__ = 'companies'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    website = Column(String(500))
    industry = Column(String(50))
    location = Column(String(100))
    description = Column(Text)
    notes = Column(Text)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (UniqueConstraint('user_id', 'name'),)

    # Relationships
    user = relationship("User", back_populates="companies")
    applications = relationship("Application", back_populates="company", passive_deletes=True)


class Application(Base):
    __tablename__ = 'applications'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey('companies.id', ondelete='CASCADE'), nullable=False, index=True)

    position_title = Column(String(200), nullable=False)
    application_date = Column(DateTime, default=utc_now, nullable=False)
    status = Column(String(30), nullable=False, default=ApplicationStatus.APPLIED.value, index=True)
    priority = Column(String(20), nullable=False, default=Priority.MEDIUM.value)
    employment_type = Column(String(20), default=EmploymentType.FULL_TIME.value)
    work_type = Column(String(20), default=WorkType.REMOTE.value)

    location = Column(String(200))
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    source = Column(String(200))
    notes = Column(Text)

    job_description = Column(Text)
    requirements = Column(Text)
    salary_range = Column(String(100))
    application_url = Column(String(500))
    referral_source = Column(String(200))

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    user = relationship("User", back_populates="applications")
    company = relationship("Company", back_populates="applications")
    status_history = relationship(
        "StatusHistoryEntry", back_populates="application",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: [StatusHistoryEntry.occurred_at, StatusHistoryEntry.id],
    )
    interviews = relationship(
        "Interview", back_populates="application",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: [Interview.scheduled_date, Interview.id],
    )
    tasks = relationship("Task", back_populates="application", cascade="all, delete-orphan", passive_deletes=True)
    documents = relationship("Document", back_populates="application", cascade="all, delete-orphan", passive_deletes=True)


class StatusHistoryEntry(Base):
    """One status transition; written once, never modified"""
    __tablename__ = 'status_history'

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey('applications.id', ondelete='CASCADE'), nullable=False, index=True)

    previous_status = Column(String(30))
    new_status = Column(String(30), nullable=False)
    note = Column(Text)
    occurred_at = Column(DateTime, default=utc_now, nullable=False)

    # Relationships
    application = relationship("Application", back_populates="status_history")


class ImmutableHistoryError(RuntimeError):
    pass


@event.listens_for(StatusHistoryEntry, "before_update")
def _reject_history_update(mapper, connection, target):
    raise ImmutableHistoryError(f"Status history entry {target.id} is append-only")


class Interview(Base):
    __tablename__ = 'interviews'

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey('applications.id', ondelete='CASCADE'), nullable=False, index=True)

    type = Column(String(20), nullable=False, default=InterviewType.PHONE.value)
    title = Column(String(200))
    scheduled_date = Column(DateTime)
    duration = Column(Integer)
    status = Column(String(20), nullable=False, default="scheduled")

    interviewer_name = Column(String(200))
    interviewer_email = Column(String(255))
    interviewer_title = Column(String(200))

    location = Column(String(500))
    meeting_link = Column(String(500))
    meeting_id = Column(String(100))

    preparation_notes = Column(Text)
    interview_notes = Column(Text)
    feedback = Column(Text)
    next_steps = Column(Text)
    outcome = Column(String(20))
    follow_up_date = Column(DateTime)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    application = relationship("Application", back_populates="interviews")


class Task(Base):
    __tablename__ = 'tasks'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    application_id = Column(Integer, ForeignKey('applications.id', ondelete='CASCADE'), index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text)
    type = Column(String(50), nullable=False, default="custom")
    due_date = Column(DateTime)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime)
    priority = Column(String(20), nullable=False, default=Priority.MEDIUM.value)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    application = relationship("Application", back_populates="tasks")


class Document(Base):
    __tablename__ = 'documents'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    application_id = Column(Integer, ForeignKey('applications.id', ondelete='CASCADE'), index=True)

    name = Column(String(255), nullable=False)
    original_filename = Column(String(255))
    stored_filename = Column(String(255))
    url = Column(String(500), nullable=False)
    type = Column(String(30), nullable=False, default=DocumentType.RESUME.value)
    mime_type = Column(String(100))
    size = Column(Integer)
    file_extension = Column(String(20))
    category = Column(String(100))
    description = Column(Text)
    tags = Column(JSON, default=list)
    version = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)

    uploaded_at = Column(DateTime, default=utc_now, nullable=False)

    # Relationships
    application = relationship("Application", back_populates="documents")


# ============================================
# DATABASE CONNECTION
# ============================================

@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_database_url() -> str:
    """Get database URL from configuration"""
    db_url = config.database.url
    if not db_url:
        raise ValueError("Database URL not configured. Set DATABASE_URL.")
    return db_url


def create_db_engine(db_url: Optional[str] = None, **kwargs) -> Engine:
    """Create SQLAlchemy engine"""
    db_url = db_url or get_database_url()
    if db_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(db_url, echo=config.database.echo, **kwargs)


def get_engine() -> Engine:
    """Process-wide engine, created on first use"""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine())
    return _session_factory


def get_session() -> Generator[Session, None, None]:
    """Yield a request-scoped session; rolled back and closed on the way out"""
    session = get_session_factory()()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_database(engine: Optional[Engine] = None):
    """Initialize database tables"""
    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database tables created successfully")

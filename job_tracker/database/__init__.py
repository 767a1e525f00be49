"""
Job Tracker Database

SQLAlchemy models for:
- Users and their companies
- Applications with append-only status history
- Interviews, tasks and uploaded documents
"""

from .db import (
    Base,
    User,
    Company,
    Application,
    StatusHistoryEntry,
    Interview,
    Task,
    Document,
    ImmutableHistoryError,
    utc_now,
    get_engine,
    get_session,
    init_database,
)

__all__ = [
    'Base',
    'User',
    'Company',
    'Application',
    'StatusHistoryEntry',
    'Interview',
    'Task',
    'Document',
    'ImmutableHistoryError',
    'utc_now',
    'get_engine',
    'get_session',
    'init_database',
]

"""Enum vocabularies, field mapping and the error taxonomy."""

from .errors import TrackerError, ValidationError, AuthError, NotFoundError, ConflictError
from .field_mapper import (
    ApplicationStatus,
    Priority,
    EmploymentType,
    WorkType,
    InterviewType,
    InterviewOutcome,
    DocumentType,
    to_storage,
    to_presentation,
)

__all__ = [
    'TrackerError',
    'ValidationError',
    'AuthError',
    'NotFoundError',
    'ConflictError',
    'ApplicationStatus',
    'Priority',
    'EmploymentType',
    'WorkType',
    'InterviewType',
    'InterviewOutcome',
    'DocumentType',
    'to_storage',
    'to_presentation',
]

"""
Job Application Tracker

REST backend for tracking job applications across companies, with an
append-only status history on every application.

Modules:
- config: Environment-based settings
- core: Enum vocabularies, field mapping, error taxonomy
- database: SQLAlchemy models and session management
- services: Owner-scoped operations per resource
- api: FastAPI app, routers and schemas
"""

__version__ = "0.1.0"
__author__ = "Job Tracker Team"

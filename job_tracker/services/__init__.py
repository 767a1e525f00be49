"""
Owner-scoped operations, one module per resource.

Every function takes the request's SQLAlchemy session and the caller's
user id, and raises job_tracker.core.errors types on failure.
"""

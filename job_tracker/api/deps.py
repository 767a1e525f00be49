"""
Shared FastAPI dependencies - database session and the authenticated user
"""
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from job_tracker.database.db import User, get_session
from job_tracker.services.auth import resolve_token_user

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """One session per request, always closed"""
    yield from get_session()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else None
    return resolve_token_user(session, token)

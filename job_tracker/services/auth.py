"""
Authentication service

Registers users, checks credentials and issues / verifies the HS256 bearer
tokens every other route requires.
"""
import re
from datetime import timedelta
from typing import Any, Dict, Optional

import bcrypt
import jwt
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from job_tracker.config import config
from job_tracker.core.errors import AuthError, ConflictError
from job_tracker.database.db import User, utc_now

EMAIL_TAKEN = "User with this email already exists"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def parse_duration(value: str) -> timedelta:
    """Parse "30m" / "12h" / "7d" style lifetimes; bare numbers are seconds"""
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


# ============================================
# PASSWORDS
# ============================================

def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.auth.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(
            password.encode("utf-8")[:_BCRYPT_MAX_BYTES],
            password_hash.encode("utf-8"),
        )
    except ValueError:
        logger.warning("[Auth] Stored password hash is malformed")
        return False


# ============================================
# TOKENS
# ============================================

def _jwt_secret() -> str:
    secret = config.auth.jwt_secret
    if not secret:
        raise RuntimeError("JWT_SECRET environment variable is required")
    return secret


def create_access_token(user: User) -> str:
    """Issue a signed token carrying the user's id and email"""
    issued_at = utc_now()
    payload = {
        "userId": user.id,
        "email": user.email,
        "iat": issued_at,
        "exp": issued_at + parse_duration(config.auth.jwt_expires_in),
    }
    return jwt.encode(payload, _jwt_secret(), algorithm=config.auth.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify a bearer token.

    Raises:
        AuthError: token expired, malformed, or signed with another key
    """
    try:
        payload = jwt.decode(token, _jwt_secret(), algorithms=[config.auth.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")

    if not isinstance(payload.get("userId"), int):
        raise AuthError("Invalid token")
    return payload


def resolve_token_user(session: Session, token: Optional[str]) -> User:
    """Map a bearer token to a live user"""
    if not token:
        raise AuthError("Access token required")

    payload = decode_access_token(token)
    user = session.get(User, payload["userId"])
    if user is None:
        raise AuthError("User not found")
    return user


# ============================================
# USERS
# ============================================

def _ensure_email_available(session: Session, email: str):
    if session.query(User).filter_by(email=email).first():
        raise ConflictError(EMAIL_TAKEN)


def register_user(
    session: Session,
    email: str,
    password: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> User:
    """Create a user; the email must not be taken"""
    _ensure_email_available(session, email)

    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name or None,
        last_name=last_name or None,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError(EMAIL_TAKEN)
    session.refresh(user)
    logger.info(f"[Auth] Registered user {user.id}")
    return user


def authenticate(session: Session, email: str, password: str) -> User:
    """Check credentials; unknown email and wrong password look the same"""
    user = session.query(User).filter_by(email=email).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("[Auth] Failed login attempt")
        raise AuthError("Invalid email or password")
    return user

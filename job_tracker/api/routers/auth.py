"""
Auth endpoints - register, login and token refresh
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from job_tracker.api.deps import get_current_user, get_db
from job_tracker.api.schemas.models import (
    AuthResponse, LoginRequest, MessageResponse, RegisterRequest, TokenResponse, UserEnvelope,
)
from job_tracker.database.db import User
from job_tracker.services import auth as auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(payload: RegisterRequest, session: Session = Depends(get_db)):
    """Create an account and return a token for it"""
    user = auth_service.register_user(
        session,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    return {
        "message": "User registered successfully",
        "user": user,
        "token": auth_service.create_access_token(user),
    }


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, session: Session = Depends(get_db)):
    user = auth_service.authenticate(session, payload.email, payload.password)
    return {
        "message": "Login successful",
        "user": user,
        "token": auth_service.create_access_token(user),
    }


@router.get("/me", response_model=UserEnvelope)
def me(user: User = Depends(get_current_user)):
    return {"user": user}


@router.post("/refresh", response_model=TokenResponse)
def refresh(user: User = Depends(get_current_user)):
    """Issue a fresh token for a still-valid one"""
    return {
        "message": "Token refreshed successfully",
        "token": auth_service.create_access_token(user),
    }


@router.post("/logout", response_model=MessageResponse)
def logout(user: User = Depends(get_current_user)):
    # Tokens are stateless; the client discards its copy
    return {"message": "Logout successful"}

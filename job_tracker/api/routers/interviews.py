"""
Interview endpoints for the Job Tracker API
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from job_tracker.api.deps import get_current_user, get_db
from job_tracker.api.schemas.models import (
    InterviewCreate, InterviewEnvelope, InterviewListResponse, InterviewStatsResponse,
    InterviewUpdate, MessageResponse, Pagination,
)
from job_tracker.database.db import User
from job_tracker.services import interviews as interview_service

router = APIRouter(prefix="/api/interviews", tags=["interviews"])


@router.get("", response_model=InterviewListResponse)
def list_interviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=interview_service.MAX_PAGE_SIZE),
    interview_type: Optional[str] = Query(None, alias="type"),
    application_id: Optional[int] = Query(None, alias="applicationId"),
    upcoming: bool = False,
    search: Optional[str] = None,
    sort_by: str = Query("scheduledDate", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder", pattern="^(asc|desc)$"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    interviews, total = interview_service.list_interviews(
        session, user.id,
        page=page, limit=limit,
        interview_type=interview_type, application_id=application_id,
        upcoming=upcoming, search=search,
        sort_by=sort_by, sort_order=sort_order,
    )
    return {"interviews": interviews, "pagination": Pagination.build(page, limit, total)}


@router.get("/upcoming", response_model=InterviewListResponse)
def get_upcoming_interviews(
    limit: int = Query(5, ge=1, le=50),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Next scheduled interviews, soonest first"""
    return {"interviews": interview_service.upcoming_interviews(session, user.id, limit=limit)}


@router.get("/stats", response_model=InterviewStatsResponse)
def get_interview_stats(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    return interview_service.interview_stats(session, user.id)


@router.get("/{interview_id}", response_model=InterviewEnvelope)
def get_interview(
    interview_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    return {"interview": interview_service.get_owned_interview(session, user.id, interview_id)}


@router.post("", response_model=InterviewEnvelope, status_code=201)
def create_interview(
    payload: InterviewCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    interview = interview_service.create_interview(session, user.id, payload.model_dump(exclude_unset=True))
    return {"message": "Interview scheduled successfully", "interview": interview}


@router.put("/{interview_id}", response_model=InterviewEnvelope)
def update_interview(
    interview_id: int,
    payload: InterviewUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    data = payload.model_dump(exclude_unset=True)
    # An interview stays with the application it was scheduled for
    data.pop("application_id", None)
    interview = interview_service.update_interview(session, user.id, interview_id, data)
    return {"message": "Interview updated successfully", "interview": interview}


@router.delete("/{interview_id}", response_model=MessageResponse)
def delete_interview(
    interview_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    interview_service.delete_interview(session, user.id, interview_id)
    return {"message": "Interview deleted successfully"}

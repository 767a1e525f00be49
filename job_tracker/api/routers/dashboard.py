"""
Dashboard endpoints for the Job Tracker API
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from job_tracker.api.deps import get_current_user, get_db
from job_tracker.api.schemas.models import ActivityResponse, DashboardStatsResponse, InsightsResponse
from job_tracker.database.db import User
from job_tracker.services import dashboard as dashboard_service

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
def get_dashboard_stats(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Overview numbers for the dashboard.

    Returns:
    - totals, response rate and interview rate
    - count per status
    - five most recent applications
    - per-status counts for each of the last six months
    """
    return dashboard_service.dashboard_stats(session, user.id)


@router.get("/activity", response_model=ActivityResponse)
def get_recent_activity(
    limit: int = Query(10, ge=1, le=50),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    return {"activities": dashboard_service.recent_activity(session, user.id, limit=limit)}


@router.get("/insights", response_model=InsightsResponse)
def get_insights(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Suggestions, headline metrics and quick actions"""
    return dashboard_service.dashboard_insights(session, user.id)

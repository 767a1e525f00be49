"""
Application endpoints for the Job Tracker API

Reads return stored enum values ("full_time", "on_site"); the only view in
form spelling is GET /{id}/form. Writes accept either spelling.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from job_tracker.api.deps import get_current_user, get_db
from job_tracker.api.schemas.models import (
    ApplicationCreate, ApplicationDetailEnvelope, ApplicationEnvelope, ApplicationListItem,
    ApplicationListResponse, ApplicationResponse, ApplicationUpdate, BulkDeleteRequest,
    BulkDeleteResponse, MessageResponse, Pagination, StatusHistoryListResponse,
)
from job_tracker.database.db import User
from job_tracker.services import applications as application_service

router = APIRouter(prefix="/api/applications", tags=["applications"])


@router.get("", response_model=ApplicationListResponse)
def list_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=application_service.MAX_PAGE_SIZE),
    status: Optional[str] = None,
    priority: Optional[str] = None,
    company_id: Optional[int] = Query(None, alias="companyId"),
    search: Optional[str] = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Page through applications with interview and task counts.

    Filters: status, priority, companyId, search (title, company, location).
    """
    rows, total = application_service.list_applications(
        session, user.id,
        page=page, limit=limit,
        status=status, priority=priority, company_id=company_id, search=search,
        sort_by=sort_by, sort_order=sort_order,
    )
    items = [
        ApplicationListItem.model_validate(application).model_copy(
            update={"interview_count": interviews, "task_count": tasks}
        )
        for application, interviews, tasks in rows
    ]
    return {"applications": items, "pagination": Pagination.build(page, limit, total)}


@router.delete("/bulk", response_model=BulkDeleteResponse)
def bulk_delete_applications(
    payload: BulkDeleteRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Delete several applications at once; all ids must belong to the caller"""
    deleted = application_service.bulk_delete_applications(session, user.id, payload.ids)
    return {
        "message": f"{deleted} application(s) deleted successfully",
        "deleted_count": deleted,
    }


@router.get("/{application_id}", response_model=ApplicationDetailEnvelope)
def get_application(
    application_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Application with company, status history, interviews, tasks and documents"""
    application = application_service.get_application_detail(session, user.id, application_id)
    return {"application": application}


@router.get("/{application_id}/form", response_model=ApplicationEnvelope)
def get_application_form(
    application_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Application with enum fields in the spellings the edit form uses"""
    application = application_service.get_owned_application(session, user.id, application_id)
    form = ApplicationResponse.model_validate(application).model_copy(
        update=application_service.form_values(application)
    )
    return {"application": form}


@router.get("/{application_id}/history", response_model=StatusHistoryListResponse)
def get_application_history(
    application_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    history = application_service.get_status_history(session, user.id, application_id)
    return {"history": history}


@router.post("", response_model=ApplicationEnvelope, status_code=201)
def create_application(
    payload: ApplicationCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    application = application_service.create_application(
        session, user.id, payload.model_dump(exclude_unset=True)
    )
    return {"message": "Application created successfully", "application": application}


@router.put("/{application_id}", response_model=ApplicationEnvelope)
def update_application(
    application_id: int,
    payload: ApplicationUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Partial update; a status change is recorded in the history"""
    application = application_service.update_application(
        session, user.id, application_id, payload.model_dump(exclude_unset=True)
    )
    return {"message": "Application updated successfully", "application": application}


@router.delete("/{application_id}", response_model=MessageResponse)
def delete_application(
    application_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    application_service.delete_application(session, user.id, application_id)
    return {"message": "Application deleted successfully"}

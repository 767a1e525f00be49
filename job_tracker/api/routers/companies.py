"""
Company endpoints for the Job Tracker API
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from job_tracker.api.deps import get_current_user, get_db
from job_tracker.api.schemas.models import (
    ApplicationSummary, CompanyCreate, CompanyDetail, CompanyEnvelope, CompanyListResponse,
    CompanyResponse, CompanyStatsResponse, CompanyUpdate, MessageResponse,
)
from job_tracker.database.db import Company, User
from job_tracker.services import companies as company_service

router = APIRouter(prefix="/api/companies", tags=["companies"])


def _detail(company: Company, applications, application_count: int) -> CompanyDetail:
    return CompanyDetail.model_validate(company).model_copy(update={
        "applications": [ApplicationSummary.model_validate(a) for a in applications],
        "application_count": application_count,
    })


@router.get("", response_model=CompanyListResponse)
def list_companies(
    search: Optional[str] = None,
    industry: Optional[str] = None,
    sort_by: str = Query("name", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder", pattern="^(asc|desc)$"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    rows = company_service.list_companies(
        session, user.id, search=search, industry=industry, sort_by=sort_by, sort_order=sort_order,
    )
    return {
        "companies": [
            CompanyResponse.model_validate(company).model_copy(update={"application_count": count})
            for company, count in rows
        ]
    }


@router.get("/stats/overview", response_model=CompanyStatsResponse)
def get_company_stats(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Company count, top five industries and number of distinct industries"""
    return company_service.company_stats(session, user.id)


@router.get("/{company_id}", response_model=CompanyEnvelope)
def get_company(
    company_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Company with its ten most recent applications"""
    company, recent, count = company_service.get_company_detail(session, user.id, company_id)
    return {"company": _detail(company, recent, count)}


@router.post("", response_model=CompanyEnvelope, status_code=201)
def create_company(
    payload: CompanyCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    company = company_service.create_company(session, user.id, payload.model_dump(exclude_unset=True))
    return {"message": "Company created successfully", "company": _detail(company, [], 0)}


@router.put("/{company_id}", response_model=CompanyEnvelope)
def update_company(
    company_id: int,
    payload: CompanyUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    company = company_service.update_company(
        session, user.id, company_id, payload.model_dump(exclude_unset=True)
    )
    _, recent, count = company_service.get_company_detail(session, user.id, company.id)
    return {"message": "Company updated successfully", "company": _detail(company, recent, count)}


@router.delete("/{company_id}", response_model=MessageResponse)
def delete_company(
    company_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Refused while the company still has applications"""
    company_service.delete_company(session, user.id, company_id)
    return {"message": "Company deleted successfully"}

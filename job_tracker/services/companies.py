"""
Company service - owner-scoped CRUD over a user's companies
"""
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from job_tracker.core.errors import ConflictError, NotFoundError
from job_tracker.database.db import Application, Company

COMPANY_FIELDS = ("name", "website", "industry", "location", "description", "notes")

SORTABLE_COLUMNS = {
    "name": Company.name,
    "industry": Company.industry,
    "location": Company.location,
    "createdAt": Company.created_at,
    "updatedAt": Company.updated_at,
}


def get_owned_company(session: Session, user_id: int, company_id: int) -> Company:
    """Fetch a company the user owns; anything else is NotFound"""
    company = session.query(Company).filter_by(id=company_id, user_id=user_id).first()
    if company is None:
        raise NotFoundError.for_resource("Company")
    return company


def count_applications(session: Session, company_id: int) -> int:
    return session.query(func.count(Application.id)).filter(Application.company_id == company_id).scalar() or 0


def list_companies(
    session: Session,
    user_id: int,
    search: Optional[str] = None,
    industry: Optional[str] = None,
    sort_by: str = "name",
    sort_order: str = "asc",
) -> List[Tuple[Company, int]]:
    """Companies with their application counts"""
    app_count = func.count(Application.id).label("application_count")
    query = (
        session.query(Company, app_count)
        .outerjoin(Application, Application.company_id == Company.id)
        .filter(Company.user_id == user_id)
        .group_by(Company.id)
    )

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Company.name.ilike(pattern),
            Company.industry.ilike(pattern),
            Company.location.ilike(pattern),
        ))

    if industry and industry != "all":
        query = query.filter(Company.industry == industry)

    column = SORTABLE_COLUMNS.get(sort_by, Company.name)
    query = query.order_by(column.desc() if sort_order == "desc" else column.asc(), Company.id)

    return [(company, count) for company, count in query.all()]


def get_company_detail(session: Session, user_id: int, company_id: int) -> Tuple[Company, List[Application], int]:
    """Company, its ten latest applications and its total application count"""
    company = get_owned_company(session, user_id, company_id)
    recent = (
        session.query(Application)
        .filter(Application.company_id == company.id)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .limit(10)
        .all()
    )
    return company, recent, count_applications(session, company.id)


def _ensure_unique_name(session: Session, user_id: int, name: str, exclude_id: Optional[int] = None):
    query = session.query(Company).filter(Company.user_id == user_id, Company.name == name)
    if exclude_id is not None:
        query = query.filter(Company.id != exclude_id)
    if query.first():
        raise ConflictError("Company with this name already exists")


def _commit_unique_name(session: Session):
    """Commit; a name taken by a concurrent request is still a conflict"""
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("Company with this name already exists")


def create_company(session: Session, user_id: int, data: Dict[str, Any]) -> Company:
    _ensure_unique_name(session, user_id, data["name"])

    company = Company(user_id=user_id, name=data["name"])
    for field in COMPANY_FIELDS[1:]:
        # Empty strings from the form are not stored
        if data.get(field):
            setattr(company, field, data[field])

    session.add(company)
    _commit_unique_name(session)
    session.refresh(company)
    logger.info(f"[Companies] User {user_id} created company {company.id}")
    return company


def update_company(session: Session, user_id: int, company_id: int, data: Dict[str, Any]) -> Company:
    """Partial update; only keys present in ``data`` are touched"""
    company = get_owned_company(session, user_id, company_id)

    new_name = data.get("name")
    if new_name and new_name != company.name:
        _ensure_unique_name(session, user_id, new_name, exclude_id=company.id)
        company.name = new_name

    for field in COMPANY_FIELDS[1:]:
        if field in data:
            setattr(company, field, data[field])

    _commit_unique_name(session)
    session.refresh(company)
    return company


def delete_company(session: Session, user_id: int, company_id: int):
    company = get_owned_company(session, user_id, company_id)

    application_count = count_applications(session, company.id)
    if application_count > 0:
        raise ConflictError(
            f"Cannot delete company with {application_count} application(s). "
            "Please delete applications first."
        )

    session.delete(company)
    session.commit()
    logger.info(f"[Companies] User {user_id} deleted company {company_id}")


def company_stats(session: Session, user_id: int) -> Dict[str, Any]:
    total = session.query(func.count(Company.id)).filter(Company.user_id == user_id).scalar() or 0

    rows = (
        session.query(Company.industry, func.count(Company.id))
        .filter(Company.user_id == user_id, Company.industry.isnot(None))
        .group_by(Company.industry)
        .all()
    )
    ranked = sorted(rows, key=lambda row: row[1], reverse=True)

    return {
        "totalCompanies": total,
        "topIndustries": [{"industry": industry, "count": count} for industry, count in ranked[:5]],
        "totalIndustries": len(rows),
    }

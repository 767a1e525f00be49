"""
Application service - the status lifecycle and its audit trail

Every application carries an append-only status history:
- creation writes one entry (no previous status)
- an update that changes status writes one entry (previous -> new)
- any other update writes nothing

The read-compare-append-write sequence of an update runs inside a single
transaction. The status itself is written with a compare-and-set on the
status that was read, so a history entry always names the status the row
actually held before the change, even on SQLite where row locks are not
available.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, contains_eager
from sqlalchemy.orm.attributes import set_committed_value

from job_tracker.core.errors import ConflictError, NotFoundError, ValidationError
from job_tracker.core.field_mapper import default_for, to_presentation, to_storage
from job_tracker.database.db import (
    Application, Company, Document, Interview, StatusHistoryEntry, Task, utc_now,
)
from job_tracker.services import documents as document_service

CREATION_NOTE = "Application created"

# Fields written verbatim whenever they are present in an update, nulls included
PASSTHROUGH_FIELDS = (
    "location", "salary_min", "salary_max", "source", "notes",
    "job_description", "requirements", "salary_range", "application_url", "referral_source",
)

# Enum fields translated from form spelling on the way in
MAPPED_FIELDS = ("employment_type", "work_type")

SORTABLE_COLUMNS = {
    "createdAt": Application.created_at,
    "updatedAt": Application.updated_at,
    "applicationDate": Application.application_date,
    "positionTitle": Application.position_title,
    "status": Application.status,
    "priority": Application.priority,
    "company": Company.name,
}

MAX_PAGE_SIZE = 100


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# ============================================
# STATUS TRANSITIONS
# ============================================

def status_transition_note(new_status: str) -> str:
    return f"Status updated to {new_status}"


def is_status_change(existing_status: str, requested_status: Optional[str]) -> bool:
    """True when an update carries a status that differs by value from the stored one"""
    if not requested_status:
        return False
    return _enum_value(requested_status) != _enum_value(existing_status)


def _enum_value(value) -> str:
    return value.value if isinstance(value, Enum) else value


def record_status_transition(
    application: Application,
    existing_status: str,
    requested_status: Optional[str],
) -> Optional[StatusHistoryEntry]:
    """
    Append a history entry if the requested status changes the application.

    Must be called inside the transaction that writes the new status.

    Returns:
        The new entry, or None when nothing changed
    """
    if not is_status_change(existing_status, requested_status):
        return None

    entry = StatusHistoryEntry(
        application=application,
        previous_status=existing_status,
        new_status=requested_status,
        note=status_transition_note(requested_status),
        occurred_at=utc_now(),
    )
    logger.debug(f"[StatusHistory] Application {application.id}: {existing_status} -> {requested_status}")
    return entry


def _record_creation(application: Application) -> StatusHistoryEntry:
    return StatusHistoryEntry(
        application=application,
        previous_status=None,
        new_status=application.status,
        note=CREATION_NOTE,
        occurred_at=utc_now(),
    )


# ============================================
# LOOKUPS
# ============================================

def get_owned_application(
    session: Session, user_id: int, application_id: int, for_update: bool = False
) -> Application:
    """Fetch an application the user owns; anything else is NotFound"""
    query = session.query(Application).filter_by(id=application_id, user_id=user_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    application = query.first()
    if application is None:
        raise NotFoundError.for_resource("Application")
    return application


def _require_owned_company(session: Session, user_id: int, company_id: int) -> Company:
    company = session.query(Company).filter_by(id=company_id, user_id=user_id).first()
    if company is None:
        raise ValidationError.for_field("companyId", "Company not found or does not belong to user")
    return company


def _claim_status(session: Session, application: Application, existing_status: str, requested_status: str):
    """Write the new status only if the row still holds ``existing_status``"""
    claimed = (
        session.query(Application)
        .filter_by(id=application.id, status=existing_status)
        .update({"status": requested_status}, synchronize_session=False)
    )
    if claimed != 1:
        logger.warning(
            f"[StatusHistory] Application {application.id} left '{existing_status}' during update; rejected"
        )
        raise ConflictError("Application status was changed by another request, please retry")
    set_committed_value(application, "status", requested_status)


def _check_salary_bounds(application: Application):
    if (
        application.salary_min is not None
        and application.salary_max is not None
        and application.salary_min > application.salary_max
    ):
        raise ValidationError.for_field("salaryMax", "salaryMax must not be lower than salaryMin")


def get_application_detail(session: Session, user_id: int, application_id: int) -> Application:
    application = get_owned_application(session, user_id, application_id)
    # Touch the collections while the session is open
    _ = application.company, application.status_history, application.interviews
    _ = application.tasks, application.documents
    return application


def get_status_history(session: Session, user_id: int, application_id: int) -> List[StatusHistoryEntry]:
    application = get_owned_application(session, user_id, application_id)
    return (
        session.query(StatusHistoryEntry)
        .filter(StatusHistoryEntry.application_id == application.id)
        .order_by(StatusHistoryEntry.occurred_at, StatusHistoryEntry.id)
        .all()
    )


def list_applications(
    session: Session,
    user_id: int,
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    company_id: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> Tuple[List[Tuple[Application, int, int]], int]:
    """
    Page through the user's applications.

    Returns:
        ([(application, interview_count, task_count), ...], total)
    """
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    interview_count = (
        select(func.count(Interview.id))
        .where(Interview.application_id == Application.id)
        .correlate(Application)
        .scalar_subquery()
    )
    task_count = (
        select(func.count(Task.id))
        .where(Task.application_id == Application.id)
        .correlate(Application)
        .scalar_subquery()
    )

    query = (
        session.query(Application, interview_count, task_count)
        .join(Company, Application.company_id == Company.id)
        .options(contains_eager(Application.company))
        .filter(Application.user_id == user_id)
    )

    if status and status != "all":
        query = query.filter(Application.status == status)
    if priority and priority != "all":
        query = query.filter(Application.priority == priority)
    if company_id:
        query = query.filter(Application.company_id == company_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Application.position_title.ilike(pattern),
            Company.name.ilike(pattern),
            Application.location.ilike(pattern),
        ))

    total = query.count()

    column = SORTABLE_COLUMNS.get(sort_by, Application.created_at)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    rows = (
        query.order_by(ordering, Application.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return [(application, interviews or 0, tasks or 0) for application, interviews, tasks in rows], total


# ============================================
# MUTATIONS
# ============================================

def create_application(session: Session, user_id: int, data: Dict[str, Any]) -> Application:
    """
    Create an application and its first history entry in one commit.

    ``data`` uses snake_case keys; enum fields may use form or storage spellings.
    """
    company = _require_owned_company(session, user_id, data["company_id"])

    application = Application(
        user_id=user_id,
        company_id=company.id,
        position_title=data["position_title"],
        status=to_storage("status", data.get("status")),
        priority=to_storage("priority", data.get("priority")),
        employment_type=to_storage("employment_type", data.get("employment_type")),
        work_type=to_storage("work_type", data.get("work_type")),
    )
    if data.get("application_date"):
        application.application_date = as_naive_utc(data["application_date"])

    for field in PASSTHROUGH_FIELDS:
        # Empty values from the form are stored as NULL
        setattr(application, field, data.get(field) or None)

    _check_salary_bounds(application)

    try:
        session.add(application)
        session.add(_record_creation(application))
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(application)
    logger.info(f"[Applications] User {user_id} created application {application.id} ({application.status})")
    return application


def update_application(
    session: Session, user_id: int, application_id: int, data: Dict[str, Any]
) -> Application:
    """
    Partially update an application; only keys present in ``data`` are considered.

    Falsy title / company / status / priority / date values are ignored.
    A status change appends exactly one history entry in the same commit.
    """
    try:
        application = get_owned_application(session, user_id, application_id, for_update=True)
        existing_status = application.status

        if data.get("company_id"):
            company = _require_owned_company(session, user_id, data["company_id"])
            application.company_id = company.id
        if data.get("position_title"):
            application.position_title = data["position_title"]
        if data.get("priority"):
            application.priority = to_storage("priority", data["priority"])
        if data.get("application_date"):
            application.application_date = as_naive_utc(data["application_date"])

        for field in MAPPED_FIELDS:
            if field in data:
                setattr(application, field, to_storage(field, data[field]))
        for field in PASSTHROUGH_FIELDS:
            if field in data:
                setattr(application, field, data[field])

        _check_salary_bounds(application)

        requested_status = to_storage("status", data["status"]) if data.get("status") else None
        entry = record_status_transition(application, existing_status, requested_status)
        if entry is not None:
            _claim_status(session, application, existing_status, requested_status)
            session.add(entry)

        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(application)
    return application


def _stored_files(session: Session, application_ids: List[int]) -> List[str]:
    rows = (
        session.query(Document.stored_filename)
        .filter(Document.application_id.in_(application_ids), Document.stored_filename.isnot(None))
        .all()
    )
    return [row[0] for row in rows]


def delete_application(session: Session, user_id: int, application_id: int):
    """Delete an application; history, interviews, tasks and documents go with it"""
    application = get_owned_application(session, user_id, application_id)
    stored_files = _stored_files(session, [application.id])

    session.delete(application)
    session.commit()

    for filename in stored_files:
        document_service.remove_stored_file(filename)
    logger.info(f"[Applications] User {user_id} deleted application {application_id}")


def bulk_delete_applications(session: Session, user_id: int, ids: List[int]) -> int:
    """Delete several applications; refused unless the user owns every one"""
    unique_ids = sorted(set(ids or []))
    if not unique_ids:
        raise ValidationError.for_field("ids", "Invalid or empty IDs array")

    owned = (
        session.query(func.count(Application.id))
        .filter(Application.id.in_(unique_ids), Application.user_id == user_id)
        .scalar()
    )
    if owned != len(unique_ids):
        raise ValidationError.for_field("ids", "Some applications not found or do not belong to user")

    stored_files = _stored_files(session, unique_ids)
    deleted = (
        session.query(Application)
        .filter(Application.id.in_(unique_ids), Application.user_id == user_id)
        .delete(synchronize_session=False)
    )
    session.commit()

    for filename in stored_files:
        document_service.remove_stored_file(filename)
    logger.info(f"[Applications] User {user_id} bulk deleted {deleted} applications")
    return deleted


# ============================================
# FORM VIEW
# ============================================

def form_values(application: Application) -> Dict[str, Any]:
    """Enum fields of an application in the spellings the edit form uses"""
    return {
        "status": to_presentation("status", application.status),
        "priority": to_presentation("priority", application.priority),
        "employment_type": to_presentation("employment_type", application.employment_type or default_for("employment_type")),
        "work_type": to_presentation("work_type", application.work_type or default_for("work_type")),
    }

"""
Interview service - interviews are owned through their application
"""
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, contains_eager

from job_tracker.core.errors import NotFoundError, ValidationError
from job_tracker.core.field_mapper import InterviewOutcome, to_storage
from job_tracker.database.db import Application, Company, Interview, utc_now
from job_tracker.services.applications import as_naive_utc
from job_tracker.utils.numbers import percentage

INTERVIEW_FIELDS = (
    "title", "duration", "status",
    "interviewer_name", "interviewer_email", "interviewer_title",
    "location", "meeting_link", "meeting_id",
    "preparation_notes", "interview_notes", "feedback", "next_steps",
    "outcome",
)
DATE_FIELDS = ("scheduled_date", "follow_up_date")

SORTABLE_COLUMNS = {
    "scheduledDate": Interview.scheduled_date,
    "createdAt": Interview.created_at,
    "updatedAt": Interview.updated_at,
    "type": Interview.type,
    "company": Company.name,
    "position": Application.position_title,
}

MAX_PAGE_SIZE = 100


def _owned_query(session: Session, user_id: int):
    return (
        session.query(Interview)
        .join(Application, Interview.application_id == Application.id)
        .join(Company, Application.company_id == Company.id)
        .options(contains_eager(Interview.application).contains_eager(Application.company))
        .filter(Application.user_id == user_id)
    )


def get_owned_interview(session: Session, user_id: int, interview_id: int) -> Interview:
    interview = _owned_query(session, user_id).filter(Interview.id == interview_id).first()
    if interview is None:
        raise NotFoundError.for_resource("Interview")
    return interview


def _apply_fields(interview: Interview, data: Dict[str, Any], partial: bool):
    for field in INTERVIEW_FIELDS:
        if field in data or not partial:
            value = data.get(field)
            if field == "status" and not value:
                continue
            # Empty strings from the form are stored as NULL
            setattr(interview, field, value if value != "" else None)
    for field in DATE_FIELDS:
        if field in data:
            setattr(interview, field, as_naive_utc(data[field]))


def create_interview(session: Session, user_id: int, data: Dict[str, Any]) -> Interview:
    application = (
        session.query(Application)
        .filter_by(id=data["application_id"], user_id=user_id)
        .first()
    )
    if application is None:
        raise ValidationError.for_field("applicationId", "Application not found or does not belong to user")

    interview = Interview(
        application_id=application.id,
        type=to_storage("interview_type", data.get("type")),
    )
    _apply_fields(interview, data, partial=False)

    session.add(interview)
    session.commit()
    logger.info(f"[Interviews] User {user_id} scheduled interview {interview.id} for application {application.id}")
    return get_owned_interview(session, user_id, interview.id)


def update_interview(session: Session, user_id: int, interview_id: int, data: Dict[str, Any]) -> Interview:
    interview = get_owned_interview(session, user_id, interview_id)

    if "type" in data:
        interview.type = to_storage("interview_type", data["type"])
    _apply_fields(interview, data, partial=True)

    session.commit()
    return get_owned_interview(session, user_id, interview.id)


def delete_interview(session: Session, user_id: int, interview_id: int):
    interview = get_owned_interview(session, user_id, interview_id)
    session.delete(interview)
    session.commit()
    logger.info(f"[Interviews] User {user_id} deleted interview {interview_id}")


def list_interviews(
    session: Session,
    user_id: int,
    page: int = 1,
    limit: int = 10,
    interview_type: Optional[str] = None,
    application_id: Optional[int] = None,
    upcoming: bool = False,
    search: Optional[str] = None,
    sort_by: str = "scheduledDate",
    sort_order: str = "asc",
) -> Tuple[List[Interview], int]:
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    query = _owned_query(session, user_id)
    if interview_type and interview_type != "all":
        query = query.filter(Interview.type == to_storage("interview_type", interview_type))
    if application_id:
        query = query.filter(Interview.application_id == application_id)
    if upcoming:
        query = query.filter(Interview.scheduled_date >= utc_now())
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Interview.title.ilike(pattern),
            Interview.interviewer_name.ilike(pattern),
            Application.position_title.ilike(pattern),
            Company.name.ilike(pattern),
        ))

    total = query.count()

    column = SORTABLE_COLUMNS.get(sort_by, Interview.scheduled_date)
    ordering = column.desc() if sort_order == "desc" else column.asc()
    interviews = (
        query.order_by(ordering, Interview.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return interviews, total


def upcoming_interviews(session: Session, user_id: int, limit: int = 5) -> List[Interview]:
    return (
        _owned_query(session, user_id)
        .filter(Interview.scheduled_date >= utc_now())
        .order_by(Interview.scheduled_date.asc(), Interview.id)
        .limit(max(limit, 1))
        .all()
    )


def interview_stats(session: Session, user_id: int) -> Dict[str, Any]:
    """Totals, upcoming/past split, success rate and a per-type breakdown"""
    now = utc_now()
    base = (
        session.query(func.count(Interview.id))
        .join(Application, Interview.application_id == Application.id)
        .filter(Application.user_id == user_id)
    )

    total = base.scalar() or 0
    upcoming = base.filter(Interview.scheduled_date >= now).scalar() or 0
    past = base.filter(Interview.scheduled_date < now).scalar() or 0
    positive = base.filter(Interview.outcome == InterviewOutcome.POSITIVE.value).scalar() or 0
    with_outcome = base.filter(Interview.outcome.isnot(None)).scalar() or 0

    success_rate = percentage(positive, with_outcome)

    breakdown_rows = (
        session.query(Interview.type, func.count(Interview.id))
        .join(Application, Interview.application_id == Application.id)
        .filter(Application.user_id == user_id)
        .group_by(Interview.type)
        .all()
    )

    return {
        "total": total,
        "upcoming": upcoming,
        "past": past,
        "successRate": success_rate,
        "typeBreakdown": {interview_type: count for interview_type, count in breakdown_rows},
    }

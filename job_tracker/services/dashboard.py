"""
Dashboard aggregates - overview stats, recent activity and insights
"""
from datetime import timedelta
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session, contains_eager

from job_tracker.core.field_mapper import ApplicationStatus, INTERVIEW_STATUSES, RESPONSE_STATUSES
from job_tracker.database.db import Application, Company, StatusHistoryEntry, Task, utc_now
from job_tracker.services.interviews import upcoming_interviews
from job_tracker.utils.numbers import percentage

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']
TREND_MONTHS = 6
LOW_VOLUME_THRESHOLD = 10   # applications per 30 days before we nudge


def _empty_status_counts() -> Dict[str, int]:
    return {status.value: 0 for status in ApplicationStatus}


def month_key(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year}"


def trailing_months(count: int = TREND_MONTHS) -> List[str]:
    """Keys for the last ``count`` calendar months, oldest first, current month last"""
    now = utc_now()
    keys = []
    for offset in range(count - 1, -1, -1):
        index = now.year * 12 + (now.month - 1) - offset
        keys.append(month_key(index // 12, index % 12 + 1))
    return keys


def dashboard_stats(session: Session, user_id: int) -> Dict[str, Any]:
    total_applications = (
        session.query(func.count(Application.id)).filter(Application.user_id == user_id).scalar() or 0
    )
    total_companies = (
        session.query(func.count(Company.id)).filter(Company.user_id == user_id).scalar() or 0
    )

    status_counts = _empty_status_counts()
    for status, count in (
        session.query(Application.status, func.count(Application.id))
        .filter(Application.user_id == user_id)
        .group_by(Application.status)
        .all()
    ):
        status_counts[status] = count

    response_count = sum(status_counts[s.value] for s in RESPONSE_STATUSES)
    interview_count = sum(status_counts[s.value] for s in INTERVIEW_STATUSES)

    recent_applications = (
        session.query(Application)
        .join(Company, Application.company_id == Company.id)
        .options(contains_eager(Application.company))
        .filter(Application.user_id == user_id)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .limit(5)
        .all()
    )

    # Six calendar months, each bucket counting applications per status
    monthly = {key: {"month": key, **_empty_status_counts()} for key in trailing_months()}
    window_start = utc_now() - timedelta(days=TREND_MONTHS * 31)
    for created_at, status in (
        session.query(Application.created_at, Application.status)
        .filter(Application.user_id == user_id, Application.created_at >= window_start)
        .all()
    ):
        bucket = monthly.get(month_key(created_at.year, created_at.month))
        if bucket is not None and status in bucket:
            bucket[status] += 1

    return {
        "overview": {
            "totalApplications": total_applications,
            "totalCompanies": total_companies,
            "responseRate": percentage(response_count, total_applications),
            "interviewRate": percentage(interview_count, total_applications),
        },
        "statusBreakdown": status_counts,
        "recentApplications": recent_applications,
        "monthlyTrends": list(monthly.values()),
        "generated": utc_now(),
    }


def recent_activity(session: Session, user_id: int, limit: int = 10) -> List[Dict[str, Any]]:
    """Latest status changes across all of the user's applications"""
    entries = (
        session.query(StatusHistoryEntry)
        .join(Application, StatusHistoryEntry.application_id == Application.id)
        .join(Company, Application.company_id == Company.id)
        .options(contains_eager(StatusHistoryEntry.application).contains_eager(Application.company))
        .filter(Application.user_id == user_id)
        .order_by(StatusHistoryEntry.occurred_at.desc(), StatusHistoryEntry.id.desc())
        .limit(max(limit, 1))
        .all()
    )

    return [
        {
            "id": entry.id,
            "type": "status_change",
            "description": f"Application status changed to {entry.new_status.replace('_', ' ')}",
            "details": {
                "applicationId": entry.application.id,
                "positionTitle": entry.application.position_title,
                "companyName": entry.application.company.name,
                "status": entry.new_status,
                "previousStatus": entry.previous_status,
                "notes": entry.note,
            },
            "createdAt": entry.occurred_at,
        }
        for entry in entries
    ]


def pending_tasks(session: Session, user_id: int, limit: int = 5) -> List[Task]:
    return (
        session.query(Task)
        .outerjoin(Application, Task.application_id == Application.id)
        .options(contains_eager(Task.application))
        .filter(Task.user_id == user_id, Task.completed.is_(False))
        .order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.id)
        .limit(limit)
        .all()
    )


def dashboard_insights(session: Session, user_id: int) -> Dict[str, Any]:
    now = utc_now()
    thirty_days_ago = now - timedelta(days=30)

    recent_count = (
        session.query(func.count(Application.id))
        .filter(Application.user_id == user_id, Application.created_at >= thirty_days_ago)
        .scalar() or 0
    )
    interviews = upcoming_interviews(session, user_id, limit=5)
    tasks = pending_tasks(session, user_id, limit=5)

    insights = []
    if recent_count < LOW_VOLUME_THRESHOLD:
        insights.append({
            "type": "suggestion",
            "title": "Increase Application Volume",
            "message": (
                f"You've applied to {recent_count} jobs in the last 30 days. "
                "Consider applying to 15-20 positions monthly for better odds."
            ),
            "priority": "medium",
        })

    if interviews:
        insights.append({
            "type": "info",
            "title": "Upcoming Interviews",
            "message": f"You have {len(interviews)} interview(s) scheduled. Make sure to prepare!",
            "priority": "high",
        })

    overdue = [task for task in tasks if task.due_date is not None and task.due_date < now]
    if overdue:
        insights.append({
            "type": "warning",
            "title": "Overdue Tasks",
            "message": f"You have {len(overdue)} overdue task(s). Complete them to stay on track.",
            "priority": "high",
        })

    return {
        "insights": insights,
        "metrics": {
            "recentApplications": recent_count,
            "upcomingInterviews": len(interviews),
            "pendingTasks": len(tasks),
        },
        "quickActions": {
            "upcomingInterviews": interviews[:3],
            "pendingTasks": tasks[:3],
        },
    }

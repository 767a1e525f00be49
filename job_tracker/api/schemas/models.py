"""
Pydantic schemas for the Job Tracker API

JSON uses camelCase; Python code uses snake_case. Request bodies are dumped
with exclude_unset=True so partial updates only carry what the client sent.
"""
import math
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from job_tracker.config import config
from job_tracker.core.field_mapper import ApplicationStatus, DocumentType, InterviewOutcome

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)


def _url_or_empty(value: Optional[str]) -> Optional[str]:
    if value and not _URL_RE.match(value):
        raise ValueError("must be a valid URL")
    return value


def _email_or_empty(value: Optional[str]) -> Optional[str]:
    if value and not _EMAIL_RE.match(value):
        raise ValueError("must be a valid email address")
    return value


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class RequestModel(CamelModel):
    class Config:
        use_enum_values = True


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class MessageResponse(CamelModel):
    message: str


# ============================================
# AUTH
# ============================================

class RegisterRequest(RequestModel):
    email: str = Field(max_length=255)
    password: str
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if not _EMAIL_RE.match(value):
            raise ValueError("Please provide a valid email")
        return value

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        minimum = config.auth.min_password_length
        if len(value) < minimum:
            raise ValueError(f"Password must be at least {minimum} characters long")
        return value


class LoginRequest(RequestModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserResponse(CamelModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    message: str
    user: UserResponse
    token: str


class UserEnvelope(CamelModel):
    user: UserResponse


class TokenResponse(CamelModel):
    message: str
    token: str


# ============================================
# COMPANIES
# ============================================

class CompanyCreate(RequestModel):
    name: str = Field(min_length=1, max_length=100)
    website: Optional[str] = Field(None, max_length=500)
    industry: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("website")
    @classmethod
    def check_website(cls, value: Optional[str]) -> Optional[str]:
        return _url_or_empty(value)


class CompanyUpdate(CompanyCreate):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class CompanyBrief(CamelModel):
    id: int
    name: str
    industry: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None


class ApplicationSummary(CamelModel):
    """An application as listed under its company"""
    id: int
    position_title: str
    status: str
    priority: str
    application_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CompanyResponse(CamelModel):
    id: int
    name: str
    website: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    application_count: int = 0


class CompanyDetail(CompanyResponse):
    applications: List[ApplicationSummary] = []


class CompanyListResponse(CamelModel):
    companies: List[CompanyResponse]


class CompanyEnvelope(CamelModel):
    message: Optional[str] = None
    company: CompanyDetail


class IndustryCount(CamelModel):
    industry: str
    count: int


class CompanyStatsResponse(CamelModel):
    total_companies: int
    top_industries: List[IndustryCount]
    total_industries: int


# ============================================
# APPLICATIONS
# ============================================

class ApplicationCreate(RequestModel):
    """
    New application. Enum fields other than status accept form spellings
    ("full-time") or stored ones ("full_time"); unknown values fall back
    to the field default.
    """
    company_id: int = Field(gt=0)
    position_title: str = Field(min_length=1, max_length=200)
    status: Optional[ApplicationStatus] = None
    priority: Optional[str] = Field(None, max_length=20)
    employment_type: Optional[str] = Field(None, max_length=20)
    work_type: Optional[str] = Field(None, max_length=20)
    application_date: Optional[datetime] = None

    location: Optional[str] = Field(None, max_length=200)
    salary_min: Optional[int] = Field(None, gt=0)
    salary_max: Optional[int] = Field(None, gt=0)
    source: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=2000)

    job_description: Optional[str] = None
    requirements: Optional[str] = None
    salary_range: Optional[str] = Field(None, max_length=100)
    application_url: Optional[str] = Field(None, max_length=500)
    referral_source: Optional[str] = Field(None, max_length=200)

    @field_validator("application_url")
    @classmethod
    def check_application_url(cls, value: Optional[str]) -> Optional[str]:
        return _url_or_empty(value)


class ApplicationUpdate(ApplicationCreate):
    company_id: Optional[int] = Field(None, gt=0)
    position_title: Optional[str] = Field(None, min_length=1, max_length=200)


class BulkDeleteRequest(RequestModel):
    ids: List[int] = []


class BulkDeleteResponse(CamelModel):
    message: str
    deleted_count: int


class StatusHistoryResponse(CamelModel):
    id: int
    application_id: int
    previous_status: Optional[str] = None
    new_status: str
    note: Optional[str] = None
    occurred_at: datetime


class ApplicationResponse(CamelModel):
    id: int
    company_id: int
    position_title: str
    status: str
    priority: str
    employment_type: Optional[str] = None
    work_type: Optional[str] = None
    application_date: Optional[datetime] = None

    location: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    source: Optional[str] = None
    notes: Optional[str] = None

    job_description: Optional[str] = None
    requirements: Optional[str] = None
    salary_range: Optional[str] = None
    application_url: Optional[str] = None
    referral_source: Optional[str] = None

    created_at: datetime
    updated_at: datetime
    company: Optional[CompanyBrief] = None


class ApplicationListItem(ApplicationResponse):
    interview_count: int = 0
    task_count: int = 0


class ApplicationBrief(CamelModel):
    """The owning application shown alongside an interview or document"""
    id: int
    position_title: str
    status: str
    company: Optional[CompanyBrief] = None


# ============================================
# INTERVIEWS
# ============================================

class InterviewCreate(RequestModel):
    application_id: int = Field(gt=0)
    type: str = Field(min_length=1, max_length=20)
    title: Optional[str] = Field(None, max_length=200)
    scheduled_date: Optional[datetime] = None
    duration: Optional[int] = Field(None, gt=0, le=1440)
    status: Optional[str] = Field(None, max_length=20)

    interviewer_name: Optional[str] = Field(None, max_length=200)
    interviewer_email: Optional[str] = Field(None, max_length=255)
    interviewer_title: Optional[str] = Field(None, max_length=200)

    location: Optional[str] = Field(None, max_length=500)
    meeting_link: Optional[str] = Field(None, max_length=500)
    meeting_id: Optional[str] = Field(None, max_length=100)

    preparation_notes: Optional[str] = None
    interview_notes: Optional[str] = None
    feedback: Optional[str] = None
    next_steps: Optional[str] = None
    outcome: Optional[InterviewOutcome] = None
    follow_up_date: Optional[datetime] = None

    @field_validator("interviewer_email")
    @classmethod
    def check_interviewer_email(cls, value: Optional[str]) -> Optional[str]:
        return _email_or_empty(value)

    @field_validator("meeting_link")
    @classmethod
    def check_meeting_link(cls, value: Optional[str]) -> Optional[str]:
        return _url_or_empty(value)


class InterviewUpdate(InterviewCreate):
    application_id: Optional[int] = Field(None, gt=0)
    type: Optional[str] = Field(None, min_length=1, max_length=20)


class InterviewResponse(CamelModel):
    id: int
    application_id: int
    type: str
    title: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    duration: Optional[int] = None
    status: str

    interviewer_name: Optional[str] = None
    interviewer_email: Optional[str] = None
    interviewer_title: Optional[str] = None

    location: Optional[str] = None
    meeting_link: Optional[str] = None
    meeting_id: Optional[str] = None

    preparation_notes: Optional[str] = None
    interview_notes: Optional[str] = None
    feedback: Optional[str] = None
    next_steps: Optional[str] = None
    outcome: Optional[str] = None
    follow_up_date: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime


class InterviewWithApplication(InterviewResponse):
    application: Optional[ApplicationBrief] = None


class InterviewListResponse(CamelModel):
    interviews: List[InterviewWithApplication]
    pagination: Optional[Pagination] = None


class InterviewEnvelope(CamelModel):
    message: Optional[str] = None
    interview: InterviewWithApplication


class InterviewStatsResponse(CamelModel):
    total: int
    upcoming: int
    past: int
    success_rate: int
    type_breakdown: Dict[str, int]


# ============================================
# TASKS & DOCUMENTS
# ============================================

class TaskResponse(CamelModel):
    id: int
    application_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    type: str
    due_date: Optional[datetime] = None
    completed: bool
    completed_at: Optional[datetime] = None
    priority: str


class DocumentUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[DocumentType] = None
    description: Optional[str] = Field(None, max_length=1000)
    tags: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    application_id: Optional[int] = Field(None, gt=0)


class DocumentResponse(CamelModel):
    id: int
    application_id: Optional[int] = None
    name: str
    original_filename: Optional[str] = None
    url: str
    type: str
    mime_type: Optional[str] = None
    size: Optional[int] = None
    file_extension: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = []
    version: int = 1
    is_active: bool = True
    uploaded_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def tags_default(cls, value: Any) -> Any:
        return value or []


class DocumentWithApplication(DocumentResponse):
    application: Optional[ApplicationBrief] = None


class DocumentListResponse(CamelModel):
    documents: List[DocumentWithApplication]
    pagination: Pagination


class DocumentEnvelope(CamelModel):
    message: Optional[str] = None
    document: DocumentWithApplication


# ============================================
# APPLICATION ENVELOPES
# ============================================

class ApplicationDetail(ApplicationResponse):
    status_history: List[StatusHistoryResponse] = []
    interviews: List[InterviewResponse] = []
    tasks: List[TaskResponse] = []
    documents: List[DocumentResponse] = []


class ApplicationListResponse(CamelModel):
    applications: List[ApplicationListItem]
    pagination: Pagination


class ApplicationEnvelope(CamelModel):
    message: Optional[str] = None
    application: ApplicationResponse


class ApplicationDetailEnvelope(CamelModel):
    application: ApplicationDetail


class StatusHistoryListResponse(CamelModel):
    history: List[StatusHistoryResponse]


# ============================================
# DASHBOARD
# ============================================

class DashboardStatsResponse(CamelModel):
    overview: Dict[str, int]
    status_breakdown: Dict[str, int]
    recent_applications: List[ApplicationResponse]
    monthly_trends: List[Dict[str, Any]]
    generated: datetime


class ActivityItem(CamelModel):
    id: int
    type: str
    description: str
    details: Dict[str, Any]
    created_at: datetime


class ActivityResponse(CamelModel):
    activities: List[ActivityItem]


class Insight(CamelModel):
    type: str
    title: str
    message: str
    priority: str


class QuickActions(CamelModel):
    upcoming_interviews: List[InterviewWithApplication]
    pending_tasks: List[TaskResponse]


class InsightsResponse(CamelModel):
    insights: List[Insight]
    metrics: Dict[str, int]
    quick_actions: QuickActions

"""
Field Mapper - translates enum spellings between forms and storage

Forms use hyphenated spellings ("full-time", "on-site", "in-person"); the
database stores underscored ones ("full_time", "on_site", "in_person").
Unknown input falls back to the field's default and logs a warning rather
than failing.

Usage:
    from job_tracker.core.field_mapper import to_storage, to_presentation
    to_storage("employment_type", "full-time")      # "full_time"
    to_presentation("work_type", "on_site")         # "on-site"
"""
from enum import Enum
from typing import Dict, Optional, Type
from loguru import logger


class ApplicationStatus(str, Enum):
    APPLIED = "applied"
    REVIEWING = "reviewing"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEWED = "interviewed"
    OFFER = "offer"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class EmploymentType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"


class WorkType(str, Enum):
    REMOTE = "remote"
    HYBRID = "hybrid"
    ON_SITE = "on_site"


class InterviewType(str, Enum):
    PHONE = "phone"
    VIDEO = "video"
    IN_PERSON = "in_person"
    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    PANEL = "panel"
    FINAL = "final"


class InterviewOutcome(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    PENDING = "pending"


class DocumentType(str, Enum):
    RESUME = "resume"
    COVER_LETTER = "cover_letter"
    PORTFOLIO = "portfolio"
    TRANSCRIPT = "transcript"
    RECOMMENDATION = "recommendation"
    CERTIFICATION = "certification"
    OTHER = "other"


# Statuses that count as "the employer responded" / "reached interviews"
RESPONSE_STATUSES = (
    ApplicationStatus.REVIEWING,
    ApplicationStatus.INTERVIEW_SCHEDULED,
    ApplicationStatus.INTERVIEWED,
    ApplicationStatus.OFFER,
    ApplicationStatus.REJECTED,
)
INTERVIEW_STATUSES = (
    ApplicationStatus.INTERVIEW_SCHEDULED,
    ApplicationStatus.INTERVIEWED,
    ApplicationStatus.OFFER,
)


class FieldMapping:
    """Presentation <-> storage table for one enum field"""

    def __init__(self, enum: Type[Enum], presentation: Dict[str, Enum], default: Enum):
        self.enum = enum
        self.default = default
        self._to_storage = dict(presentation)
        self._to_presentation = {member: spelling for spelling, member in presentation.items()}

        missing = set(enum) - set(self._to_presentation)
        if missing:
            raise ValueError(f"{enum.__name__} mapping has no spelling for {sorted(m.value for m in missing)}")

    @property
    def presentation_values(self):
        return list(self._to_storage)

    def storage_member(self, field: str, value: Optional[str]) -> Enum:
        if value is None or value == "":
            return self.default
        if isinstance(value, self.enum):
            return value
        if value in self._to_storage:
            return self._to_storage[value]
        # Clients echo back what the API returned, which is storage vocabulary
        for member in self.enum:
            if member.value == value:
                return member
        logger.warning(
            f"[FieldMapper] Unrecognized {field} value {value!r}; "
            f"defaulting to {self.default.value!r}"
        )
        return self.default

    def presentation_value(self, field: str, value) -> str:
        member = value
        if not isinstance(value, self.enum):
            try:
                member = self.enum(value)
            except ValueError:
                logger.warning(
                    f"[FieldMapper] Unrecognized stored {field} value {value!r}; "
                    f"presenting {self.default.value!r}"
                )
                member = self.default
        return self._to_presentation[member]


FIELD_MAPPINGS: Dict[str, FieldMapping] = {
    "employment_type": FieldMapping(
        EmploymentType,
        {
            "full-time": EmploymentType.FULL_TIME,
            "part-time": EmploymentType.PART_TIME,
            "contract": EmploymentType.CONTRACT,
            "internship": EmploymentType.INTERNSHIP,
        },
        default=EmploymentType.FULL_TIME,
    ),
    "work_type": FieldMapping(
        WorkType,
        {
            "remote": WorkType.REMOTE,
            "hybrid": WorkType.HYBRID,
            "on-site": WorkType.ON_SITE,
        },
        default=WorkType.REMOTE,
    ),
    "priority": FieldMapping(
        Priority,
        {
            "low": Priority.LOW,
            "medium": Priority.MEDIUM,
            "high": Priority.HIGH,
            "urgent": Priority.URGENT,
        },
        default=Priority.MEDIUM,
    ),
    "status": FieldMapping(
        ApplicationStatus,
        {member.value: member for member in ApplicationStatus},
        default=ApplicationStatus.APPLIED,
    ),
    "interview_type": FieldMapping(
        InterviewType,
        {
            "phone": InterviewType.PHONE,
            "video": InterviewType.VIDEO,
            "in-person": InterviewType.IN_PERSON,
            "technical": InterviewType.TECHNICAL,
            "behavioral": InterviewType.BEHAVIORAL,
            "panel": InterviewType.PANEL,
            "final": InterviewType.FINAL,
        },
        default=InterviewType.PHONE,
    ),
}


def _mapping(field: str) -> FieldMapping:
    try:
        return FIELD_MAPPINGS[field]
    except KeyError:
        raise KeyError(f"No enum mapping registered for field {field!r}") from None


def to_storage(field: str, value: Optional[str]) -> str:
    """Translate a form spelling to the stored enum value (lenient)."""
    return _mapping(field).storage_member(field, value).value


def to_presentation(field: str, value) -> str:
    """Translate a stored enum value to its form spelling."""
    return _mapping(field).presentation_value(field, value)


def default_for(field: str) -> str:
    return _mapping(field).default.value

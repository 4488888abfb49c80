"""Typed records exchanged between the record repository and the engines.

Every row read from a collaborator is validated into one of these frozen
models before any engine sees it. Timestamps are normalised to UTC so the
engines can compare them without caring where the data came from.
"""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, computed_field, field_validator


def as_utc(value: datetime | date) -> datetime:
    """Return a timezone-aware UTC datetime; naive values are taken as UTC."""

    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _accept_date(value: Any) -> Any:
    if isinstance(value, date):
        return as_utc(value)
    return value


class EmploymentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"
    TERMINATED = "terminated"


class CertificateStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)


class WorkforceMember(_Record):
    """A person on the organization's roster."""

    id: str
    organization_id: str
    first_name: str
    last_name: str = ""
    department: str
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE
    position: Optional[str] = None

    @field_validator("id", "organization_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @computed_field
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Certificate(_Record):
    """An issued certification held by a workforce member."""

    id: str
    organization_id: str
    holder_name: str
    holder_id: Optional[str] = None
    certification_type: str
    issue_date: datetime
    expiration_date: Optional[datetime] = None
    status: CertificateStatus = CertificateStatus.ACTIVE
    standards: List[str] = Field(default_factory=list)
    # Falls back to issue_date when the source has no creation timestamp.
    created_at: Optional[datetime] = Field(default=None, validate_default=True)

    @field_validator("id", "organization_id", "holder_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("issue_date", "expiration_date", "created_at", mode="before")
    @classmethod
    def _accept_dates(cls, value: Any) -> Any:
        return _accept_date(value)

    @field_validator("issue_date", "expiration_date", mode="after")
    @classmethod
    def _normalise_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

    @field_validator("created_at", mode="after")
    @classmethod
    def _default_created_at(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        if value is not None:
            return as_utc(value)
        return info.data.get("issue_date")

    @field_validator("standards", mode="before")
    @classmethod
    def _null_standards(cls, value: Any) -> Any:
        return [] if value is None else value


class TrainingSession(_Record):
    """A delivered training session."""

    id: str
    organization_id: str
    session_name: str
    created_at: datetime

    @field_validator("id", "organization_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("created_at", mode="before")
    @classmethod
    def _accept_dates(cls, value: Any) -> Any:
        return _accept_date(value)

    @field_validator("created_at", mode="after")
    @classmethod
    def _normalise_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)


class ProcessedDocument(_Record):
    """Output of the document ingestion pipeline for one uploaded sheet."""

    id: str
    organization_id: str
    processed_at: datetime
    training_type: Optional[str] = None

    @field_validator("id", "organization_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("processed_at", mode="before")
    @classmethod
    def _accept_dates(cls, value: Any) -> Any:
        return _accept_date(value)

    @field_validator("processed_at", mode="after")
    @classmethod
    def _normalise_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator("training_type", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_extraction(cls, *, id: Any, organization_id: Any, processed_at: Any,
                        extracted_data: Any) -> "ProcessedDocument":
        """Build a document from the ingestion pipeline's extracted payload."""

        training_type = None
        if isinstance(extracted_data, dict):
            training_type = extracted_data.get("trainingTitle") or extracted_data.get("training_title")
            if not isinstance(training_type, str):
                training_type = None
        return cls(
            id=id,
            organization_id=organization_id,
            processed_at=processed_at,
            training_type=training_type,
        )


class OrganizationSnapshot(BaseModel):
    """All records of one organization, fetched at a single point."""

    model_config = ConfigDict(frozen=True)

    organization_id: str
    members: List[WorkforceMember] = Field(default_factory=list)
    certificates: List[Certificate] = Field(default_factory=list)
    training_sessions: List[TrainingSession] = Field(default_factory=list)
    documents: List[ProcessedDocument] = Field(default_factory=list)


__all__ = [
    "as_utc",
    "utc_now",
    "EmploymentStatus",
    "CertificateStatus",
    "WorkforceMember",
    "Certificate",
    "TrainingSession",
    "ProcessedDocument",
    "OrganizationSnapshot",
]

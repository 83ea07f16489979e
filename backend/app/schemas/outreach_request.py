"""Pydantic schemas for school-initiated outreach requests."""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

OutreachType = Literal[
    "teacher_workshop",
    "learner_outreach",
    "robotics_support",
    "practical_experiments",
    "space_science",
    "career_guidance",
]


class OutreachRequestCreate(BaseModel):
    """Public request form. Anyone can submit; no account is needed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    school_name: str = Field(min_length=1, max_length=200)
    contact_person: str = Field(min_length=1, max_length=100)
    contact_email: str = Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    contact_phone: str | None = Field(default=None, max_length=20)
    outreach_type: OutreachType
    workshop_topic: str | None = Field(default=None, max_length=500)
    preferred_date: date | None = None
    alternative_date: date | None = None
    expected_participants: int | None = Field(default=None, gt=0, le=10000)
    grade_levels: list[str] | None = None
    additional_notes: str | None = Field(default=None, max_length=2000)


class OutreachRequestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    school_name: str
    contact_person: str
    contact_email: str
    contact_phone: str | None = None
    outreach_type: str
    workshop_topic: str | None = None
    preferred_date: date | None = None
    alternative_date: date | None = None
    expected_participants: int | None = None
    grade_levels: list[str] | None = None
    additional_notes: str | None = None
    status: str
    organization_id: UUID | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    response_notes: str | None = None
    created_at: datetime | None = None


class OutreachRequestPage(BaseModel):
    items: list[OutreachRequestRead]
    total: int


class OutreachRequestReview(BaseModel):
    status: Literal["approved", "declined"]
    reviewed_by: str = Field(min_length=1, max_length=255)
    organization_id: UUID | None = None
    response_notes: str | None = Field(default=None, max_length=2000)


class OutreachRequestStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    declined: int = 0

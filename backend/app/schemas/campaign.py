"""Pydantic schemas for outreach campaigns and their school records."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class VisitDetails(BaseModel):
    """Visit details as entered by the organizer. Extra keys are kept."""

    model_config = ConfigDict(extra="allow")

    visitDate: str | None = None
    visitTime: str | None = None
    duration: str | None = None
    programDescription: str | None = None
    targetGrades: str | None = None
    expectedParticipants: str | int | None = None
    additionalInfo: str | None = None


class CampaignCreate(BaseModel):
    organization_id: UUID
    created_by: str = Field(min_length=1, max_length=255)
    province: str = Field(min_length=1)
    district: str = "All Districts"
    school_type: str = ""
    visit_details: VisitDetails | None = None


class CampaignRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    created_by: str
    province: str
    district: str
    school_type: str
    status: str
    visit_date: datetime | None = None
    visit_details: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime


class RecommendationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    campaign_id: UUID
    school_id: UUID | None = None
    generated_data: dict[str, Any] = {}
    generated_letter: str | None = None
    sort_order: int = 0
    is_accepted: bool | None = None
    is_replacement: bool | None = None
    enrollment_total: int | None = None
    language_of_instruction: str | None = None
    response_status: str | None = None
    letter_sent_at: datetime | None = None
    school_response: str | None = None
    responded_at: datetime | None = None
    created_at: datetime | None = None


class CampaignStats(BaseModel):
    total: int = 0
    accepted: int = 0
    letters_generated: int = 0
    letters_sent: int = 0
    confirmed: int = 0
    declined: int = 0
    pending: int = 0


class CampaignDetail(CampaignRead):
    recommendations: list[RecommendationRead] = []
    stats: CampaignStats


class SchoolSelection(BaseModel):
    school_id: UUID
    contact_email: str | None = None
    language_of_instruction: str | None = None
    needs_analysis: str | None = None
    match_score: int | None = None
    priority_reason: str | None = None
    is_replacement: bool = False


class AcceptSchoolsRequest(BaseModel):
    schools: list[SchoolSelection] = Field(min_length=1)


class LetterUpdate(BaseModel):
    letter: str = Field(min_length=1)


class StatusUpdate(BaseModel):
    status: Literal["draft", "review", "letters_generated", "letters_sent", "completed"]


class GenerateLettersRequest(BaseModel):
    visit_details: VisitDetails | None = Field(default=None, alias="visitDetails")

    model_config = ConfigDict(populate_by_name=True)


class TaskAccepted(BaseModel):
    task_id: str
    campaign_id: UUID


class TaskStatus(BaseModel):
    task_id: str
    state: str
    current: int | None = None
    total: int | None = None
    result: dict[str, Any] | None = None
    error: str | None = None


class SendLettersRequest(BaseModel):
    from_email: str | None = Field(default=None, alias="fromEmail")

    model_config = ConfigDict(populate_by_name=True)


class SendLettersResponse(BaseModel):
    success: bool = True
    message: str
    results: list[dict[str, Any]]
    total: int
    sent: int
    failed: int

"""Request/response schemas for the AI outreach endpoints and school replies."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class LetterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Optional so missing fields are reported as 400, not a validation error
    campaign_id: UUID | None = Field(default=None, alias="campaignId")
    school_data: dict[str, Any] | None = Field(default=None, alias="schoolData")
    visit_details: dict[str, Any] | None = Field(default=None, alias="visitDetails")


class LetterResponse(BaseModel):
    letter: str


class MatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    province: str = Field(min_length=1)
    district: str | None = None
    target_quintiles: list[str] | None = Field(default=None, alias="targetQuintiles")
    services_offered: list[str] | None = Field(default=None, alias="servicesOffered")
    max_schools: int = Field(default=10, ge=1, le=50, alias="maxSchools")


class MatchResponse(BaseModel):
    success: bool = True
    recommendations: list[dict[str, Any]]
    summary: str | None = None
    totalSchoolsAnalyzed: int


class NeedsRequest(BaseModel):
    school_ids: list[UUID] = Field(min_length=1, alias="schoolIds")

    model_config = ConfigDict(populate_by_name=True)


class NeedsResponse(BaseModel):
    schools: list[dict[str, Any]]


class InvitationRead(BaseModel):
    school_name: str
    visit_details: dict[str, Any] = {}
    visit_date: datetime | None = None
    response_status: str | None = None
    school_response: str | None = None
    responded_at: datetime | None = None


class SchoolResponseCreate(BaseModel):
    status: Literal["confirmed", "declined"]
    message: str | None = Field(default=None, max_length=2000)


# Shapes the AI gateway is asked to return. Field names follow the prompts.

class AIRecommendation(BaseModel):
    model_config = ConfigDict(extra="allow")

    schoolId: str
    schoolName: str | None = None
    matchScore: int | float | None = None
    priorityReason: str | None = None
    suggestedActivities: list[str] = []


class AIMatchResult(BaseModel):
    recommendations: list[AIRecommendation]
    summary: str | None = None


class AINeedsAnalysis(BaseModel):
    schoolName: str | None = None
    needsAnalysis: str = Field(min_length=1)

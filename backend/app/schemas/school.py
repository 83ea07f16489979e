"""Pydantic schemas for School model and prioritization."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SchoolBase(BaseModel):
    """Base fields for school."""

    nat_emis: str
    institution_name: str
    province: str
    district: str | None = None
    circuit: str | None = None
    status: str | None = None
    sector: str | None = None
    type_doe: str | None = None
    phase_ped: str | None = None
    quintile: str | None = None
    no_fee_school: str | None = None
    urban_rural: str | None = None
    town_city: str | None = None
    suburb: str | None = None
    township_village: str | None = None
    street_address: str | None = None
    postal_address: str | None = None
    telephone: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    learners_2024: int | None = None
    educators_2024: int | None = None


class SchoolRead(SchoolBase):
    """Full school output."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SchoolPage(BaseModel):
    """Paged directory search result."""

    items: list[SchoolRead]
    total: int


class ScoredSchool(SchoolRead):
    """School annotated with its underserved priority."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    priority_score: int = Field(alias="priorityScore")
    underserved_reasons: list[str] = Field(alias="underservedReasons")


class UnderservedRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    province: str = Field(min_length=1)
    district: str | None = None
    school_type: str | None = Field(default=None, alias="schoolType")
    batch_size: int = Field(default=10, ge=1, le=500, alias="batchSize")


class UnderservedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schools: list[ScoredSchool] = []
    total_underserved: int = Field(default=0, alias="totalUnderserved")
    total_visited: int = Field(default=0, alias="totalVisited")
    ai_insights: str | None = Field(default=None, alias="aiInsights")
    message: str

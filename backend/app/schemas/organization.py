"""Pydantic schemas for Organization model."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class OrganizationBase(BaseModel):
    """Base fields for organization."""

    name: str = Field(min_length=1, max_length=255)
    contact_email: str | None = None
    website_url: str | None = None


class OrganizationCreate(OrganizationBase):
    """Fields for creating an organization. Slug is derived from the name when omitted."""

    slug: str | None = None


class OrganizationRead(OrganizationBase):
    """Full organization output."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    slug: str
    created_at: datetime
    updated_at: datetime


class OrganizationWithStats(OrganizationRead):
    """Organization with campaign counts."""

    campaign_count: int = 0
    active_campaign_count: int = 0

"""Organization API endpoints."""

import re
import uuid
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import get_db
from app.models.organization import Organization
from app.models.outreach_campaign import OutreachCampaign
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationRead,
    OrganizationWithStats,
)

router = APIRouter(prefix="/organizations", tags=["organizations"])

ACTIVE_CAMPAIGN_STATUSES = ("draft", "review", "letters_generated", "letters_sent")


def make_slug(name: str) -> str:
    """URL-safe slug from an organization name.

    Examples:
        'Cape Space Academy' -> 'cape-space-academy'
        'Science & Tech Trust' -> 'science-and-tech-trust'
    """
    slug = name.lower().strip()
    slug = slug.replace("&", "-and-")
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")


@router.get("", response_model=list[OrganizationWithStats])
async def list_organizations(
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    search: str | None = Query(None, min_length=2, description="Search by name"),
):
    """List organizations with campaign counts."""
    query = select(Organization)
    if search:
        query = query.where(Organization.name.ilike(f"%{search}%"))

    query = query.order_by(Organization.name).offset(skip).limit(limit)
    orgs = (await db.execute(query)).scalars().all()

    org_ids = [org.id for org in orgs]
    if org_ids:
        total_query = (
            select(OutreachCampaign.organization_id, func.count(OutreachCampaign.id).label("count"))
            .where(OutreachCampaign.organization_id.in_(org_ids))
            .group_by(OutreachCampaign.organization_id)
        )
        total_counts = {row.organization_id: row.count for row in await db.execute(total_query)}

        active_query = total_query.where(OutreachCampaign.status.in_(ACTIVE_CAMPAIGN_STATUSES))
        active_counts = {row.organization_id: row.count for row in await db.execute(active_query)}
    else:
        total_counts = {}
        active_counts = {}

    return [
        OrganizationWithStats(
            **OrganizationRead.model_validate(org).model_dump(),
            campaign_count=total_counts.get(org.id, 0),
            active_campaign_count=active_counts.get(org.id, 0),
        )
        for org in orgs
    ]


@router.get("/{org_id}", response_model=OrganizationWithStats)
async def get_organization(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a single organization by ID."""
    org = (await db.execute(select(Organization).where(Organization.id == org_id))).scalar_one_or_none()
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")

    campaign_count = (await db.execute(
        select(func.count(OutreachCampaign.id)).where(OutreachCampaign.organization_id == org_id)
    )).scalar() or 0
    active_count = (await db.execute(
        select(func.count(OutreachCampaign.id))
        .where(OutreachCampaign.organization_id == org_id)
        .where(OutreachCampaign.status.in_(ACTIVE_CAMPAIGN_STATUSES))
    )).scalar() or 0

    return OrganizationWithStats(
        **OrganizationRead.model_validate(org).model_dump(),
        campaign_count=campaign_count,
        active_campaign_count=active_count,
    )


@router.post("", response_model=OrganizationRead, status_code=201)
async def create_organization(
    data: OrganizationCreate,
    db: AsyncSession = Depends(get_db),
):
    """Register an outreach organization."""
    slug = data.slug or make_slug(data.name)
    if not slug:
        raise HTTPException(status_code=400, detail="Organization name must contain letters or digits")

    existing = (await db.execute(select(Organization).where(Organization.slug == slug))).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=409, detail=f"Organization with slug '{slug}' already exists")

    org = Organization(id=uuid.uuid4(), **data.model_dump(exclude={"slug"}), slug=slug)
    db.add(org)
    await db.commit()
    await db.refresh(org)
    return org

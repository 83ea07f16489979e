"""Persistence collaborator for the outreach services.

Services never touch the session directly; they receive an
OutreachRepository (or a fake with the same methods in tests). Rows cross
this boundary as plain dicts.
"""

import uuid
from typing import Any
from uuid import UUID

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.organization import Organization
from app.models.outreach_campaign import OutreachCampaign
from app.models.outreach_request import OutreachRequest
from app.models.school import School
from app.models.school_recommendation import SchoolRecommendation


def _row_to_dict(obj) -> dict[str, Any]:
    return {column.key: getattr(obj, column.key) for column in obj.__table__.columns}


class OutreachRepository:
    """SQLAlchemy-backed store for schools, campaigns and outreach records.

    Every write commits immediately: records in a letter batch are persisted
    one by one and never rolled back together. A failed write is rolled back
    on its own so the session stays usable for the next record.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def _write(self, statement) -> None:
        try:
            await self.db.execute(statement)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    # --- Schools ---

    async def get_visited_school_ids(self) -> list[UUID]:
        """All school ids that appear on any outreach record, any campaign."""
        result = await self.db.execute(
            select(SchoolRecommendation.school_id).where(SchoolRecommendation.school_id.is_not(None))
        )
        return list(result.scalars().all())

    async def find_open_schools(
        self,
        province: str | None = None,
        district: str | None = None,
        school_type: str | None = None,
    ) -> list[dict]:
        query = select(School).where(School.status == "Open")
        if province:
            query = query.where(School.province == province)
        if district:
            query = query.where(School.district == district)
        if school_type:
            query = query.where(School.phase_ped == school_type)

        result = await self.db.execute(query.order_by(School.institution_name))
        return [_row_to_dict(s) for s in result.scalars().all()]

    async def find_schools_for_matching(
        self,
        province: str,
        district: str | None = None,
        quintiles: list[str] | None = None,
        limit: int = 100,
    ) -> list[dict]:
        query = select(School).where(School.province == province)
        if district:
            query = query.where(School.district == district)
        if quintiles:
            query = query.where(School.quintile.in_(quintiles))

        result = await self.db.execute(query.limit(limit))
        return [_row_to_dict(s) for s in result.scalars().all()]

    async def search_schools(
        self,
        *,
        province: str | None = None,
        district: str | None = None,
        quintile: str | None = None,
        phase: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[dict], int]:
        query = select(School)
        if province:
            query = query.where(School.province == province)
        if district:
            query = query.where(School.district.ilike(f"%{district}%"))
        if quintile:
            query = query.where(School.quintile == quintile)
        if phase:
            query = query.where(School.phase_ped.ilike(f"%{phase}%"))
        if search:
            query = query.where(School.institution_name.ilike(f"%{search}%"))

        total = (await self.db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
        result = await self.db.execute(
            query.order_by(School.institution_name).offset(skip).limit(limit)
        )
        return [_row_to_dict(s) for s in result.scalars().all()], total

    async def get_schools_by_ids(self, school_ids: list[UUID]) -> list[dict]:
        if not school_ids:
            return []
        result = await self.db.execute(select(School).where(School.id.in_(school_ids)))
        return [_row_to_dict(s) for s in result.scalars().all()]

    # --- Organizations ---

    async def get_organization(self, organization_id: UUID) -> dict | None:
        org = (await self.db.execute(
            select(Organization).where(Organization.id == organization_id)
        )).scalar_one_or_none()
        return _row_to_dict(org) if org else None

    # --- Campaigns ---

    async def create_campaign(self, values: dict) -> dict:
        campaign = OutreachCampaign(id=uuid.uuid4(), **values)
        self.db.add(campaign)
        await self._commit()
        await self.db.refresh(campaign)
        return _row_to_dict(campaign)

    async def get_campaign(self, campaign_id: UUID) -> dict | None:
        campaign = (await self.db.execute(
            select(OutreachCampaign).where(OutreachCampaign.id == campaign_id)
        )).scalar_one_or_none()
        return _row_to_dict(campaign) if campaign else None

    async def update_campaign(self, campaign_id: UUID, **values) -> None:
        await self._write(
            update(OutreachCampaign).where(OutreachCampaign.id == campaign_id).values(**values)
        )

    # --- Outreach records ---

    async def add_recommendations(self, campaign_id: UUID, records: list[dict]) -> list[dict]:
        existing = (await self.db.execute(
            select(func.count(SchoolRecommendation.id)).where(SchoolRecommendation.campaign_id == campaign_id)
        )).scalar() or 0
        rows = [
            SchoolRecommendation(id=uuid.uuid4(), campaign_id=campaign_id, sort_order=existing + i, **r)
            for i, r in enumerate(records)
        ]
        self.db.add_all(rows)
        await self._commit()
        for row in rows:
            await self.db.refresh(row)
        return [_row_to_dict(r) for r in rows]

    async def list_recommendations(self, campaign_id: UUID) -> list[dict]:
        result = await self.db.execute(
            select(SchoolRecommendation)
            .where(SchoolRecommendation.campaign_id == campaign_id)
            .order_by(SchoolRecommendation.sort_order, SchoolRecommendation.created_at)
        )
        return [_row_to_dict(r) for r in result.scalars().all()]

    async def list_accepted_recommendations(
        self,
        campaign_id: UUID,
        with_letter_only: bool = False,
    ) -> list[dict]:
        query = select(SchoolRecommendation).where(
            SchoolRecommendation.campaign_id == campaign_id,
            SchoolRecommendation.is_accepted == True,  # noqa: E712
        )
        if with_letter_only:
            query = query.where(SchoolRecommendation.generated_letter.is_not(None))

        result = await self.db.execute(
            query.order_by(SchoolRecommendation.sort_order, SchoolRecommendation.created_at)
        )
        return [_row_to_dict(r) for r in result.scalars().all()]

    async def get_recommendation(self, recommendation_id: UUID) -> dict | None:
        rec = (await self.db.execute(
            select(SchoolRecommendation).where(SchoolRecommendation.id == recommendation_id)
        )).scalar_one_or_none()
        return _row_to_dict(rec) if rec else None

    async def get_recommendation_by_token(self, token: str) -> dict | None:
        rec = (await self.db.execute(
            select(SchoolRecommendation).where(SchoolRecommendation.response_token == token)
        )).scalar_one_or_none()
        return _row_to_dict(rec) if rec else None

    async def update_recommendation(self, recommendation_id: UUID, **values) -> None:
        # Last write wins; no version check
        await self._write(
            update(SchoolRecommendation)
            .where(SchoolRecommendation.id == recommendation_id)
            .values(**values)
        )

    # --- School-initiated requests ---

    async def create_outreach_request(self, values: dict) -> dict:
        request = OutreachRequest(id=uuid.uuid4(), **values)
        self.db.add(request)
        await self._commit()
        await self.db.refresh(request)
        return _row_to_dict(request)

    async def get_outreach_request(self, request_id: UUID) -> dict | None:
        request = (await self.db.execute(
            select(OutreachRequest).where(OutreachRequest.id == request_id)
        )).scalar_one_or_none()
        return _row_to_dict(request) if request else None

    async def list_outreach_requests(
        self,
        *,
        status: str | None = None,
        outreach_type: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[dict], int]:
        query = select(OutreachRequest)
        if status:
            query = query.where(OutreachRequest.status == status)
        if outreach_type:
            query = query.where(OutreachRequest.outreach_type == outreach_type)

        total = (await self.db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
        result = await self.db.execute(
            query.order_by(OutreachRequest.created_at.desc()).offset(skip).limit(limit)
        )
        return [_row_to_dict(r) for r in result.scalars().all()], total

    async def count_outreach_requests_by_status(self) -> dict[str, int]:
        result = await self.db.execute(
            select(OutreachRequest.status, func.count(OutreachRequest.id)).group_by(OutreachRequest.status)
        )
        return {status: count for status, count in result.all()}

    async def update_outreach_request(self, request_id: UUID, **values) -> None:
        await self._write(
            update(OutreachRequest).where(OutreachRequest.id == request_id).values(**values)
        )

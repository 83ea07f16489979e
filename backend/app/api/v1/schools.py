"""School directory and underserved-school endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies.outreach import get_repository, optional_ai_gateway
from app.schemas.school import SchoolPage, SchoolRead, UnderservedRequest, UnderservedResponse
from app.services.ai_gateway import AIGateway
from app.services.outreach_repository import OutreachRepository
from app.services.underserved_finder import SchoolQueryError, find_underserved_schools

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schools", tags=["schools"])


@router.get("", response_model=SchoolPage)
async def search_schools(
    repo: OutreachRepository = Depends(get_repository),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    province: str | None = Query(None, description="Exact province name"),
    district: str | None = Query(None, description="District name fragment"),
    quintile: str | None = Query(None, description="Quintile as stored, e.g. '1'"),
    phase: str | None = Query(None, description="Phase fragment (PRIMARY, SECONDARY, ...)"),
    search: str | None = Query(None, min_length=2, description="Search by school name"),
):
    """Search the school directory."""
    items, total = await repo.search_schools(
        province=province,
        district=district,
        quintile=quintile,
        phase=phase,
        search=search,
        skip=skip,
        limit=limit,
    )
    return SchoolPage(items=[SchoolRead.model_validate(s) for s in items], total=total)


@router.get("/{school_id}", response_model=SchoolRead)
async def get_school(
    school_id: UUID,
    repo: OutreachRepository = Depends(get_repository),
):
    """Get a single school by ID."""
    schools = await repo.get_schools_by_ids([school_id])
    if not schools:
        raise HTTPException(status_code=404, detail="School not found")
    return SchoolRead.model_validate(schools[0])


@router.post("/underserved", response_model=UnderservedResponse, response_model_by_alias=True)
async def underserved_schools(
    request: UnderservedRequest,
    repo: OutreachRepository = Depends(get_repository),
    gateway: AIGateway | None = Depends(optional_ai_gateway),
):
    """Rank open, never-visited schools by priority score."""
    try:
        return await find_underserved_schools(repo, gateway, request)
    except SchoolQueryError as e:
        logger.error(f"Underserved search failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch schools")

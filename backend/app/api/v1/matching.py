"""AI school matching and needs analysis endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies.outreach import ai_http_error, get_repository, require_ai_gateway
from app.schemas.outreach import MatchRequest, MatchResponse, NeedsRequest, NeedsResponse
from app.services.ai_gateway import AIGateway, AIGatewayError
from app.services.needs_analysis import InvalidAIResponse, analyze_school_needs
from app.services.outreach_repository import OutreachRepository
from app.services.school_matcher import match_schools

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/matching", tags=["matching"])


@router.post("/schools", response_model=MatchResponse)
async def match(
    request: MatchRequest,
    repo: OutreachRepository = Depends(get_repository),
    gateway: AIGateway = Depends(require_ai_gateway),
):
    """Rank schools for the services an organization offers."""
    try:
        return await match_schools(repo, gateway, request)
    except AIGatewayError as e:
        raise ai_http_error(e)


@router.post("/needs-analysis", response_model=NeedsResponse)
async def needs_analysis(
    request: NeedsRequest,
    repo: OutreachRepository = Depends(get_repository),
    gateway: AIGateway = Depends(require_ai_gateway),
):
    """Short AI needs analysis for up to 10 schools."""
    schools = await repo.get_schools_by_ids(request.school_ids)
    if not schools:
        raise HTTPException(status_code=404, detail="No schools found")

    # Keep the caller's order
    position = {str(school_id): i for i, school_id in enumerate(request.school_ids)}
    schools.sort(key=lambda s: position.get(str(s["id"]), len(position)))

    try:
        analyzed = await analyze_school_needs(gateway, schools)
    except AIGatewayError as e:
        raise ai_http_error(e)
    except InvalidAIResponse as e:
        logger.error(f"Needs analysis returned unusable output: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return NeedsResponse(schools=analyzed)

"""Single-letter generation endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.config import get_settings
from app.dependencies.outreach import RATE_LIMIT_DETAIL, get_repository, require_ai_gateway
from app.schemas.outreach import LetterRequest, LetterResponse
from app.services.ai_gateway import AIGateway, RateLimitError
from app.services.error_mapping import GENERIC_ERROR_MESSAGE
from app.services.letter_generator import generate_letter
from app.services.outreach_repository import OutreachRepository

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/letters", tags=["letters"])


@router.post("/generate", response_model=LetterResponse)
async def generate_single_letter(
    data: LetterRequest,
    repo: OutreachRepository = Depends(get_repository),
    gateway: AIGateway = Depends(require_ai_gateway),
):
    """Generate one invitation letter without storing it."""
    if not data.campaign_id or not data.school_data or not data.visit_details:
        raise HTTPException(status_code=400, detail="Missing required fields")

    campaign = await repo.get_campaign(data.campaign_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")

    organization = await repo.get_organization(campaign["organization_id"])
    organization_name = (organization or {}).get("name") or "STEM Outreach Organization"

    try:
        letter = await generate_letter(
            gateway,
            organization_name=organization_name,
            school_data=data.school_data,
            visit_details=data.visit_details,
            model=settings.letter_model,
            max_tokens=settings.letter_max_tokens,
        )
    except RateLimitError:
        raise HTTPException(status_code=429, detail=RATE_LIMIT_DETAIL)
    except Exception:
        logger.exception(f"Letter generation failed for campaign {data.campaign_id}")
        raise HTTPException(status_code=500, detail=GENERIC_ERROR_MESSAGE)

    return LetterResponse(letter=letter)

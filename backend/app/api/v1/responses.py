"""Public endpoints a school uses to answer an invitation."""

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies.outreach import get_repository
from app.schemas.outreach import InvitationRead, SchoolResponseCreate
from app.services.campaign_service import (
    RecommendationNotFound,
    ResponseAlreadyRecorded,
    get_invitation,
    record_school_response,
)
from app.services.outreach_repository import OutreachRepository

router = APIRouter(prefix="/responses", tags=["responses"])


@router.get("/{token}", response_model=InvitationRead)
async def read_invitation(
    token: str,
    repo: OutreachRepository = Depends(get_repository),
):
    try:
        return await get_invitation(repo, token)
    except RecommendationNotFound:
        raise HTTPException(status_code=404, detail="Invitation not found")


@router.post("/{token}", response_model=InvitationRead)
async def answer_invitation(
    token: str,
    data: SchoolResponseCreate,
    repo: OutreachRepository = Depends(get_repository),
):
    """Confirm or decline attendance. Only the first answer counts."""
    try:
        return await record_school_response(repo, token, data.status, data.message)
    except RecommendationNotFound:
        raise HTTPException(status_code=404, detail="Invitation not found")
    except ResponseAlreadyRecorded as e:
        raise HTTPException(status_code=409, detail=str(e))

"""School-initiated outreach request endpoints."""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies.outreach import get_repository
from app.schemas.outreach_request import (
    OutreachRequestCreate,
    OutreachRequestPage,
    OutreachRequestRead,
    OutreachRequestReview,
    OutreachRequestStats,
    OutreachType,
)
from app.services import outreach_requests
from app.services.outreach_repository import OutreachRepository
from app.services.outreach_requests import (
    OrganizationNotFound,
    RequestAlreadyReviewed,
    RequestNotFound,
)

router = APIRouter(prefix="/outreach-requests", tags=["outreach-requests"])


@router.post("", response_model=OutreachRequestRead, status_code=201)
async def submit_outreach_request(
    data: OutreachRequestCreate,
    repo: OutreachRepository = Depends(get_repository),
):
    """A school asks for a workshop or visit. No account is needed."""
    return await outreach_requests.submit_request(repo, data.model_dump())


@router.get("", response_model=OutreachRequestPage)
async def list_outreach_requests(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    status: Literal["pending", "approved", "declined"] | None = Query(None),
    outreach_type: OutreachType | None = Query(None),
    repo: OutreachRepository = Depends(get_repository),
):
    """Newest first."""
    return await outreach_requests.list_requests(repo, status, outreach_type, skip, limit)


@router.get("/stats", response_model=OutreachRequestStats)
async def outreach_request_stats(repo: OutreachRepository = Depends(get_repository)):
    return await outreach_requests.request_stats(repo)


@router.get("/{request_id}", response_model=OutreachRequestRead)
async def get_outreach_request(
    request_id: UUID,
    repo: OutreachRepository = Depends(get_repository),
):
    try:
        return await outreach_requests.get_request(repo, request_id)
    except RequestNotFound:
        raise HTTPException(status_code=404, detail="Outreach request not found")


@router.patch("/{request_id}/review", response_model=OutreachRequestRead)
async def review_outreach_request(
    request_id: UUID,
    data: OutreachRequestReview,
    repo: OutreachRepository = Depends(get_repository),
):
    """Approve or decline. Only a pending request can be reviewed."""
    try:
        return await outreach_requests.review_request(
            repo,
            request_id,
            data.status,
            data.reviewed_by,
            data.response_notes,
            data.organization_id,
        )
    except RequestNotFound:
        raise HTTPException(status_code=404, detail="Outreach request not found")
    except OrganizationNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RequestAlreadyReviewed as e:
        raise HTTPException(status_code=409, detail=str(e))

"""Outreach campaign API endpoints."""

import logging
from datetime import datetime
from uuid import UUID

from celery.result import AsyncResult
from fastapi import APIRouter, Depends, HTTPException

from app.config import get_settings
from app.dependencies.outreach import get_mailer, get_repository, require_ai_gateway
from app.schemas.campaign import (
    AcceptSchoolsRequest,
    CampaignCreate,
    CampaignDetail,
    CampaignRead,
    GenerateLettersRequest,
    LetterUpdate,
    RecommendationRead,
    SendLettersRequest,
    SendLettersResponse,
    StatusUpdate,
    TaskAccepted,
    TaskStatus,
)
from app.services import campaign_service
from app.services.campaign_service import (
    InvalidStatusTransition,
    RecommendationNotFound,
    SchoolsNotFound,
)
from app.services.email_client import EmailClient
from app.services.letter_pipeline import LOCKED_STATUSES, CampaignLocked, CampaignNotFound
from app.services.letter_sender import NoLettersToSend, send_campaign_letters
from app.services.outreach_repository import OutreachRepository
from app.tasks.celery_app import celery_app
from app.tasks.letter_tasks import generate_letters_for_campaign

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


def _parse_visit_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid visitDate: {value}")


# Registered before /{campaign_id} so "tasks" is not parsed as a campaign id
@router.get("/tasks/{task_id}", response_model=TaskStatus)
async def get_task_status(task_id: str):
    """Poll a background letter batch."""
    result = AsyncResult(task_id, app=celery_app)
    status = TaskStatus(task_id=task_id, state=result.state)

    if result.state == "PROGRESS" and isinstance(result.info, dict):
        status.current = result.info.get("current")
        status.total = result.info.get("total")
    elif result.state == "SUCCESS" and isinstance(result.result, dict):
        status.result = result.result
        status.current = status.total = result.result.get("total")
    elif result.state == "FAILURE":
        status.error = str(result.info)

    return status


@router.post("", response_model=CampaignRead, status_code=201)
async def create_campaign(
    data: CampaignCreate,
    repo: OutreachRepository = Depends(get_repository),
):
    """Create an empty campaign in draft."""
    if not await repo.get_organization(data.organization_id):
        raise HTTPException(status_code=404, detail="Organization not found")

    visit_details = data.visit_details.model_dump(exclude_none=True) if data.visit_details else {}
    campaign = await repo.create_campaign({
        **data.model_dump(exclude={"visit_details"}),
        "visit_details": visit_details,
        "visit_date": _parse_visit_date(visit_details.get("visitDate")),
        "status": "draft",
    })
    logger.info(f"Created campaign {campaign['id']} for organization {data.organization_id}")
    return campaign


@router.get("/{campaign_id}", response_model=CampaignDetail)
async def get_campaign(
    campaign_id: UUID,
    repo: OutreachRepository = Depends(get_repository),
):
    """Campaign with its school records and response counts."""
    try:
        return await campaign_service.get_campaign_detail(repo, campaign_id)
    except CampaignNotFound:
        raise HTTPException(status_code=404, detail="Campaign not found")


@router.post("/{campaign_id}/schools", response_model=list[RecommendationRead], status_code=201)
async def accept_schools(
    campaign_id: UUID,
    data: AcceptSchoolsRequest,
    repo: OutreachRepository = Depends(get_repository),
):
    """Attach accepted schools to a campaign."""
    try:
        return await campaign_service.accept_schools(
            repo, campaign_id, [s.model_dump() for s in data.schools]
        )
    except CampaignNotFound:
        raise HTTPException(status_code=404, detail="Campaign not found")
    except SchoolsNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CampaignLocked as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post(
    "/{campaign_id}/generate-letters",
    response_model=TaskAccepted,
    status_code=202,
    # The worker builds its own gateway; refuse up front when it could not
    dependencies=[Depends(require_ai_gateway)],
)
async def generate_letters(
    campaign_id: UUID,
    data: GenerateLettersRequest | None = None,
    repo: OutreachRepository = Depends(get_repository),
):
    """Queue letter generation for every accepted school."""
    campaign = await repo.get_campaign(campaign_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    if campaign["status"] in LOCKED_STATUSES:
        raise HTTPException(status_code=409, detail=f"Letters were already sent for this campaign ({campaign['status']})")
    if not await repo.list_accepted_recommendations(campaign_id):
        raise HTTPException(status_code=400, detail="No accepted schools in this campaign")

    visit_details = None
    if data and data.visit_details:
        visit_details = data.visit_details.model_dump(exclude_none=True)

    task = generate_letters_for_campaign.delay(str(campaign_id), visit_details)
    logger.info(f"Queued letter generation for campaign {campaign_id} (task {task.id})")
    return TaskAccepted(task_id=task.id, campaign_id=campaign_id)


@router.post("/{campaign_id}/send-letters", response_model=SendLettersResponse)
async def send_letters(
    campaign_id: UUID,
    data: SendLettersRequest | None = None,
    repo: OutreachRepository = Depends(get_repository),
    mailer: EmailClient = Depends(get_mailer),
):
    """E-mail every generated letter with a response link."""
    try:
        result = await send_campaign_letters(
            repo,
            mailer,
            campaign_id,
            site_url=settings.public_site_url,
            from_email=data.from_email if data else None,
        )
    except CampaignNotFound:
        raise HTTPException(status_code=404, detail="Campaign not found")
    except NoLettersToSend as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SendLettersResponse(
        message=result.message,
        results=result.results,
        total=result.total,
        sent=result.success,
        failed=result.failed,
    )


@router.patch("/{campaign_id}/recommendations/{recommendation_id}/letter", response_model=RecommendationRead)
async def update_letter(
    campaign_id: UUID,
    recommendation_id: UUID,
    data: LetterUpdate,
    repo: OutreachRepository = Depends(get_repository),
):
    """Save a hand-edited letter."""
    try:
        return await campaign_service.update_letter(repo, campaign_id, recommendation_id, data.letter)
    except CampaignNotFound:
        raise HTTPException(status_code=404, detail="Campaign not found")
    except RecommendationNotFound:
        raise HTTPException(status_code=404, detail="Recommendation not found")


@router.patch("/{campaign_id}/status", response_model=CampaignRead)
async def update_status(
    campaign_id: UUID,
    data: StatusUpdate,
    repo: OutreachRepository = Depends(get_repository),
):
    """Move a campaign forward in its lifecycle."""
    try:
        return await campaign_service.transition_status(repo, campaign_id, data.status)
    except CampaignNotFound:
        raise HTTPException(status_code=404, detail="Campaign not found")
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

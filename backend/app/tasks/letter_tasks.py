"""Background letter generation for a whole campaign."""

import asyncio
import logging
from uuid import UUID

from app.models.base import worker_session
from app.services.ai_gateway import get_ai_gateway
from app.services.letter_pipeline import generate_campaign_letters
from app.services.outreach_repository import OutreachRepository
from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def progress_reporter(task):
    """Async progress callback that publishes PROGRESS state for ``task``.

    The result-backend write blocks, so it runs in a thread. The task id is
    read up front because Celery keeps the request context per thread.
    """
    task_id = task.request.id

    async def report(current: int, total: int):
        await asyncio.to_thread(
            task.update_state,
            task_id=task_id,
            state="PROGRESS",
            meta={"current": current, "total": total},
        )

    return report


async def _run_batch(campaign_id: str, visit_details: dict | None, on_progress) -> dict:
    async with worker_session() as session:
        result = await generate_campaign_letters(
            OutreachRepository(session),
            get_ai_gateway(),
            UUID(campaign_id),
            visit_details=visit_details,
            on_progress=on_progress,
        )
        return result.to_dict()


@celery_app.task(bind=True, name="app.tasks.letter_tasks.generate_letters_for_campaign")
def generate_letters_for_campaign(self, campaign_id: str, visit_details: dict | None = None):
    """Generate letters for every accepted school of a campaign.

    Progress is published as task state PROGRESS with {current, total}.
    """
    logger.info(f"Starting letter generation for campaign {campaign_id}")
    result = asyncio.run(_run_batch(campaign_id, visit_details, progress_reporter(self)))
    logger.info(f"Campaign {campaign_id}: {result['message']}")
    return result

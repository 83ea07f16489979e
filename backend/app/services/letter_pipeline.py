"""Letter generation batch for a campaign.

Records are processed strictly one at a time, in stored order, with a fixed
pause between records and exponential backoff when the AI gateway rate
limits. A failed record keeps generated_letter = None and never stops the
batch; letters already written stay written.

Per-record lifecycle:

    PENDING -> REQUESTING -> SUCCEEDED
                   |   ^
        rate limit |   | delay elapsed (base * 2^retry)
                   v   |
               BACKOFF_WAIT
    REQUESTING -> FAILED  (non-rate-limit error, or retries exhausted)
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable
from uuid import UUID

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.config import get_settings
from app.services.ai_gateway import AIGateway, RateLimitError
from app.services.error_mapping import public_error_message
from app.services.letter_generator import generate_letter

logger = logging.getLogger(__name__)

# Campaigns past this point have already been e-mailed
LOCKED_STATUSES = ("letters_sent", "completed")

ProgressCallback = Callable[[int, int], Any]
Sleep = Callable[[float], Awaitable[Any]]


class CampaignNotFound(Exception):
    pass


class CampaignLocked(Exception):
    """Letters were already sent for this campaign."""


class NoAcceptedSchools(Exception):
    pass


class RecordState(str, Enum):
    PENDING = "pending"
    REQUESTING = "requesting"
    BACKOFF_WAIT = "backoff_wait"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 3.0
    pacing_delay: float = 3.0

    def backoff(self) -> wait_exponential:
        """base, 2*base, 4*base, ... between attempts."""
        return wait_exponential(multiplier=self.base_delay, exp_base=2)

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        settings = get_settings()
        return cls(
            max_retries=settings.letter_max_retries,
            base_delay=settings.letter_retry_base_seconds,
            pacing_delay=settings.letter_pacing_seconds,
        )


@dataclass
class RecordOutcome:
    recommendation_id: UUID | str
    school_name: str
    state: RecordState = RecordState.PENDING
    letter: str | None = None
    error: str | None = None
    attempts: int = 0
    backoff_delays: list[float] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == RecordState.SUCCEEDED


@dataclass
class LetterBatchResult:
    campaign_id: UUID | str
    outcomes: list[RecordOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def message(self) -> str:
        text = f"Successfully generated {self.succeeded} letters"
        if self.failed:
            text += f", {self.failed} failed"
        return text

    def to_dict(self) -> dict:
        return {
            "campaign_id": str(self.campaign_id),
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "message": self.message,
            "outcomes": [
                {
                    "recommendation_id": str(o.recommendation_id),
                    "school_name": o.school_name,
                    "success": o.succeeded,
                    "error": o.error,
                    "attempts": o.attempts,
                }
                for o in self.outcomes
            ],
        }


def school_name_of(record: dict) -> str:
    data = record.get("generated_data") or {}
    return data.get("name") or data.get("schoolName") or "Unknown school"


def _parse_visit_date(visit_details: dict) -> datetime | None:
    value = visit_details.get("visitDate")
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        logger.warning(f"Unparseable visit date {value!r}, leaving visit_date unset")
        return None


async def generate_record_letter(
    gateway: AIGateway,
    record: dict,
    *,
    organization_name: str,
    visit_details: dict,
    policy: RetryPolicy,
    sleep: Sleep = asyncio.sleep,
) -> RecordOutcome:
    """Drive one record through the retry state machine."""
    outcome = RecordOutcome(recommendation_id=record["id"], school_name=school_name_of(record))
    settings = get_settings()

    def enter_backoff(retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep
        outcome.state = RecordState.BACKOFF_WAIT
        outcome.backoff_delays.append(delay)
        logger.warning(
            f"[{outcome.school_name}] Rate limited, retrying in {delay:.0f}s "
            f"(retry {retry_state.attempt_number}/{policy.max_retries})"
        )

    retrying = AsyncRetrying(
        retry=retry_if_exception_type(RateLimitError),
        stop=stop_after_attempt(policy.max_retries + 1),
        wait=policy.backoff(),
        sleep=sleep,
        before_sleep=enter_backoff,
        reraise=True,
    )

    try:
        async for attempt in retrying:
            with attempt:
                outcome.state = RecordState.REQUESTING
                outcome.attempts += 1
                letter = await generate_letter(
                    gateway,
                    organization_name=organization_name,
                    school_data=record.get("generated_data") or {},
                    visit_details=visit_details,
                    model=settings.letter_model,
                    max_tokens=settings.letter_max_tokens,
                )
    except RateLimitError as e:
        logger.warning(f"[{outcome.school_name}] Rate limited, retries exhausted")
        outcome.state = RecordState.FAILED
        outcome.error = public_error_message(e)
        return outcome
    except Exception as e:
        logger.warning(f"[{outcome.school_name}] Letter generation failed: {e}")
        outcome.state = RecordState.FAILED
        outcome.error = public_error_message(e)
        return outcome

    outcome.state = RecordState.SUCCEEDED
    outcome.letter = letter
    return outcome


async def _report_progress(on_progress: ProgressCallback | None, current: int, total: int) -> None:
    if on_progress is None:
        return
    try:
        result = on_progress(current, total)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.warning(f"Progress callback failed at {current}/{total}: {e}")


async def generate_campaign_letters(
    repo,
    gateway: AIGateway,
    campaign_id: UUID,
    *,
    visit_details: dict | None = None,
    on_progress: ProgressCallback | None = None,
    policy: RetryPolicy | None = None,
    sleep: Sleep = asyncio.sleep,
) -> LetterBatchResult:
    """Generate and store a letter for every accepted record of a campaign.

    Setup failures (campaign missing, no accepted records) raise before any
    record is attempted. After setup, nothing raises per record.
    """
    policy = policy or RetryPolicy.from_settings()

    campaign = await repo.get_campaign(campaign_id)
    if not campaign:
        raise CampaignNotFound(f"Campaign {campaign_id} not found")
    if campaign.get("status") in LOCKED_STATUSES:
        raise CampaignLocked(f"Campaign {campaign_id} is already {campaign['status']}")

    if visit_details is not None:
        await repo.update_campaign(
            campaign_id,
            visit_details=visit_details,
            visit_date=_parse_visit_date(visit_details),
        )
    else:
        visit_details = campaign.get("visit_details") or {}

    organization = await repo.get_organization(campaign["organization_id"])
    organization_name = (organization or {}).get("name") or "STEM Outreach Organization"

    records = await repo.list_accepted_recommendations(campaign_id)
    if not records:
        raise NoAcceptedSchools(f"No accepted schools for campaign {campaign_id}")

    total = len(records)
    logger.info(f"Generating {total} letters for campaign {campaign_id}")
    result = LetterBatchResult(campaign_id=campaign_id)

    for index, record in enumerate(records, start=1):
        if index > 1:
            await sleep(policy.pacing_delay)

        outcome = await generate_record_letter(
            gateway,
            record,
            organization_name=organization_name,
            visit_details=visit_details,
            policy=policy,
            sleep=sleep,
        )

        if outcome.succeeded:
            try:
                await repo.update_recommendation(record["id"], generated_letter=outcome.letter)
            except Exception as e:
                logger.error(f"[{outcome.school_name}] Failed to store letter: {e}")
                outcome.state = RecordState.FAILED
                outcome.letter = None
                outcome.error = public_error_message(e)

        result.outcomes.append(outcome)
        await _report_progress(on_progress, index, total)

    await repo.update_campaign(campaign_id, status="letters_generated")
    logger.info(f"Campaign {campaign_id}: {result.message}")
    return result

"""Campaign lifecycle: attaching schools, letter edits, status moves and school replies."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from app.models.outreach_campaign import CAMPAIGN_STATUSES
from app.services.letter_pipeline import LOCKED_STATUSES, CampaignLocked, CampaignNotFound
from app.services.needs_analysis import school_location
from app.services.prompt_security import sanitize_ai_output

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "English"


class RecommendationNotFound(Exception):
    pass


class SchoolsNotFound(Exception):
    pass


class InvalidStatusTransition(Exception):
    pass


class ResponseAlreadyRecorded(Exception):
    pass


def school_snapshot(school: dict, selection: dict) -> dict:
    """Copy of the school as it looked when accepted.

    Letters and e-mails read this snapshot, so later edits to the live
    school row do not change what a campaign sends.
    """
    return {
        "schoolId": str(school["id"]),
        "name": school.get("institution_name"),
        "location": school_location(school),
        "learners": school.get("learners_2024") or 0,
        "educators": school.get("educators_2024") or 0,
        "languageOfInstruction": selection.get("language_of_instruction") or DEFAULT_LANGUAGE,
        "quintile": school.get("quintile"),
        "contact_email": selection.get("contact_email"),
        "needsAnalysis": selection.get("needs_analysis"),
        "matchScore": selection.get("match_score"),
        "priorityReason": selection.get("priority_reason"),
    }


async def _require_campaign(repo, campaign_id: UUID) -> dict:
    campaign = await repo.get_campaign(campaign_id)
    if not campaign:
        raise CampaignNotFound(f"Campaign {campaign_id} not found")
    return campaign


async def accept_schools(repo, campaign_id: UUID, selections: list[dict]) -> list[dict]:
    """Create one accepted outreach record per selected school."""
    campaign = await _require_campaign(repo, campaign_id)
    if campaign.get("status") in LOCKED_STATUSES:
        raise CampaignLocked(f"Campaign {campaign_id} is already {campaign['status']}")

    school_ids = [s["school_id"] for s in selections]
    schools = {str(s["id"]): s for s in await repo.get_schools_by_ids(school_ids)}
    missing = [str(i) for i in school_ids if str(i) not in schools]
    if missing:
        raise SchoolsNotFound(f"Unknown schools: {', '.join(missing)}")

    records = []
    for selection in selections:
        school = schools[str(selection["school_id"])]
        snapshot = school_snapshot(school, selection)
        records.append({
            "school_id": school["id"],
            "generated_data": snapshot,
            "enrollment_total": snapshot["learners"] or None,
            "language_of_instruction": snapshot["languageOfInstruction"],
            "is_accepted": True,
            "is_replacement": bool(selection.get("is_replacement")),
        })

    created = await repo.add_recommendations(campaign_id, records)
    if campaign.get("status") == "draft":
        await repo.update_campaign(campaign_id, status="review")
    logger.info(f"Campaign {campaign_id}: accepted {len(created)} schools")
    return created


def campaign_stats(records: list[dict]) -> dict:
    accepted = [r for r in records if r.get("is_accepted")]
    return {
        "total": len(records),
        "accepted": len(accepted),
        "letters_generated": sum(1 for r in accepted if r.get("generated_letter")),
        "letters_sent": sum(1 for r in accepted if r.get("letter_sent_at")),
        "confirmed": sum(1 for r in accepted if r.get("response_status") == "confirmed"),
        "declined": sum(1 for r in accepted if r.get("response_status") == "declined"),
        "pending": sum(1 for r in accepted if r.get("response_status") == "pending"),
    }


async def get_campaign_detail(repo, campaign_id: UUID) -> dict:
    campaign = await _require_campaign(repo, campaign_id)
    records = await repo.list_recommendations(campaign_id)
    return {**campaign, "recommendations": records, "stats": campaign_stats(records)}


async def update_letter(repo, campaign_id: UUID, recommendation_id: UUID, letter: str) -> dict:
    """Store a hand-edited letter, cleaned the same way as model output."""
    await _require_campaign(repo, campaign_id)
    record = await repo.get_recommendation(recommendation_id)
    if not record or str(record["campaign_id"]) != str(campaign_id):
        raise RecommendationNotFound(f"Recommendation {recommendation_id} not found")

    cleaned = sanitize_ai_output(letter)
    await repo.update_recommendation(recommendation_id, generated_letter=cleaned)
    return {**record, "generated_letter": cleaned}


async def transition_status(repo, campaign_id: UUID, new_status: str) -> dict:
    campaign = await _require_campaign(repo, campaign_id)
    current = campaign.get("status") or "draft"
    if new_status not in CAMPAIGN_STATUSES:
        raise InvalidStatusTransition(f"Unknown status {new_status!r}")
    if CAMPAIGN_STATUSES.index(new_status) <= CAMPAIGN_STATUSES.index(current):
        raise InvalidStatusTransition(f"Cannot move campaign from {current} to {new_status}")

    await repo.update_campaign(campaign_id, status=new_status)
    logger.info(f"Campaign {campaign_id}: {current} -> {new_status}")
    return {**campaign, "status": new_status}


async def get_invitation(repo, token: str) -> dict:
    record = await repo.get_recommendation_by_token(token)
    if not record:
        raise RecommendationNotFound("Invitation not found")
    campaign = await repo.get_campaign(record["campaign_id"]) or {}
    data = record.get("generated_data") or {}
    return {
        "school_name": data.get("name") or data.get("schoolName") or "Unknown school",
        "visit_details": campaign.get("visit_details") or {},
        "visit_date": campaign.get("visit_date"),
        "response_status": record.get("response_status"),
        "school_response": record.get("school_response"),
        "responded_at": record.get("responded_at"),
    }


async def record_school_response(repo, token: str, status: str, message: str | None = None) -> dict:
    """Record a school's answer. Each invitation can be answered once."""
    record = await repo.get_recommendation_by_token(token)
    if not record:
        raise RecommendationNotFound("Invitation not found")
    if record.get("response_status") != "pending":
        raise ResponseAlreadyRecorded(f"Invitation already answered: {record.get('response_status')}")

    note = sanitize_ai_output(message) if message else ""
    await repo.update_recommendation(
        record["id"],
        response_status=status,
        school_response=note or None,
        responded_at=datetime.now(timezone.utc),
    )
    logger.info(f"Recommendation {record['id']}: school {status}")
    return await get_invitation(repo, token)

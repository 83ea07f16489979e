"""Underserved-school finder — filter, score and shortlist unvisited schools."""

import logging

from app.schemas.school import ScoredSchool, UnderservedRequest, UnderservedResponse
from app.services.ai_gateway import AIGateway
from app.services.priority_scoring import rank_underserved

logger = logging.getLogger(__name__)

INSIGHT_SYSTEM_PROMPT = (
    "You are a STEM outreach coordinator assistant. Provide brief, actionable insights "
    "about school batches for outreach planning. Be concise (2-3 sentences max)."
)


class SchoolQueryError(Exception):
    """Schools could not be loaded; nothing can be ranked."""


def _school_summary_line(school: dict) -> str:
    learners = school.get("learners_2024") or "unknown"
    return (
        f"{school.get('institution_name')} ({school.get('district')}, Q{school.get('quintile')}, "
        f"{school.get('urban_rural')}, {learners} learners)"
    )


async def generate_batch_insight(gateway: AIGateway | None, batch: list[dict]) -> str | None:
    """Ask the model for a short note about the shortlist.

    Best effort: no retry, and any failure just means no insight.
    """
    if gateway is None or not batch:
        return None

    summary = "\n".join(_school_summary_line(s) for s in batch)
    user_prompt = (
        f"Analyze this batch of {len(batch)} underserved schools for STEM outreach:\n\n{summary}\n\n"
        "Provide a brief insight about this batch's characteristics and any recommendations "
        "for the outreach team."
    )
    try:
        insight = await gateway.chat(INSIGHT_SYSTEM_PROMPT, user_prompt)
    except Exception as e:
        logger.warning(f"AI insights error (non-critical): {e}")
        return None

    logger.info("AI insights generated successfully")
    return insight


async def find_underserved_schools(
    repo,
    gateway: AIGateway | None,
    request: UnderservedRequest,
) -> UnderservedResponse:
    logger.info(
        "Finding underserved schools: province=%s district=%s school_type=%s batch_size=%s",
        request.province, request.district, request.school_type, request.batch_size,
    )

    # Without the visited set, contacted schools would be ranked again
    try:
        visited_ids = await repo.get_visited_school_ids()
    except Exception as e:
        logger.exception("Error fetching visited schools")
        raise SchoolQueryError("Failed to fetch schools") from e
    logger.info(f"Found {len(visited_ids)} previously visited schools")

    try:
        schools = await repo.find_open_schools(
            province=request.province,
            district=request.district,
            school_type=request.school_type,
        )
    except Exception as e:
        logger.exception("Error fetching schools")
        raise SchoolQueryError("Failed to fetch schools") from e

    if not schools:
        return UnderservedResponse(
            schools=[],
            total_underserved=0,
            total_visited=len(visited_ids),
            message="No schools found matching the criteria",
        )

    ranking = rank_underserved(schools, visited_ids, request.batch_size)
    logger.info(f"Found {ranking.total_underserved} underserved schools")

    ai_insights = await generate_batch_insight(gateway, ranking.schools)

    return UnderservedResponse(
        schools=[ScoredSchool.model_validate(s) for s in ranking.schools],
        total_underserved=ranking.total_underserved,
        total_visited=len(visited_ids),
        ai_insights=ai_insights,
        message=(
            f"Found {ranking.total_underserved} underserved schools. "
            f"Showing top {len(ranking.schools)} priority schools."
        ),
    )

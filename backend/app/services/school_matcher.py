"""AI school matching with a deterministic local fallback ranking."""

import json
import logging

from app.schemas.outreach import AIMatchResult, MatchRequest
from app.services.ai_gateway import AIGateway
from app.services.ai_response import parse_ai_json, validate_model

logger = logging.getLogger(__name__)

MATCH_SYSTEM_PROMPT = (
    "You are an expert at matching STEM organizations with underserved schools. "
    "Always respond with valid JSON only."
)
DEFAULT_SERVICES = ["STEM workshops", "Science demonstrations"]
MAX_SCHOOLS_IN_PROMPT = 50
FALLBACK_SUMMARY = "Fallback ranking based on quintile and outreach history"


def school_for_matching(school: dict, visited: set[str]) -> dict:
    return {
        "id": str(school.get("id")),
        "name": school.get("institution_name"),
        "province": school.get("province"),
        "district": school.get("district"),
        "quintile": school.get("quintile"),
        "phase": school.get("phase_ped"),
        "urbanRural": school.get("urban_rural"),
        "learners": school.get("learners_2024"),
        "educators": school.get("educators_2024"),
        "hasReceivedOutreach": str(school.get("id")) in visited,
        "latitude": school.get("latitude"),
        "longitude": school.get("longitude"),
        "telephone": school.get("telephone"),
        "address": school.get("street_address") or school.get("postal_address"),
    }


def _fallback_quintile(value) -> int:
    text = str(value or "5").replace("Q", "").strip()
    try:
        return int(text)
    except ValueError:
        return 5


def fallback_ranking(schools: list[dict], max_schools: int) -> dict:
    """Local ranking used when the model's answer cannot be parsed.

    Unvisited schools first, then lower quintile first; input order breaks
    ties. Scores step down by 5 from 100.
    """
    ordered = sorted(
        schools,
        key=lambda s: (s["hasReceivedOutreach"], _fallback_quintile(s.get("quintile"))),
    )
    return {
        "recommendations": [
            {
                "schoolId": s["id"],
                "schoolName": s["name"],
                "matchScore": 100 - i * 5,
                "priorityReason": (
                    "Previously contacted" if s["hasReceivedOutreach"]
                    else f"Underserved {s.get('quintile')} school"
                ),
                "suggestedActivities": ["STEM workshop", "Science demonstration"],
            }
            for i, s in enumerate(ordered[:max_schools])
        ],
        "summary": FALLBACK_SUMMARY,
    }


def build_match_prompt(schools: list[dict], services: list[str], max_schools: int) -> str:
    return f"""You are an AI matching engine for STEM outreach in South Africa.

Your task is to analyze and rank schools for STEM outreach based on these criteria:
1. **Underserved priority**: Schools that haven't received outreach should rank higher
2. **Quintile priority**: Lower quintile schools (Q1-Q3) should rank higher as they have fewer resources
3. **Size impact**: Schools with more learners = greater impact potential
4. **Geographic clustering**: Group nearby schools for efficient route planning

Organization offering these services: {json.dumps(services)}

Available schools data:
{json.dumps(schools[:MAX_SCHOOLS_IN_PROMPT], indent=2)}

Return a JSON object with this structure:
{{
  "recommendations": [
    {{
      "schoolId": "uuid",
      "schoolName": "name",
      "matchScore": 0-100,
      "priorityReason": "brief explanation",
      "suggestedActivities": ["activity1", "activity2"]
    }}
  ],
  "summary": "brief summary of the matching strategy"
}}

Select the top {max_schools} schools, prioritizing underserved schools in lower quintiles."""


async def match_schools(repo, gateway: AIGateway, request: MatchRequest) -> dict:
    """Rank schools for an organization's services.

    Gateway errors (rate limit, credits, outage) propagate to the caller.
    An answer that does not parse, or parses to the wrong shape, triggers
    the local fallback.
    """
    schools = await repo.find_schools_for_matching(
        province=request.province,
        district=request.district,
        quintiles=request.target_quintiles,
    )
    logger.info(f"Found {len(schools)} schools matching criteria")

    try:
        visited = {str(v) for v in await repo.get_visited_school_ids()}
    except Exception as e:
        logger.error(f"Error fetching outreach history: {e}")
        visited = set()

    school_data = [school_for_matching(s, visited) for s in schools]
    prompt = build_match_prompt(
        school_data,
        request.services_offered or DEFAULT_SERVICES,
        request.max_schools,
    )

    content = await gateway.chat(MATCH_SYSTEM_PROMPT, prompt)
    parsed = parse_ai_json(content)

    match_result = validate_model(AIMatchResult, parsed.data) if parsed.ok else None
    if match_result is None:
        logger.warning("Using fallback ranking for school matching")
        match_result = AIMatchResult.model_validate(fallback_ranking(school_data, request.max_schools))

    by_id = {s["id"]: s for s in school_data}
    recommendations = [
        {**rec.model_dump(), "schoolDetails": by_id.get(rec.schoolId)}
        for rec in match_result.recommendations
    ]

    logger.info(f"Returning {len(recommendations)} matched schools")
    return {
        "success": True,
        "recommendations": recommendations,
        "summary": match_result.summary,
        "totalSchoolsAnalyzed": len(school_data),
    }

"""AI needs analysis for a shortlist of schools."""

import json
import logging

from app.services.ai_gateway import AIGateway
from app.schemas.outreach import AINeedsAnalysis
from app.services.ai_response import parse_ai_json, validate_model

logger = logging.getLogger(__name__)

MAX_SCHOOLS = 10
DEFAULT_ANALYSIS = "This school would benefit from STEM outreach programs to enhance educational opportunities."

NEEDS_SYSTEM_PROMPT = """You are an expert educational outreach coordinator for South Africa specializing in STEM and space education programs.

Your task is to analyze schools and provide a brief needs analysis for each one based on their characteristics.

Consider these factors when writing the needs analysis:
- Quintile (1-5, where 1 = poorest, 5 = least poor)
- No-fee school status (indicates resource constraints)
- Urban vs Rural location (affects accessibility and infrastructure)
- Student-teacher ratio
- Geographic and community context

For each school, provide a 2-3 sentence needs analysis that explains:
1. Why this school would benefit from STEM outreach
2. What specific gaps or challenges it faces

Return a JSON object with this structure:
{
  "analyses": [
    {
      "schoolName": "Exact school name from input",
      "needsAnalysis": "2-3 sentence analysis here"
    }
  ]
}"""


class InvalidAIResponse(Exception):
    pass


def school_location(school: dict) -> str:
    area = school.get("suburb") or school.get("township_village") or school.get("town_city")
    return f"{area}, {school.get('district')}, {school.get('province')}"


def _for_prompt(school: dict) -> dict:
    return {
        "name": school.get("institution_name"),
        "location": school_location(school),
        "quintile": school.get("quintile") or "Unknown",
        "noFeeSchool": school.get("no_fee_school"),
        "urbanRural": school.get("urban_rural"),
        "learners": school.get("learners_2024") or 0,
        "educators": school.get("educators_2024") or 0,
        "sector": school.get("sector"),
        "phase": school.get("phase_ped"),
    }


async def analyze_school_needs(gateway: AIGateway, schools: list[dict]) -> list[dict]:
    batch = schools[:MAX_SCHOOLS]
    if not batch:
        return []

    prompt_rows = [_for_prompt(s) for s in batch]
    user_prompt = (
        f"Analyze these {len(prompt_rows)} schools and provide a needs analysis for each:\n\n"
        f"{json.dumps(prompt_rows, indent=2)}\n\n"
        "Return the needs analysis for each school in the specified JSON format."
    )

    content = await gateway.chat(NEEDS_SYSTEM_PROMPT, user_prompt, max_tokens=2000)
    parsed = parse_ai_json(content)
    if not parsed.ok or not isinstance(parsed.data, dict):
        raise InvalidAIResponse("Invalid AI response format")

    # Entries with the wrong shape keep their position but count as missing
    raw = parsed.data.get("analyses")
    analyses = [validate_model(AINeedsAnalysis, a) for a in (raw if isinstance(raw, list) else [])]
    by_name = {a.schoolName: a for a in analyses if a and a.schoolName}

    analyzed = []
    for index, school in enumerate(batch):
        analysis = by_name.get(school.get("institution_name"))
        if analysis is None and index < len(analyses):
            analysis = analyses[index]
        analyzed.append({
            "id": str(school.get("id")) if school.get("id") else None,
            "name": school.get("institution_name"),
            "location": school_location(school),
            "learners": school.get("learners_2024") or 0,
            "educators": school.get("educators_2024") or 0,
            "languageOfInstruction": school.get("language_of_instruction") or "Not specified",
            "quintile": school.get("quintile") or "Unknown",
            "noFeeSchool": school.get("no_fee_school") or "Unknown",
            "urbanRural": school.get("urban_rural") or "Unknown",
            "needsAnalysis": analysis.needsAnalysis if analysis else DEFAULT_ANALYSIS,
        })
    return analyzed

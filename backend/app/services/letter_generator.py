"""Invitation letter generation for a single school."""

import logging

from app.services.ai_gateway import AIGateway, RateLimitError
from app.services.prompt_security import sanitize_ai_output, sanitize_prompt_input

logger = logging.getLogger(__name__)

LETTER_SYSTEM_PROMPT = """You are a professional letter writer for educational outreach programs in South Africa.
Generate a formal, professional letter inviting a school to participate in a STEM and space education outreach visit.

The letter should:
- Be formal and professional
- Include all visit details
- Highlight the benefits for learners
- Request confirmation of participation
- Be culturally appropriate for South African schools
- Include contact information for questions"""


class LetterGenerationError(Exception):
    """Letter could not be produced for a reason other than rate limiting."""


def _field(data: dict, *keys: str, default: str = "") -> str:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return sanitize_prompt_input(value)
    return default


def build_letter_prompt(organization_name: str, school_data: dict, visit_details: dict) -> str:
    """User prompt for one school. Every interpolated value is sanitized."""
    return f"""Generate a formal invitation letter for the following school outreach visit:

Organization: {sanitize_prompt_input(organization_name)}
School Name: {_field(school_data, "name", "schoolName", "institution_name")}
School Location: {_field(school_data, "location")}
Total Enrollment: {_field(school_data, "learners", default="0")} learners
Language of Instruction: {_field(school_data, "languageOfInstruction", default="English")}

Visit Details:
Date: {_field(visit_details, "visitDate")}
Time: {_field(visit_details, "visitTime")}
Duration: {_field(visit_details, "duration")}
Program Description: {_field(visit_details, "programDescription")}
Target Grades: {_field(visit_details, "targetGrades")}
Expected Participants: {_field(visit_details, "expectedParticipants")}

Additional Information: {_field(visit_details, "additionalInfo", default="N/A")}

Format the letter professionally with proper salutations, body paragraphs, and closing."""


async def generate_letter(
    gateway: AIGateway,
    *,
    organization_name: str,
    school_data: dict,
    visit_details: dict,
    model: str | None = None,
    max_tokens: int | None = None,
) -> str:
    """Generate and sanitize one invitation letter.

    RateLimitError propagates untouched so the caller can back off; anything
    else becomes LetterGenerationError.
    """
    user_prompt = build_letter_prompt(organization_name, school_data, visit_details)

    try:
        raw = await gateway.chat(LETTER_SYSTEM_PROMPT, user_prompt, model=model, max_tokens=max_tokens)
    except RateLimitError:
        raise
    except Exception as e:
        raise LetterGenerationError(str(e)) from e

    letter = sanitize_ai_output(raw)
    if not letter:
        raise LetterGenerationError("Empty letter after sanitization")
    return letter

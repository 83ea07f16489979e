"""Parsing of JSON payloads returned by the AI gateway."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCED = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?\s*```", re.IGNORECASE)
_EMBEDDED_OBJECT = re.compile(r"\{[\s\S]*\}")


@dataclass
class ParsedResponse:
    """Outcome of parsing model output.

    kind is "strict" for bare JSON, "fenced" when the JSON had to be dug out
    of a code fence or surrounding prose, and "invalid" when nothing parsed.
    """

    kind: Literal["strict", "fenced", "invalid"]
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.kind != "invalid"


def strip_code_fences(text: str) -> str:
    match = _FENCED.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def parse_ai_json(text: str | None) -> ParsedResponse:
    if not text:
        return ParsedResponse("invalid")

    try:
        return ParsedResponse("strict", json.loads(text))
    except json.JSONDecodeError:
        pass

    candidates = [strip_code_fences(text)]
    match = _EMBEDDED_OBJECT.search(text)
    if match:
        candidates.append(match.group(0))

    for candidate in candidates:
        try:
            return ParsedResponse("fenced", json.loads(candidate))
        except json.JSONDecodeError:
            continue

    logger.warning(f"Failed to parse AI response as JSON: {text[:200]!r}")
    return ParsedResponse("invalid")


def validate_model(model_cls: type[ModelT], data: Any) -> ModelT | None:
    """Check parsed output against the shape the prompt asked for.

    None when the data is missing or has the wrong shape.
    """
    if data is None:
        return None
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        logger.warning(f"AI response has unexpected shape: {e}")
        return None

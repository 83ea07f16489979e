"""Prompt-injection filtering for AI inputs and sanitization of AI outputs."""

import re

import nh3

MAX_PROMPT_INPUT_LENGTH = 200

# Phrases used to hijack the model's instructions
_INJECTION_PATTERNS = [
    re.compile(r"ignore\s+(?:previous|all|prior)\s+instructions?", re.IGNORECASE),
    re.compile(r"system\s*:", re.IGNORECASE),
    re.compile(r"you\s+are\s+now", re.IGNORECASE),
    re.compile(r"forget\s+(?:everything|all|previous)", re.IGNORECASE),
    re.compile(r"new\s+instructions?", re.IGNORECASE),
    re.compile(r"reveal\s+(?:api|key|password|secret|token)", re.IGNORECASE),
    re.compile(r"disregard\s+(?:previous|all|prior)", re.IGNORECASE),
    re.compile(r"override\s+instructions?", re.IGNORECASE),
    re.compile(r"<\|.*?\|>"),  # special tokens
    re.compile(r"\[/?INST\]", re.IGNORECASE),
]

_SCRIPT_BLOCK = re.compile(r"<script\b.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_IFRAME_BLOCK = re.compile(r"<iframe\b.*?</iframe\s*>", re.IGNORECASE | re.DOTALL)
# Unterminated or stray tags left after block removal
_SCRIPT_OR_IFRAME_TAG = re.compile(r"</?\s*(?:script|iframe)\b[^>]*>?", re.IGNORECASE)
_EVENT_HANDLER = re.compile(
    r"""\bon[a-z]+\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]*)""",
    re.IGNORECASE,
)
# Anything still matching these is cut out until none remain
_RESIDUAL = re.compile(r"<\s*(?:script|iframe)|on[a-z]+\s*=", re.IGNORECASE)

_LETTER_TAGS = {"b", "i", "em", "strong", "p", "br", "ul", "ol", "li"}


def sanitize_prompt_input(value) -> str:
    """Strip prompt-injection phrases, collapse whitespace and cap length.

    Every free-text field that ends up inside a prompt goes through here.
    """
    if value is None:
        return ""
    clean = str(value).strip()

    for pattern in _INJECTION_PATTERNS:
        clean = pattern.sub("", clean)

    clean = re.sub(r"\s+", " ", clean).strip()
    return clean[:MAX_PROMPT_INPUT_LENGTH]


def sanitize_ai_output(output: str | None) -> str:
    """Remove script/iframe content and inline event handlers from model output.

    Removal repeats until nothing changes, so fragments that join up after a
    cut (e.g. ``<scr<script></script>ipt``) are caught on the next pass.
    """
    if not output:
        return ""

    clean = output
    while True:
        previous = clean
        clean = _SCRIPT_BLOCK.sub("", clean)
        clean = _IFRAME_BLOCK.sub("", clean)
        clean = _SCRIPT_OR_IFRAME_TAG.sub("", clean)
        clean = _EVENT_HANDLER.sub("", clean)
        clean = _RESIDUAL.sub("", clean)
        if clean == previous:
            break

    return clean.strip()


def sanitize_html(dirty: str | None) -> str:
    """Allow only basic formatting tags, no attributes."""
    if not dirty:
        return ""
    return nh3.clean(dirty, tags=_LETTER_TAGS, attributes={})


def escape_text(value: str | None) -> str:
    """Escape HTML special characters for display as plain text."""
    if not value:
        return ""
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
        .replace("/", "&#x2F;")
        .strip()
    )

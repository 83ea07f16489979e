"""Map internal exceptions to messages that are safe to show users."""

from app.services.ai_gateway import PaymentRequiredError, RateLimitError

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again or contact support."

# Checked in order; first keyword hit wins
_KEYWORD_MESSAGES = [
    (("unauthorized", "authorization"), "You must be logged in to perform this action."),
    (("permission", "admin"), "You do not have permission to perform this action."),
    (("organization",), "Organization access required. Please contact your administrator."),
    (("rate limit",), "Too many requests. Please try again in a moment."),
    (("openai", "ai gateway", "ai service", "from ai", "ai credits"), "AI service temporarily unavailable. Please try again."),
    (("invalid", "validation"), "The information provided is invalid. Please check your input."),
    (("fetch", "network", "connect", "timeout"), "Network error. Please check your connection and try again."),
]


def public_error_message(error: BaseException | None) -> str:
    if isinstance(error, RateLimitError):
        return "Too many requests. Please try again in a moment."
    if isinstance(error, PaymentRequiredError):
        return "AI service temporarily unavailable. Please try again."
    if error is None:
        return GENERIC_ERROR_MESSAGE

    message = str(error).lower()
    for keywords, public in _KEYWORD_MESSAGES:
        if any(k in message for k in keywords):
            return public
    return GENERIC_ERROR_MESSAGE

"""AI gateway client — OpenAI-compatible chat completions over httpx."""

import logging
from functools import lru_cache

import httpx

from app.config import get_settings

logger = logging.getLogger(__name__)


class AIGatewayError(Exception):
    """Base class for AI gateway failures."""


class AIGatewayNotConfigured(AIGatewayError):
    """No API key configured for the gateway."""


class RateLimitError(AIGatewayError):
    """Gateway answered 429; retry after a delay."""


class PaymentRequiredError(AIGatewayError):
    """Gateway answered 402: AI credits exhausted."""


class AIGatewayUnavailable(AIGatewayError):
    """Transport failure or unexpected status from the gateway."""


class EmptyResponseError(AIGatewayError):
    """Gateway answered without any message content."""


class AIGateway:
    """Thin client for a hosted chat-completion endpoint.

    One instance is built at startup and handed to services explicitly,
    which lets tests swap in a scripted fake.
    """

    def __init__(
        self,
        api_key: str,
        url: str,
        default_model: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.url = url
        self.default_model = default_model
        self.timeout = timeout
        self._transport = transport

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Send a system + user prompt and return the first choice content."""
        payload: dict = {
            "model": model or self.default_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if max_tokens:
            payload["max_tokens"] = max_tokens

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
        except httpx.RequestError as e:
            logger.error(f"AI gateway request failed: {e}")
            raise AIGatewayUnavailable(str(e)) from e

        if response.status_code == 429:
            raise RateLimitError("Rate limit exceeded")
        if response.status_code == 402:
            raise PaymentRequiredError("AI credits exhausted")
        if response.status_code >= 400:
            logger.error(f"AI gateway error {response.status_code}: {response.text[:500]}")
            raise AIGatewayUnavailable(f"AI gateway returned {response.status_code}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EmptyResponseError("Malformed response from AI gateway") from e

        if not content:
            raise EmptyResponseError("No response from AI")
        return content


@lru_cache
def get_ai_gateway() -> AIGateway:
    """Process-wide gateway built from settings."""
    settings = get_settings()
    if not settings.ai_gateway_api_key:
        raise AIGatewayNotConfigured("AI gateway API key is not configured")
    return AIGateway(
        api_key=settings.ai_gateway_api_key,
        url=settings.ai_gateway_url,
        default_model=settings.ai_model,
        timeout=settings.ai_timeout,
    )


def get_optional_ai_gateway() -> AIGateway | None:
    """Gateway for best-effort callers; None when not configured."""
    try:
        return get_ai_gateway()
    except AIGatewayNotConfigured:
        return None

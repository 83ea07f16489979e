"""Transactional e-mail delivery through the Resend HTTP API."""

import logging
import re
from functools import lru_cache
import html as html_module

import httpx

from app.config import get_settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """The provider did not accept the message."""


def html_to_text(content: str) -> str:
    """Plain-text alternative for inbox previews."""
    text = re.sub(r"<(script|style)[^>]*>.*?</\1>", "", content, flags=re.DOTALL | re.I)
    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.I)
    text = re.sub(r"<[^>]+>", " ", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n\s*\n+", "\n\n", text).strip()
    return html_module.unescape(text)


class EmailClient:
    def __init__(
        self,
        api_key: str | None,
        url: str,
        default_from: str,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.url = url
        self.default_from = default_from
        self.timeout = timeout
        self._transport = transport

    async def send(
        self,
        *,
        to: str,
        subject: str,
        html: str,
        from_email: str | None = None,
    ) -> str | None:
        """Send one message. Returns the provider message id."""
        if not self.api_key:
            raise EmailDeliveryError("E-mail provider API key is not configured")

        payload = {
            "from": from_email or self.default_from,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        text = html_to_text(html)
        if text:
            payload["text"] = text

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
            raise EmailDeliveryError(f"E-mail request failed: {e}") from e

        if response.status_code >= 400:
            raise EmailDeliveryError(f"Resend API error {response.status_code}: {response.text[:500]}")

        message_id = response.json().get("id")
        logger.info(f"E-mail sent to {to} (id={message_id})")
        return message_id


@lru_cache
def get_email_client() -> EmailClient:
    settings = get_settings()
    return EmailClient(
        api_key=settings.resend_api_key,
        url=settings.resend_api_url,
        default_from=settings.default_from_email,
        timeout=settings.email_timeout,
    )

"""Service dependencies for the outreach API routes."""

import logging

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import get_db
from app.services.ai_gateway import (
    AIGateway,
    AIGatewayError,
    AIGatewayNotConfigured,
    PaymentRequiredError,
    RateLimitError,
    get_ai_gateway,
    get_optional_ai_gateway,
)
from app.services.email_client import EmailClient, get_email_client
from app.services.outreach_repository import OutreachRepository

logger = logging.getLogger(__name__)

RATE_LIMIT_DETAIL = "Rate limit exceeded. Please try again in a moment."
PAYMENT_REQUIRED_DETAIL = "AI credits exhausted. Please add credits to your workspace."


async def get_repository(db: AsyncSession = Depends(get_db)) -> OutreachRepository:
    return OutreachRepository(db)


def require_ai_gateway() -> AIGateway:
    """Configured gateway or 503."""
    try:
        return get_ai_gateway()
    except AIGatewayNotConfigured:
        raise HTTPException(status_code=503, detail="AI service is not configured")


def optional_ai_gateway() -> AIGateway | None:
    return get_optional_ai_gateway()


def get_mailer() -> EmailClient:
    return get_email_client()


def ai_http_error(error: AIGatewayError) -> HTTPException:
    """HTTP error for a gateway failure that reached a route."""
    if isinstance(error, RateLimitError):
        return HTTPException(status_code=429, detail=RATE_LIMIT_DETAIL)
    if isinstance(error, PaymentRequiredError):
        return HTTPException(status_code=402, detail=PAYMENT_REQUIRED_DETAIL)
    logger.error(f"AI gateway failure: {error}")
    return HTTPException(status_code=502, detail="AI service temporarily unavailable. Please try again.")

"""FastAPI application for the STEM outreach planner."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from sqlalchemy import text

from app.config import get_settings
from app.models.base import engine, AsyncSessionLocal, Base
from app.api.v1 import router as api_v1_router
from app.tasks.celery_app import celery_app

# Imported for their side effect of registering tables on Base.metadata
from app.models.organization import Organization  # noqa: F401
from app.models.school import School  # noqa: F401
from app.models.outreach_campaign import OutreachCampaign  # noqa: F401
from app.models.outreach_request import OutreachRequest  # noqa: F401
from app.models.school_recommendation import SchoolRecommendation  # noqa: F401

logger = logging.getLogger(__name__)
settings = get_settings()


def _log_missing_credentials():
    if not settings.ai_gateway_api_key:
        logger.warning("AI gateway API key not set; AI endpoints will return 503")
    if not settings.resend_api_key:
        logger.warning("Resend API key not set; letters cannot be e-mailed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    _log_missing_credentials()
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Underserved-school prioritization and outreach letter planning for South African STEM outreach",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


async def _check_database() -> dict:
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return {"ok": True}
    except Exception as e:
        return {"ok": False, "message": str(e)}


def _check_redis() -> dict:
    try:
        redis.from_url(settings.redis_url, socket_timeout=5).ping()
        return {"ok": True}
    except Exception as e:
        return {"ok": False, "message": str(e)}


def _check_letter_workers() -> dict:
    try:
        active = celery_app.control.inspect(timeout=5).active()
        return {"ok": bool(active), "workers": list(active) if active else []}
    except Exception as e:
        return {"ok": False, "message": str(e)}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.app_name}


@app.get("/health/detailed")
async def detailed_health_check():
    checks = {
        "database": await _check_database(),
        "redis": _check_redis(),
        "letter_workers": _check_letter_workers(),
        # Outbound services are only checked for credentials
        "ai_gateway": {"ok": bool(settings.ai_gateway_api_key)},
        "email": {"ok": bool(settings.resend_api_key)},
    }
    return {
        "status": "healthy" if all(c["ok"] for c in checks.values()) else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }

"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1.organizations import router as organizations_router
from app.api.v1.schools import router as schools_router
from app.api.v1.campaigns import router as campaigns_router
from app.api.v1.letters import router as letters_router
from app.api.v1.matching import router as matching_router
from app.api.v1.responses import router as responses_router
from app.api.v1.outreach_requests import router as outreach_requests_router

router = APIRouter(prefix="/api/v1")

router.include_router(organizations_router)
router.include_router(schools_router)
router.include_router(campaigns_router)
router.include_router(letters_router)
router.include_router(matching_router)
router.include_router(responses_router)
router.include_router(outreach_requests_router)

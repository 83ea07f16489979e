"""Requests a school submits asking for an outreach visit, and their review."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from app.models.outreach_request import REQUEST_STATUSES

logger = logging.getLogger(__name__)


class RequestNotFound(Exception):
    pass


class RequestAlreadyReviewed(Exception):
    pass


class OrganizationNotFound(Exception):
    pass


def _blank_to_none(values: dict) -> dict:
    return {
        key: (None if isinstance(value, str) and not value.strip() else value)
        for key, value in values.items()
    }


async def submit_request(repo, values: dict) -> dict:
    """Store a new request. It starts out pending."""
    grade_levels = [g.strip() for g in values.get("grade_levels") or [] if g and g.strip()]
    request = await repo.create_outreach_request({
        **_blank_to_none(values),
        "grade_levels": grade_levels or None,
        "status": "pending",
    })
    logger.info(f"Outreach request {request['id']} from {request['school_name']}")
    return request


async def list_requests(
    repo,
    status: str | None = None,
    outreach_type: str | None = None,
    skip: int = 0,
    limit: int = 50,
) -> dict:
    items, total = await repo.list_outreach_requests(
        status=status, outreach_type=outreach_type, skip=skip, limit=limit,
    )
    return {"items": items, "total": total}


async def get_request(repo, request_id: UUID) -> dict:
    request = await repo.get_outreach_request(request_id)
    if not request:
        raise RequestNotFound(f"Outreach request {request_id} not found")
    return request


async def review_request(
    repo,
    request_id: UUID,
    status: str,
    reviewed_by: str,
    response_notes: str | None = None,
    organization_id: UUID | None = None,
) -> dict:
    """Approve or decline a pending request. A reviewed request stays as it is."""
    request = await get_request(repo, request_id)
    if request["status"] != "pending":
        raise RequestAlreadyReviewed(f"Outreach request already {request['status']}")
    if organization_id and not await repo.get_organization(organization_id):
        raise OrganizationNotFound(f"Organization {organization_id} not found")

    changes = {
        "status": status,
        "reviewed_by": reviewed_by,
        "reviewed_at": datetime.now(timezone.utc),
        "response_notes": (response_notes or "").strip() or None,
        "organization_id": organization_id,
    }
    await repo.update_outreach_request(request_id, **changes)
    logger.info(f"Outreach request {request_id} {status} by {reviewed_by}")
    return {**request, **changes}


async def request_stats(repo) -> dict:
    counts = await repo.count_outreach_requests_by_status()
    stats = {status: counts.get(status, 0) for status in REQUEST_STATUSES}
    return {"total": sum(counts.values()), **stats}

"""Tests for school-initiated outreach requests."""

import uuid

import pytest

from app.services.outreach_requests import (
    OrganizationNotFound,
    RequestAlreadyReviewed,
    RequestNotFound,
    list_requests,
    request_stats,
    review_request,
    submit_request,
)


def request_values(**overrides) -> dict:
    values = {
        "school_name": "Mzamomhle Primary School",
        "contact_person": "Ms N. Dlamini",
        "contact_email": "principal@mzamomhle.example.org",
        "contact_phone": "",
        "outreach_type": "robotics_support",
        "workshop_topic": "   ",
        "preferred_date": None,
        "alternative_date": None,
        "expected_participants": 40,
        "grade_levels": ["Grade 6", " ", "Grade 7 "],
        "additional_notes": None,
    }
    values.update(overrides)
    return values


@pytest.mark.asyncio
async def test_submitted_request_is_pending(repo):
    request = await submit_request(repo, request_values())

    assert request["status"] == "pending"
    assert request["reviewed_at"] is None
    assert len(repo.outreach_requests) == 1


@pytest.mark.asyncio
async def test_blank_fields_are_stored_as_none(repo):
    request = await submit_request(repo, request_values())

    assert request["contact_phone"] is None
    assert request["workshop_topic"] is None
    assert request["grade_levels"] == ["Grade 6", "Grade 7"]


@pytest.mark.asyncio
async def test_approving_a_pending_request(repo):
    org = repo.add_organization()
    request = await submit_request(repo, request_values())

    reviewed = await review_request(
        repo, request["id"], "approved", "planner@example.org", "  See you in May ", org["id"],
    )

    stored = repo.outreach_requests[str(request["id"])]
    assert reviewed["status"] == "approved"
    assert stored["status"] == "approved"
    assert stored["reviewed_by"] == "planner@example.org"
    assert stored["reviewed_at"] is not None
    assert stored["response_notes"] == "See you in May"
    assert stored["organization_id"] == org["id"]


@pytest.mark.asyncio
async def test_reviewed_request_cannot_be_reviewed_again(repo):
    request = await submit_request(repo, request_values())
    await review_request(repo, request["id"], "declined", "planner@example.org")

    with pytest.raises(RequestAlreadyReviewed):
        await review_request(repo, request["id"], "approved", "someone@example.org")

    assert repo.outreach_requests[str(request["id"])]["status"] == "declined"


@pytest.mark.asyncio
async def test_review_of_unknown_request(repo):
    with pytest.raises(RequestNotFound):
        await review_request(repo, uuid.uuid4(), "approved", "planner@example.org")


@pytest.mark.asyncio
async def test_review_with_unknown_organization_changes_nothing(repo):
    request = await submit_request(repo, request_values())

    with pytest.raises(OrganizationNotFound):
        await review_request(repo, request["id"], "approved", "planner@example.org", None, uuid.uuid4())

    assert repo.outreach_requests[str(request["id"])]["status"] == "pending"


@pytest.mark.asyncio
async def test_list_filters_by_status(repo):
    first = await submit_request(repo, request_values(school_name="Alpha Primary"))
    await submit_request(repo, request_values(school_name="Beta Primary"))
    await review_request(repo, first["id"], "approved", "planner@example.org")

    page = await list_requests(repo, status="pending")

    assert page["total"] == 1
    assert page["items"][0]["school_name"] == "Beta Primary"


@pytest.mark.asyncio
async def test_stats_count_every_status(repo):
    first = await submit_request(repo, request_values())
    await submit_request(repo, request_values())
    await submit_request(repo, request_values())
    await review_request(repo, first["id"], "declined", "planner@example.org")

    stats = await request_stats(repo)

    assert stats == {"total": 3, "pending": 2, "approved": 0, "declined": 1}

"""Route-level tests with repository, gateway and mailer overridden."""

import uuid
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.v1 import campaigns as campaigns_module
from app.dependencies import outreach as outreach_dependencies
from app.dependencies.outreach import (
    get_mailer,
    get_repository,
    optional_ai_gateway,
    require_ai_gateway,
)
from app.main import app
from app.services.ai_gateway import AIGatewayNotConfigured, PaymentRequiredError, RateLimitError
from conftest import FakeGateway, FakeMailer


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
async def client(repo, gateway, mailer):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[require_ai_gateway] = lambda: gateway
    app.dependency_overrides[optional_ai_gateway] = lambda: None
    app.dependency_overrides[get_mailer] = lambda: mailer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def campaign(repo):
    org = repo.add_organization("Cape Space Academy")
    return repo.add_campaign(org["id"], status="review")


@pytest.mark.asyncio
async def test_underserved_endpoint_uses_camel_case(client, repo):
    repo.add_school(province="Western Cape", district="Cape Winelands", quintile="1")

    response = await client.post("/api/v1/schools/underserved", json={
        "province": "Western Cape", "district": "Cape Winelands", "batchSize": 5,
    })

    assert response.status_code == 200
    body = response.json()
    assert body["totalUnderserved"] == 1
    assert body["schools"][0]["priorityScore"] >= 100


@pytest.mark.asyncio
async def test_underserved_requires_province(client):
    response = await client.post("/api/v1/schools/underserved", json={"province": ""})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_underserved_query_failure_is_500(client, repo):
    repo.fail_schools = True

    response = await client.post("/api/v1/schools/underserved", json={"province": "Western Cape"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch schools"


@pytest.mark.asyncio
async def test_single_letter_generation(client, campaign, gateway):
    gateway.script = ["Dear Principal"]

    response = await client.post("/api/v1/letters/generate", json={
        "campaignId": str(campaign["id"]),
        "schoolData": {"name": "Zola Primary"},
        "visitDetails": {"visitDate": "2026-03-12"},
    })

    assert response.status_code == 200
    assert response.json() == {"letter": "Dear Principal"}
    assert "Cape Space Academy" in gateway.calls[0]["user"]


@pytest.mark.asyncio
async def test_single_letter_missing_fields_is_400(client, campaign):
    response = await client.post("/api/v1/letters/generate", json={"campaignId": str(campaign["id"])})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_single_letter_unknown_campaign_is_404(client):
    response = await client.post("/api/v1/letters/generate", json={
        "campaignId": str(uuid.uuid4()), "schoolData": {"name": "x"}, "visitDetails": {"a": "b"},
    })
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_single_letter_rate_limit_is_429(client, campaign, gateway):
    gateway.script = [RateLimitError("Rate limit exceeded")]

    response = await client.post("/api/v1/letters/generate", json={
        "campaignId": str(campaign["id"]), "schoolData": {"name": "x"}, "visitDetails": {"a": "b"},
    })

    assert response.status_code == 429
    assert response.json()["detail"] == "Rate limit exceeded. Please try again in a moment."


@pytest.mark.asyncio
async def test_single_letter_other_failure_hides_detail(client, campaign, gateway):
    gateway.script = [RuntimeError("secret upstream stack trace")]

    response = await client.post("/api/v1/letters/generate", json={
        "campaignId": str(campaign["id"]), "schoolData": {"name": "x"}, "visitDetails": {"a": "b"},
    })

    assert response.status_code == 500
    assert "secret" not in response.text


@pytest.mark.asyncio
async def test_generate_letters_queues_task(client, repo, campaign, monkeypatch):
    repo.add_record(campaign["id"], "Zola Primary")
    queued = []

    def fake_delay(campaign_id, visit_details):
        queued.append((campaign_id, visit_details))
        return SimpleNamespace(id="task-123")

    monkeypatch.setattr(campaigns_module, "generate_letters_for_campaign", SimpleNamespace(delay=fake_delay))

    response = await client.post(
        f"/api/v1/campaigns/{campaign['id']}/generate-letters",
        json={"visitDetails": {"visitDate": "2026-03-12", "programDescription": "Rockets"}},
    )

    assert response.status_code == 202
    assert response.json()["task_id"] == "task-123"
    assert queued == [(str(campaign["id"]), {"visitDate": "2026-03-12", "programDescription": "Rockets"})]


@pytest.mark.asyncio
async def test_generate_letters_refused_after_sending(client, repo):
    org = repo.add_organization()
    sent = repo.add_campaign(org["id"], status="letters_sent")
    repo.add_record(sent["id"], "A")

    response = await client.post(f"/api/v1/campaigns/{sent['id']}/generate-letters")

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_generate_letters_without_accepted_schools_is_400(client, campaign):
    response = await client.post(f"/api/v1/campaigns/{campaign['id']}/generate-letters")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_task_status_reports_progress(client, monkeypatch):
    class FakeResult:
        def __init__(self, task_id, app=None):
            self.state = "PROGRESS"
            self.info = {"current": 2, "total": 5}

    monkeypatch.setattr(campaigns_module, "AsyncResult", FakeResult)

    response = await client.get("/api/v1/campaigns/tasks/task-123")

    assert response.status_code == 200
    assert response.json()["current"] == 2
    assert response.json()["total"] == 5


@pytest.mark.asyncio
async def test_create_campaign_and_accept_schools(client, repo):
    org = repo.add_organization()
    school = repo.add_school(institution_name="Zola Primary")

    created = await client.post("/api/v1/campaigns", json={
        "organization_id": str(org["id"]),
        "created_by": "planner@example.org",
        "province": "Western Cape",
        "visit_details": {"visitDate": "2026-03-12"},
    })
    assert created.status_code == 201
    campaign_id = created.json()["id"]
    assert created.json()["status"] == "draft"

    accepted = await client.post(f"/api/v1/campaigns/{campaign_id}/schools", json={
        "schools": [{"school_id": str(school["id"]), "contact_email": "p@zola.za"}],
    })
    assert accepted.status_code == 201
    assert accepted.json()[0]["generated_data"]["name"] == "Zola Primary"

    detail = await client.get(f"/api/v1/campaigns/{campaign_id}")
    assert detail.json()["status"] == "review"
    assert detail.json()["stats"]["accepted"] == 1


@pytest.mark.asyncio
async def test_create_campaign_unknown_organization_is_404(client):
    response = await client.post("/api/v1/campaigns", json={
        "organization_id": str(uuid.uuid4()), "created_by": "x", "province": "Western Cape",
    })
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_send_letters(client, repo, campaign, mailer):
    repo.add_record(campaign["id"], "Zola Primary", letter="Dear Zola",
                    generated_data={"contact_email": "p@zola.za"})

    response = await client.post(f"/api/v1/campaigns/{campaign['id']}/send-letters")

    assert response.status_code == 200
    assert response.json()["message"] == "Sent 1 letters successfully, 0 failed"
    assert mailer.sent[0]["to"] == "p@zola.za"


@pytest.mark.asyncio
async def test_status_cannot_move_backwards(client, repo):
    org = repo.add_organization()
    done = repo.add_campaign(org["id"], status="completed")

    response = await client.patch(f"/api/v1/campaigns/{done['id']}/status", json={"status": "review"})

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_school_response_flow(client, repo, campaign):
    repo.add_record(campaign["id"], "Zola Primary", letter="x",
                    response_token="tok-9", response_status="pending")

    invitation = await client.get("/api/v1/responses/tok-9")
    assert invitation.json()["school_name"] == "Zola Primary"

    first = await client.post("/api/v1/responses/tok-9", json={"status": "declined", "message": "Exams"})
    assert first.status_code == 200
    assert first.json()["response_status"] == "declined"

    second = await client.post("/api/v1/responses/tok-9", json={"status": "confirmed"})
    assert second.status_code == 409

    unknown = await client.get("/api/v1/responses/nope")
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_matching_credit_exhaustion_is_402(client, repo, gateway):
    repo.add_school(province="Eastern Cape")
    gateway.script = [PaymentRequiredError("AI credits exhausted")]

    response = await client.post("/api/v1/matching/schools", json={"province": "Eastern Cape"})

    assert response.status_code == 402


@pytest.mark.asyncio
async def test_needs_analysis_endpoint(client, repo, gateway):
    school = repo.add_school(institution_name="Zola Primary")
    gateway.script = ['{"analyses": [{"schoolName": "Zola Primary", "needsAnalysis": "Needs a lab."}]}']

    response = await client.post("/api/v1/matching/needs-analysis", json={"schoolIds": [str(school["id"])]})

    assert response.status_code == 200
    assert response.json()["schools"][0]["needsAnalysis"] == "Needs a lab."


@pytest.mark.asyncio
async def test_school_search(client, repo):
    repo.add_school(institution_name="Zola Primary")
    repo.add_school(institution_name="Ikhwezi High")

    response = await client.get("/api/v1/schools", params={"search": "zola"})

    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert response.json()["items"][0]["institution_name"] == "Zola Primary"


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_generate_letters_without_ai_gateway_is_503(client, repo, campaign, monkeypatch):
    repo.add_record(campaign["id"], "Zola Primary")
    queued = []
    monkeypatch.setattr(campaigns_module, "generate_letters_for_campaign",
                        SimpleNamespace(delay=lambda *args: queued.append(args)))
    del app.dependency_overrides[require_ai_gateway]

    def not_configured():
        raise AIGatewayNotConfigured("AI gateway API key is not configured")

    monkeypatch.setattr(outreach_dependencies, "get_ai_gateway", not_configured)

    response = await client.post(f"/api/v1/campaigns/{campaign['id']}/generate-letters")

    assert response.status_code == 503
    assert queued == []


OUTREACH_REQUEST = {
    "school_name": "Mzamomhle Primary School",
    "contact_person": "Ms N. Dlamini",
    "contact_email": "principal@mzamomhle.example.org",
    "outreach_type": "teacher_workshop",
    "expected_participants": 25,
    "preferred_date": "2026-11-12",
}


@pytest.mark.asyncio
async def test_outreach_request_submit_and_review(client, repo):
    created = await client.post("/api/v1/outreach-requests", json=OUTREACH_REQUEST)
    assert created.status_code == 201
    request_id = created.json()["id"]
    assert created.json()["status"] == "pending"

    reviewed = await client.patch(f"/api/v1/outreach-requests/{request_id}/review", json={
        "status": "approved", "reviewed_by": "planner@example.org",
    })
    assert reviewed.status_code == 200
    assert reviewed.json()["status"] == "approved"

    again = await client.patch(f"/api/v1/outreach-requests/{request_id}/review", json={
        "status": "declined", "reviewed_by": "planner@example.org",
    })
    assert again.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize("change", [
    {"contact_email": "not-an-email"},
    {"outreach_type": "fundraising"},
    {"school_name": "   "},
    {"expected_participants": 0},
])
async def test_invalid_outreach_request_is_422(client, repo, change):
    response = await client.post("/api/v1/outreach-requests", json={**OUTREACH_REQUEST, **change})

    assert response.status_code == 422
    assert repo.outreach_requests == {}


@pytest.mark.asyncio
async def test_outreach_request_list_and_stats(client):
    await client.post("/api/v1/outreach-requests", json=OUTREACH_REQUEST)
    await client.post("/api/v1/outreach-requests", json={**OUTREACH_REQUEST, "outreach_type": "space_science"})

    listed = await client.get("/api/v1/outreach-requests", params={"outreach_type": "space_science"})
    stats = await client.get("/api/v1/outreach-requests/stats")

    assert listed.json()["total"] == 1
    assert listed.json()["items"][0]["outreach_type"] == "space_science"
    assert stats.json() == {"total": 2, "pending": 2, "approved": 0, "declined": 0}


@pytest.mark.asyncio
async def test_unknown_outreach_request_is_404(client):
    response = await client.get(f"/api/v1/outreach-requests/{uuid.uuid4()}")
    assert response.status_code == 404

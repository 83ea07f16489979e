"""
Test configuration and fixtures.

Services take their repository and AI gateway as arguments, so tests run
against in-memory fakes:
- FakeRepository: dict-backed stand-in for OutreachRepository
- FakeGateway: scripted chat responses (strings or exceptions)
- FakeMailer: records e-mails, optionally failing for chosen recipients
"""

import uuid
from datetime import datetime, timezone

import pytest

from app.services.letter_pipeline import RetryPolicy


def make_school(**overrides) -> dict:
    school = {
        "id": uuid.uuid4(),
        "nat_emis": str(uuid.uuid4().int)[:9],
        "institution_name": "Test Primary School",
        "province": "Western Cape",
        "district": "Metro North",
        "circuit": None,
        "status": "Open",
        "sector": "PUBLIC",
        "type_doe": "ORDINARY SCHOOL",
        "phase_ped": "PRIMARY SCHOOL",
        "quintile": "3",
        "no_fee_school": "No",
        "urban_rural": "Urban",
        "town_city": "Cape Town",
        "suburb": None,
        "township_village": None,
        "street_address": "1 Main Road",
        "postal_address": None,
        "telephone": None,
        "latitude": -33.9,
        "longitude": 18.4,
        "learners_2024": 150,
        "educators_2024": 6,
        "organization_id": None,
        "language_of_instruction": None,
    }
    school.update(overrides)
    return school


class FakeRepository:
    """In-memory OutreachRepository with the same async methods."""

    def __init__(self):
        self.schools: dict[str, dict] = {}
        self.organizations: dict[str, dict] = {}
        self.campaigns: dict[str, dict] = {}
        self.recommendations: dict[str, dict] = {}
        self.outreach_requests: dict[str, dict] = {}
        self.visited_ids: list = []
        self.fail_visited = False
        self.fail_schools = False
        self.fail_letter_for: set[str] = set()
        self.campaign_updates: list[dict] = []

    # --- seeding helpers ---

    def add_school(self, **overrides) -> dict:
        school = make_school(**overrides)
        self.schools[str(school["id"])] = school
        return school

    def add_organization(self, name="Cape Space Academy") -> dict:
        org = {"id": uuid.uuid4(), "name": name, "slug": name.lower().replace(" ", "-")}
        self.organizations[str(org["id"])] = org
        return org

    def add_campaign(self, organization_id, status="review", visit_details=None) -> dict:
        campaign = {
            "id": uuid.uuid4(),
            "organization_id": organization_id,
            "created_by": "planner@example.org",
            "province": "Western Cape",
            "district": "Metro North",
            "school_type": "",
            "status": status,
            "visit_date": None,
            "visit_details": visit_details or {},
            "created_at": datetime.now(timezone.utc),
            "updated_at": datetime.now(timezone.utc),
        }
        self.campaigns[str(campaign["id"])] = campaign
        return campaign

    def add_record(self, campaign_id, name, *, accepted=True, letter=None, **extra) -> dict:
        record = {
            "id": uuid.uuid4(),
            "campaign_id": campaign_id,
            "school_id": extra.pop("school_id", None),
            "generated_data": {"name": name, "location": "Khayelitsha, Metro East, Western Cape",
                               "learners": 800, **extra.pop("generated_data", {})},
            "generated_letter": letter,
            "sort_order": len(self.recommendations),
            "is_accepted": accepted,
            "is_replacement": False,
            "enrollment_total": 800,
            "language_of_instruction": "English",
            "response_token": None,
            "response_status": None,
            "letter_sent_at": None,
            "school_response": None,
            "responded_at": None,
            "created_at": datetime.now(timezone.utc),
            **extra,
        }
        self.recommendations[str(record["id"])] = record
        return record

    # --- OutreachRepository interface ---

    async def get_visited_school_ids(self):
        if self.fail_visited:
            raise RuntimeError("visited lookup failed")
        return list(self.visited_ids)

    async def find_open_schools(self, province=None, district=None, school_type=None):
        if self.fail_schools:
            raise RuntimeError("connection refused")
        return [
            dict(s) for s in self.schools.values()
            if s["status"] == "Open"
            and (not province or s["province"] == province)
            and (not district or s["district"] == district)
            and (not school_type or s["phase_ped"] == school_type)
        ]

    async def find_schools_for_matching(self, province, district=None, quintiles=None, limit=100):
        matches = [
            dict(s) for s in self.schools.values()
            if s["province"] == province
            and (not district or s["district"] == district)
            and (not quintiles or s["quintile"] in quintiles)
        ]
        return matches[:limit]

    async def search_schools(self, *, province=None, district=None, quintile=None, phase=None,
                             search=None, skip=0, limit=50):
        matches = [
            dict(s) for s in self.schools.values()
            if (not province or s["province"] == province)
            and (not search or search.lower() in s["institution_name"].lower())
        ]
        return matches[skip:skip + limit], len(matches)

    async def get_schools_by_ids(self, school_ids):
        return [dict(self.schools[str(i)]) for i in school_ids if str(i) in self.schools]

    async def get_organization(self, organization_id):
        org = self.organizations.get(str(organization_id))
        return dict(org) if org else None

    async def create_campaign(self, values):
        campaign = {"id": uuid.uuid4(), "created_at": datetime.now(timezone.utc),
                    "updated_at": datetime.now(timezone.utc), **values}
        self.campaigns[str(campaign["id"])] = campaign
        return dict(campaign)

    async def get_campaign(self, campaign_id):
        campaign = self.campaigns.get(str(campaign_id))
        return dict(campaign) if campaign else None

    async def update_campaign(self, campaign_id, **values):
        self.campaign_updates.append(values)
        self.campaigns[str(campaign_id)].update(values)

    async def add_recommendations(self, campaign_id, records):
        created = []
        for r in records:
            row = self.add_record(campaign_id, r["generated_data"].get("name"), accepted=r.get("is_accepted", False))
            row.update(r)
            created.append(dict(row))
        return created

    async def list_recommendations(self, campaign_id):
        rows = [r for r in self.recommendations.values() if str(r["campaign_id"]) == str(campaign_id)]
        return [dict(r) for r in sorted(rows, key=lambda r: r["sort_order"])]

    async def list_accepted_recommendations(self, campaign_id, with_letter_only=False):
        return [
            r for r in await self.list_recommendations(campaign_id)
            if r["is_accepted"] and (not with_letter_only or r["generated_letter"] is not None)
        ]

    async def get_recommendation(self, recommendation_id):
        rec = self.recommendations.get(str(recommendation_id))
        return dict(rec) if rec else None

    async def get_recommendation_by_token(self, token):
        for rec in self.recommendations.values():
            if rec["response_token"] == token:
                return dict(rec)
        return None

    async def update_recommendation(self, recommendation_id, **values):
        if "generated_letter" in values and str(recommendation_id) in self.fail_letter_for:
            raise RuntimeError("database write failed")
        self.recommendations[str(recommendation_id)].update(values)

    async def create_outreach_request(self, values):
        request = {"id": uuid.uuid4(), "status": "pending", "organization_id": None, "reviewed_by": None,
                   "reviewed_at": None, "response_notes": None, "created_at": datetime.now(timezone.utc),
                   "updated_at": datetime.now(timezone.utc), **values}
        self.outreach_requests[str(request["id"])] = request
        return dict(request)

    async def get_outreach_request(self, request_id):
        request = self.outreach_requests.get(str(request_id))
        return dict(request) if request else None

    async def list_outreach_requests(self, *, status=None, outreach_type=None, skip=0, limit=50):
        matches = [
            dict(r) for r in sorted(self.outreach_requests.values(), key=lambda r: r["created_at"], reverse=True)
            if (not status or r["status"] == status)
            and (not outreach_type or r["outreach_type"] == outreach_type)
        ]
        return matches[skip:skip + limit], len(matches)

    async def count_outreach_requests_by_status(self):
        counts: dict[str, int] = {}
        for r in self.outreach_requests.values():
            counts[r["status"]] = counts.get(r["status"], 0) + 1
        return counts

    async def update_outreach_request(self, request_id, **values):
        self.outreach_requests[str(request_id)].update(values)


class FakeGateway:
    """Scripted AIGateway.chat.

    Each call pops the next scripted item: a string is returned, an
    exception is raised. When the script is empty, ``default`` is returned.
    """

    def __init__(self, *script, default="Dear Principal,\n\nWe would like to visit.\n\nKind regards"):
        self.script = list(script)
        self.default = default
        self.calls: list[dict] = []

    async def chat(self, system_prompt, user_prompt, *, model=None, max_tokens=None):
        self.calls.append({
            "system": system_prompt,
            "user": user_prompt,
            "model": model,
            "max_tokens": max_tokens,
        })
        item = self.script.pop(0) if self.script else self.default
        if isinstance(item, BaseException):
            raise item
        return item


class FakeMailer:
    def __init__(self, fail_for: set[str] | None = None):
        self.sent: list[dict] = []
        self.fail_for = fail_for or set()

    async def send(self, *, to, subject, html, from_email=None):
        if to in self.fail_for:
            raise RuntimeError(f"network error delivering to {to}")
        self.sent.append({"to": to, "subject": subject, "html": html, "from": from_email})
        return f"msg-{len(self.sent)}"


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def repo() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def policy() -> RetryPolicy:
    return RetryPolicy(max_retries=3, base_delay=3.0, pacing_delay=3.0)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()

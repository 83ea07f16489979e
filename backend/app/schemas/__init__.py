"""Pydantic schemas package."""

from app.schemas.organization import (
    OrganizationBase,
    OrganizationCreate,
    OrganizationRead,
    OrganizationWithStats,
)
from app.schemas.school import (
    SchoolBase,
    SchoolRead,
    SchoolPage,
    ScoredSchool,
    UnderservedRequest,
    UnderservedResponse,
)
from app.schemas.campaign import (
    AcceptSchoolsRequest,
    CampaignCreate,
    CampaignDetail,
    CampaignRead,
    CampaignStats,
    GenerateLettersRequest,
    LetterUpdate,
    RecommendationRead,
    SchoolSelection,
    SendLettersRequest,
    SendLettersResponse,
    StatusUpdate,
    TaskAccepted,
    TaskStatus,
    VisitDetails,
)
from app.schemas.outreach import (
    InvitationRead,
    LetterRequest,
    LetterResponse,
    MatchRequest,
    MatchResponse,
    NeedsRequest,
    NeedsResponse,
    SchoolResponseCreate,
)
from app.schemas.outreach_request import (
    OutreachRequestCreate,
    OutreachRequestPage,
    OutreachRequestRead,
    OutreachRequestReview,
    OutreachRequestStats,
)

__all__ = [
    # Organization
    "OrganizationBase",
    "OrganizationCreate",
    "OrganizationRead",
    "OrganizationWithStats",
    # School
    "SchoolBase",
    "SchoolRead",
    "SchoolPage",
    "ScoredSchool",
    "UnderservedRequest",
    "UnderservedResponse",
    # Campaign
    "AcceptSchoolsRequest",
    "CampaignCreate",
    "CampaignDetail",
    "CampaignRead",
    "CampaignStats",
    "GenerateLettersRequest",
    "LetterUpdate",
    "RecommendationRead",
    "SchoolSelection",
    "SendLettersRequest",
    "SendLettersResponse",
    "StatusUpdate",
    "TaskAccepted",
    "TaskStatus",
    "VisitDetails",
    # AI outreach
    "InvitationRead",
    "LetterRequest",
    "LetterResponse",
    "MatchRequest",
    "MatchResponse",
    "NeedsRequest",
    "NeedsResponse",
    "SchoolResponseCreate",
    # Outreach requests
    "OutreachRequestCreate",
    "OutreachRequestPage",
    "OutreachRequestRead",
    "OutreachRequestReview",
    "OutreachRequestStats",
]

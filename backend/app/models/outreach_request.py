"""Outreach request model — a school asking for a visit or support."""

from sqlalchemy import Column, String, Integer, Date, DateTime, Text, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID, ARRAY

from app.models.base import Base, TimestampMixin, UUIDMixin

OUTREACH_TYPES = (
    "teacher_workshop",
    "learner_outreach",
    "robotics_support",
    "practical_experiments",
    "space_science",
    "career_guidance",
)

# pending until an organizer reviews it
REQUEST_STATUSES = ("pending", "approved", "declined")


class OutreachRequest(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "outreach_requests"

    school_name = Column(String(200), nullable=False)
    contact_person = Column(String(100), nullable=False)
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(20))

    outreach_type = Column(String(50), nullable=False)
    workshop_topic = Column(String(500))
    preferred_date = Column(Date)
    alternative_date = Column(Date)
    expected_participants = Column(Integer)
    grade_levels = Column(ARRAY(String(20)))
    additional_notes = Column(Text)

    # Review
    status = Column(String(20), default="pending", nullable=False, index=True)
    organization_id = Column(UUID(as_uuid=True), ForeignKey("organizations.id"), nullable=True)
    reviewed_by = Column(String(255))
    reviewed_at = Column(DateTime(timezone=True))
    response_notes = Column(Text)

    __table_args__ = (
        Index("idx_request_status_created", "status", "created_at"),
    )

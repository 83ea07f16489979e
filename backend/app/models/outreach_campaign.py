"""Outreach campaign model — one visit plan for a province/district."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin

# Forward-only lifecycle
CAMPAIGN_STATUSES = ("draft", "review", "letters_generated", "letters_sent", "completed")


class OutreachCampaign(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "outreach_campaigns"

    organization_id = Column(UUID(as_uuid=True), ForeignKey("organizations.id"), nullable=False, index=True)
    created_by = Column(String(255), nullable=False)

    province = Column(String(50), nullable=False)
    district = Column(String(100), nullable=False)
    school_type = Column(String(20), nullable=False)  # primary, high, combined

    status = Column(String(30), default="draft", nullable=False, index=True)

    visit_date = Column(DateTime(timezone=True))
    visit_details = Column(JSONB, default=dict, nullable=False)

    # Relationships
    organization = relationship("Organization", back_populates="campaigns")
    recommendations = relationship(
        "SchoolRecommendation",
        back_populates="campaign",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_campaign_org_status", "organization_id", "status"),
    )

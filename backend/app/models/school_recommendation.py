"""School recommendation model — one school's participation in one campaign."""

import uuid

from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship

from app.models.base import Base

RESPONSE_STATUSES = ("pending", "confirmed", "declined")


class SchoolRecommendation(Base):
    __tablename__ = "school_recommendations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    campaign_id = Column(
        UUID(as_uuid=True),
        ForeignKey("outreach_campaigns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Null for AI-suggested schools that are not in the master list
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=True, index=True)

    # Snapshot of the school used for letter generation
    generated_data = Column(JSONB, nullable=False, default=dict)
    generated_letter = Column(Text)

    # Position within the campaign; letters are generated in this order
    sort_order = Column(Integer, default=0, nullable=False)

    is_accepted = Column(Boolean, default=False)
    is_replacement = Column(Boolean, default=False)
    enrollment_total = Column(Integer)
    language_of_instruction = Column(String(100))

    # Dispatch + school response
    response_token = Column(String(64), unique=True, index=True)
    response_status = Column(String(20))  # pending, confirmed, declined
    letter_sent_at = Column(DateTime(timezone=True))
    school_response = Column(Text)
    responded_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    campaign = relationship("OutreachCampaign", back_populates="recommendations")

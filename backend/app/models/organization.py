"""Organization model — STEM outreach providers that run campaigns."""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.models.base import Base, TimestampMixin, UUIDMixin


class Organization(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "organizations"

    # Identity
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)

    # Contact
    contact_email = Column(String(255))
    website_url = Column(String(500))

    # Relationships
    campaigns = relationship("OutreachCampaign", back_populates="organization")

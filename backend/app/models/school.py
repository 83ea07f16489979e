"""School model — Department of Basic Education master list."""

from sqlalchemy import Column, String, Integer, Float, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID

from app.models.base import Base, TimestampMixin, UUIDMixin


class School(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "schools"

    # National EMIS number, natural key for bulk import
    nat_emis = Column(String(20), unique=True, nullable=False, index=True)
    institution_name = Column(String(255), nullable=False)

    # Administrative
    province = Column(String(50), nullable=False, index=True)
    district = Column(String(100), index=True)
    circuit = Column(String(100))
    status = Column(String(30), index=True)  # Open, Closed, ...
    sector = Column(String(30))  # PUBLIC, INDEPENDENT
    type_doe = Column(String(100))
    phase_ped = Column(String(100))  # PRIMARY SCHOOL, SECONDARY SCHOOL, COMBINED SCHOOL, ...

    # Socioeconomic indicators
    quintile = Column(String(10))  # "1".."5", sometimes blank or "99"
    no_fee_school = Column(String(10))  # Yes / No

    # Location
    urban_rural = Column(String(20))  # Urban, Rural, Farm
    town_city = Column(String(100))
    suburb = Column(String(100))
    township_village = Column(String(100))
    street_address = Column(String(500))
    postal_address = Column(String(500))
    telephone = Column(String(50))
    latitude = Column(Float)
    longitude = Column(Float)

    # Scale
    learners_2024 = Column(Integer)
    educators_2024 = Column(Integer)

    # Importing organization
    organization_id = Column(UUID(as_uuid=True), ForeignKey("organizations.id"), nullable=True)

    __table_args__ = (
        Index("idx_school_province_district", "province", "district"),
        Index("idx_school_status_province", "status", "province"),
    )

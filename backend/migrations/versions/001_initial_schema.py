"""Initial schema: organizations, schools, outreach campaigns and school recommendations.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("contact_email", sa.String(255)),
        sa.Column("website_url", sa.String(500)),
        *_timestamps(),
    )
    op.create_index("ix_organizations_slug", "organizations", ["slug"], unique=True)

    op.create_table(
        "schools",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id")),
        sa.Column("nat_emis", sa.String(20), nullable=False),
        sa.Column("institution_name", sa.String(255), nullable=False),
        sa.Column("province", sa.String(50), nullable=False),
        sa.Column("district", sa.String(100)),
        sa.Column("circuit", sa.String(100)),
        sa.Column("status", sa.String(30)),
        sa.Column("sector", sa.String(30)),
        sa.Column("type_doe", sa.String(100)),
        sa.Column("phase_ped", sa.String(100)),
        sa.Column("quintile", sa.String(10)),
        sa.Column("no_fee_school", sa.String(10)),
        sa.Column("urban_rural", sa.String(20)),
        # Location
        sa.Column("town_city", sa.String(100)),
        sa.Column("suburb", sa.String(100)),
        sa.Column("township_village", sa.String(100)),
        sa.Column("street_address", sa.String(500)),
        sa.Column("postal_address", sa.String(500)),
        sa.Column("telephone", sa.String(50)),
        sa.Column("latitude", sa.Float),
        sa.Column("longitude", sa.Float),
        # Size
        sa.Column("learners_2024", sa.Integer),
        sa.Column("educators_2024", sa.Integer),
        *_timestamps(),
    )
    op.create_index("ix_schools_nat_emis", "schools", ["nat_emis"], unique=True)
    op.create_index("ix_schools_province", "schools", ["province"])
    op.create_index("ix_schools_district", "schools", ["district"])
    op.create_index("ix_schools_status", "schools", ["status"])
    op.create_index("idx_school_province_district", "schools", ["province", "district"])
    op.create_index("idx_school_status_province", "schools", ["status", "province"])

    op.create_table(
        "outreach_campaigns",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("created_by", sa.String(255), nullable=False),
        sa.Column("province", sa.String(50), nullable=False),
        sa.Column("district", sa.String(100), nullable=False),
        sa.Column("school_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(30), nullable=False, server_default="draft"),
        sa.Column("visit_date", sa.DateTime(timezone=True)),
        sa.Column("visit_details", postgresql.JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        *_timestamps(),
    )
    op.create_index("ix_outreach_campaigns_organization_id", "outreach_campaigns", ["organization_id"])
    op.create_index("ix_outreach_campaigns_status", "outreach_campaigns", ["status"])
    op.create_index("idx_campaign_org_status", "outreach_campaigns", ["organization_id", "status"])

    op.create_table(
        "school_recommendations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("campaign_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("outreach_campaigns.id", ondelete="CASCADE"), nullable=False),
        sa.Column("school_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("schools.id")),
        sa.Column("generated_data", postgresql.JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("generated_letter", sa.Text),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_accepted", sa.Boolean, server_default=sa.false()),
        sa.Column("is_replacement", sa.Boolean, server_default=sa.false()),
        sa.Column("enrollment_total", sa.Integer),
        sa.Column("language_of_instruction", sa.String(100)),
        # Dispatch + school response
        sa.Column("response_token", sa.String(64)),
        sa.Column("response_status", sa.String(20)),
        sa.Column("letter_sent_at", sa.DateTime(timezone=True)),
        sa.Column("school_response", sa.Text),
        sa.Column("responded_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_school_recommendations_campaign_id", "school_recommendations", ["campaign_id"])
    op.create_index("ix_school_recommendations_school_id", "school_recommendations", ["school_id"])
    op.create_index("ix_school_recommendations_response_token", "school_recommendations",
                    ["response_token"], unique=True)


def downgrade() -> None:
    op.drop_table("school_recommendations")
    op.drop_table("outreach_campaigns")
    op.drop_table("schools")
    op.drop_table("organizations")

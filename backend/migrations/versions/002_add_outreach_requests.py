"""Add outreach_requests for school-initiated visit and support requests.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "outreach_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("school_name", sa.String(200), nullable=False),
        sa.Column("contact_person", sa.String(100), nullable=False),
        sa.Column("contact_email", sa.String(255), nullable=False),
        sa.Column("contact_phone", sa.String(20)),
        sa.Column("outreach_type", sa.String(50), nullable=False),
        sa.Column("workshop_topic", sa.String(500)),
        sa.Column("preferred_date", sa.Date),
        sa.Column("alternative_date", sa.Date),
        sa.Column("expected_participants", sa.Integer),
        sa.Column("grade_levels", postgresql.ARRAY(sa.String(20))),
        sa.Column("additional_notes", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id")),
        sa.Column("reviewed_by", sa.String(255)),
        sa.Column("reviewed_at", sa.DateTime(timezone=True)),
        sa.Column("response_notes", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_outreach_requests_status", "outreach_requests", ["status"])
    op.create_index("idx_request_status_created", "outreach_requests", ["status", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_request_status_created", table_name="outreach_requests")
    op.drop_index("ix_outreach_requests_status", table_name="outreach_requests")
    op.drop_table("outreach_requests")

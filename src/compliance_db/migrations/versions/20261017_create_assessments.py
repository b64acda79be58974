"""Create the compliance_assessments table.

Revision ID: 20261017_assessments
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261017_assessments"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "compliance_assessments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("assessment_id", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("current_question_id", sa.Text(), nullable=True),
        sa.Column("terminal", sa.String(40), nullable=True),
        sa.Column("tree_version", sa.Text(), nullable=True),
        sa.Column(
            "state",
            JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("completed_at", TIMESTAMP(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "assessment_id", name="uq_user_assessment"),
        sa.CheckConstraint(
            "status != 'completed' OR terminal IS NOT NULL",
            name="ck_completed_has_terminal",
        ),
    )
    op.create_index(
        "ix_compliance_assessments_user_id", "compliance_assessments", ["user_id"]
    )
    op.create_index(
        "ix_compliance_assessments_status", "compliance_assessments", ["status"]
    )
    op.create_index(
        "ix_user_created", "compliance_assessments", ["user_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_user_created", table_name="compliance_assessments")
    op.drop_index("ix_compliance_assessments_status", table_name="compliance_assessments")
    op.drop_index("ix_compliance_assessments_user_id", table_name="compliance_assessments")
    op.drop_table("compliance_assessments")

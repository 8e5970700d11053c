"""Workflow schema

Revision ID: 0001_workflow_schema
Revises:
Create Date: 2026-10-18

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_workflow_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "candidate_workflows",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("candidate_id", sa.String(length=120), nullable=False),
        sa.Column("job_id", sa.String(length=120), nullable=False),
        sa.Column("current_step", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_steps_json", sa.JSON(), nullable=False),
        sa.Column("draft_message", sa.Text(), nullable=False, server_default=""),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("scheduled_call_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("candidate_id", "job_id", name="uq_candidate_workflow"),
    )
    op.create_index("ix_candidate_workflows_candidate_id", "candidate_workflows", ["candidate_id"])
    op.create_index("ix_candidate_workflows_job_id", "candidate_workflows", ["job_id"])

    op.create_table(
        "hiring_decisions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("candidate_id", sa.String(length=120), nullable=False),
        sa.Column("job_id", sa.String(length=120), nullable=False),
        sa.Column("candidate_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("candidate_email", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("candidate_headline", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("decision", sa.String(length=20), nullable=False),
        sa.Column("fit_score", sa.Float(), nullable=True),
        sa.Column("message", sa.Text(), nullable=False, server_default=""),
        sa.Column("feedback_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_hiring_decisions_candidate_id", "hiring_decisions", ["candidate_id"])
    op.create_index("ix_hiring_decisions_job_id", "hiring_decisions", ["job_id"])


def downgrade() -> None:
    op.drop_index("ix_hiring_decisions_job_id", table_name="hiring_decisions")
    op.drop_index("ix_hiring_decisions_candidate_id", table_name="hiring_decisions")
    op.drop_table("hiring_decisions")
    op.drop_index("ix_candidate_workflows_job_id", table_name="candidate_workflows")
    op.drop_index("ix_candidate_workflows_candidate_id", table_name="candidate_workflows")
    op.drop_table("candidate_workflows")

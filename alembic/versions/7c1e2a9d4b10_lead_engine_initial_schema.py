"""Lead engine initial schema

Revision ID: 7c1e2a9d4b10
Revises:
Create Date: 2025-06-02 09:00:00.000000

Accounts and contacts, the per-date lead queue (UNIQUE run_date, UNIQUE rank
and account per run date), operator keyword lists, discovery settings and the
audit log.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "7c1e2a9d4b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        *_timestamps(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("canonical_name", sa.String(255), nullable=False),
        sa.Column("domain", sa.String(255), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("hq_city", sa.String(120), nullable=True),
        sa.Column("hq_state", sa.String(2), nullable=True),
        sa.Column("hq_country", sa.String(2), nullable=True),
        sa.Column("region_bucket", sa.String(20), nullable=False, server_default="other"),
        sa.Column("industry", sa.String(100), nullable=True),
        sa.Column("employee_count", sa.String(32), nullable=True),
        sa.Column("triggers", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("classification", sa.String(50), nullable=False, server_default="employer"),
        sa.Column("high_intent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("high_intent_reasons", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("disposition", sa.String(50), nullable=False, server_default="active"),
        sa.Column("fit_score", sa.Integer(), nullable=True),
        sa.Column("source", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("uq_accounts_canonical_name", "accounts", ["canonical_name"], unique=True)
    op.create_index(
        "uq_accounts_domain",
        "accounts",
        ["domain"],
        unique=True,
        postgresql_where=sa.text("domain IS NOT NULL"),
    )
    op.create_index("ix_accounts_region_bucket", "accounts", ["region_bucket"])
    op.create_index("ix_accounts_disposition", "accounts", ["disposition"])

    op.create_table(
        "contacts",
        *_timestamps(),
        sa.Column(
            "account_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("linkedin_url", sa.String(500), nullable=True),
    )
    op.create_index("ix_contacts_account_id", "contacts", ["account_id"])

    op.create_table(
        "lead_queue_runs",
        *_timestamps(),
        sa.Column("run_date", sa.Date(), nullable=False),
        sa.Column("total", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("stats", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.UniqueConstraint("run_date", name="uq_lead_queue_runs_run_date"),
    )

    op.create_table(
        "lead_queue_entries",
        *_timestamps(),
        sa.Column(
            "run_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("lead_queue_runs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("run_date", sa.Date(), nullable=False),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("priority_rank", sa.Integer(), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("stars", sa.Integer(), nullable=False),
        sa.Column("reach_stars", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reason", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("status", sa.String(30), nullable=False, server_default="pending"),
        sa.UniqueConstraint("run_date", "priority_rank", name="uq_lead_queue_entries_rank"),
        sa.UniqueConstraint("run_date", "account_id", name="uq_lead_queue_entries_account"),
    )
    op.create_index("ix_lead_queue_entries_run_id", "lead_queue_entries", ["run_id"])

    op.create_table(
        "signal_keywords",
        *_timestamps(),
        sa.Column("category", sa.String(100), nullable=False, unique=True),
        sa.Column("keywords", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
    )

    op.create_table(
        "discovery_settings",
        *_timestamps(),
        sa.Column("key", sa.String(100), nullable=False, unique=True),
        sa.Column("value", postgresql.JSONB(), nullable=True),
    )

    op.create_table(
        "audit_log",
        *_timestamps(),
        sa.Column("actor", sa.String(100), nullable=False, server_default="system"),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("entity_type", sa.String(100), nullable=False),
        sa.Column("entity_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("details", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
    )
    op.create_index("ix_audit_log_action", "audit_log", ["action"])


def downgrade() -> None:
    op.drop_index("ix_audit_log_action", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_table("discovery_settings")
    op.drop_table("signal_keywords")
    op.drop_index("ix_lead_queue_entries_run_id", table_name="lead_queue_entries")
    op.drop_table("lead_queue_entries")
    op.drop_table("lead_queue_runs")
    op.drop_index("ix_contacts_account_id", table_name="contacts")
    op.drop_table("contacts")
    op.drop_index("ix_accounts_disposition", table_name="accounts")
    op.drop_index("ix_accounts_region_bucket", table_name="accounts")
    op.drop_index("uq_accounts_domain", table_name="accounts")
    op.drop_index("uq_accounts_canonical_name", table_name="accounts")
    op.drop_table("accounts")

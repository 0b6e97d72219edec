"""create_users_and_esg_responses

Revision ID: 0001a7c3e9b2
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001a7c3e9b2"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        *_timestamps(),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("refresh_token", sa.Text, nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "esg_responses",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        *_timestamps(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("financial_year", sa.Integer, nullable=False),
        # Environmental
        sa.Column("total_electricity_consumption", sa.Float, nullable=True),
        sa.Column("renewable_electricity_consumption", sa.Float, nullable=True),
        sa.Column("total_fuel_consumption", sa.Float, nullable=True),
        sa.Column("carbon_emissions", sa.Float, nullable=True),
        # Social
        sa.Column("total_employees", sa.Integer, nullable=True),
        sa.Column("female_employees", sa.Integer, nullable=True),
        sa.Column("average_training_hours", sa.Float, nullable=True),
        sa.Column("community_investment_spend", sa.Float, nullable=True),
        # Governance
        sa.Column("independent_board_members_percent", sa.Float, nullable=True),
        sa.Column("has_data_privacy_policy", sa.Boolean, nullable=True),
        sa.Column("total_revenue", sa.Float, nullable=True),
        # Auto-calculated
        sa.Column("carbon_intensity", sa.Float, nullable=True),
        sa.Column("renewable_electricity_ratio", sa.Float, nullable=True),
        sa.Column("diversity_ratio", sa.Float, nullable=True),
        sa.Column("community_spend_ratio", sa.Float, nullable=True),
        sa.UniqueConstraint("user_id", "financial_year", name="uq_esg_response_user_year"),
    )
    op.create_index("ix_esg_responses_user_id", "esg_responses", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_esg_responses_user_id", table_name="esg_responses")
    op.drop_table("esg_responses")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

"""Create users, platforms, affiliate_links and performance_metrics tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the initial schema for accounts, platforms, links and metrics.
How:   UUID primary keys generated by PostgreSQL, TIMESTAMP WITH TIME ZONE
       for creation times, JSONB for the platform list fields.

affiliate_links.platform_id and performance_metrics.affiliate_link_id are
plain UUID columns without foreign keys: dangling references are accepted
unless STRICT_REFERENTIAL_INTEGRITY is enabled in the application.

Rollback: downgrade() drops all four tables (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _created_at_column() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    """Create the four tables with their constraints and indexes."""
    op.create_table(
        "users",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False, comment="Unique login identifier"),
        sa.Column("password_hash", sa.String(255), nullable=False, comment="bcrypt hash"),
        sa.Column(
            "role",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'user'"),
            comment="Stored on the account and in tokens; not used for authorization",
        ),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "platforms",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "niches",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("commission_rate", sa.String(255), nullable=True),
        sa.Column("api_url", sa.String(2048), nullable=True),
        sa.Column(
            "join_steps",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "affiliate_links",
        _id_column(),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column(
            "platform_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment="Referenced platform; not enforced by a foreign key",
        ),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_affiliate_links_platform_id", "affiliate_links", ["platform_id"])

    op.create_table(
        "performance_metrics",
        _id_column(),
        sa.Column(
            "affiliate_link_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment="Referenced affiliate link; not enforced by a foreign key",
        ),
        sa.Column("clicks", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("conversions", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
    )
    # Summaries and per-link listings filter by link and order by time
    op.create_index(
        "idx_performance_metrics_link_created",
        "performance_metrics",
        ["affiliate_link_id", "created_at"],
    )


def downgrade() -> None:
    """Drop all tables. Destructive."""
    op.drop_index("idx_performance_metrics_link_created", table_name="performance_metrics")
    op.drop_table("performance_metrics")
    op.drop_index("idx_affiliate_links_platform_id", table_name="affiliate_links")
    op.drop_table("affiliate_links")
    op.drop_table("platforms")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

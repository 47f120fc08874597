"""Create projects and feed_snapshots tables

Revision ID: 4c2d9e7a1b30
Revises:
Create Date: 2026-02-20 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "4c2d9e7a1b30"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create both tables.

    ``projects`` is normally provisioned by the moderation workflow; this
    revision exists so a dev database has the same shape.
    """
    op.create_table(
        "projects",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("slug", sa.String(120), nullable=False, unique=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("tagline", sa.String(300), nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("logo", sa.String(500), nullable=True),
        sa.Column("original_url", sa.String(500), nullable=True),
        sa.Column("proxy_url", sa.String(500), nullable=True),
        sa.Column("github_repo", sa.String(500), nullable=True),
        sa.Column("tools", sa.Text, nullable=True),
        sa.Column("tags", sa.Text, nullable=True),
        sa.Column("pricing_model", sa.String(30), nullable=True),
        sa.Column("builder_name", sa.String(100), nullable=True),
        sa.Column("builder_discord", sa.String(100), nullable=True),
        sa.Column("builder_profile_url", sa.String(500), nullable=True),
        sa.Column("discord_thread", sa.String(500), nullable=True),
        sa.Column("is_promoted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("promoted_order", sa.Integer, nullable=True),
        sa.Column("featured", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("featured_rank", sa.Integer, nullable=True),
        sa.Column("is_division_zero", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("views_6h_slot1", sa.Integer, nullable=False, server_default="0"),
        sa.Column("views_6h_slot2", sa.Integer, nullable=False, server_default="0"),
        sa.Column("views_6h_slot3", sa.Integer, nullable=False, server_default="0"),
        sa.Column("views_6h_slot4", sa.Integer, nullable=False, server_default="0"),
        sa.Column("views_3day", sa.Integer, nullable=False, server_default="0"),
        sa.Column("views_total", sa.Integer, nullable=False, server_default="0"),
        sa.Column("clicks", sa.Integer, nullable=False, server_default="0"),
        sa.Column("saves", sa.Integer, nullable=False, server_default="0"),
        sa.Column("trending_score", sa.Integer, nullable=False, server_default="0"),
        sa.Column("trending_rank", sa.Integer, nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_projects_status", "projects", ["status"])
    op.create_index("ix_projects_category", "projects", ["category"])

    op.create_table(
        "feed_snapshots",
        sa.Column("key", sa.String(50), primary_key=True),
        sa.Column("value_json", sa.Text, nullable=False),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("feed_snapshots")
    op.drop_index("ix_projects_category", table_name="projects")
    op.drop_index("ix_projects_status", table_name="projects")
    op.drop_table("projects")

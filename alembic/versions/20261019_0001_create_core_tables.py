"""create users, challenges, user_challenges

Revision ID: 20261019_0001
Revises: 
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "challenges",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("difficulty", sa.String(length=16), nullable=False, server_default="easy"),
        sa.Column("points", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("frequency", sa.String(length=16), nullable=False, server_default="daily"),
        sa.Column("is_daily", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("counts_for_streak", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("requires_photo", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("requires_location", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("total_accepts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_completions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_challenges_category", "challenges", ["category"], unique=False)
    op.create_index("ix_challenges_difficulty", "challenges", ["difficulty"], unique=False)
    op.create_index("ix_challenges_is_active", "challenges", ["is_active"], unique=False)

    op.create_table(
        "user_challenges",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("user_id", sa.String(length=128), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("challenge_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="accepted"),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(length=16), nullable=True),
        sa.Column("ai_confidence", sa.Float(), nullable=True),
        sa.Column("ai_reasoning", sa.Text(), nullable=True),
        sa.Column("points_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("counts_for_streak", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("photo_url", sa.String(length=2048), nullable=True),
        sa.Column("location_json", sa.Text(), nullable=True),
        sa.Column("challenge_title", sa.String(length=255), nullable=True),
        sa.Column("challenge_description", sa.Text(), nullable=True),
        sa.Column("challenge_category", sa.String(length=32), nullable=True),
        sa.Column("challenge_points", sa.Integer(), nullable=True),
        sa.Column("challenge_is_daily", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "challenge_id", name="uq_user_challenge_user_challenge"),
    )
    op.create_index("ix_user_challenges_user_id", "user_challenges", ["user_id"], unique=False)
    op.create_index("ix_user_challenges_challenge_id", "user_challenges", ["challenge_id"], unique=False)
    op.create_index("ix_user_challenges_status", "user_challenges", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_user_challenges_status", table_name="user_challenges")
    op.drop_index("ix_user_challenges_challenge_id", table_name="user_challenges")
    op.drop_index("ix_user_challenges_user_id", table_name="user_challenges")
    op.drop_table("user_challenges")

    op.drop_index("ix_challenges_is_active", table_name="challenges")
    op.drop_index("ix_challenges_difficulty", table_name="challenges")
    op.drop_index("ix_challenges_category", table_name="challenges")
    op.drop_table("challenges")

    op.drop_table("users")

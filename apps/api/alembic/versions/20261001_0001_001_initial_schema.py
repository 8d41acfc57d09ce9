"""001_initial_schema

Create content production tables: creators, daily_content, used_verses,
content_generation_logs

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # Create creators table
    op.create_table(
        "creators",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("languages", sa.JSON(), nullable=False),
        sa.Column("monthly_capacity", sa.Integer(), nullable=False),
        sa.Column("can_bible", sa.Boolean(), nullable=False),
        sa.Column("can_positivity", sa.Boolean(), nullable=False),
        sa.Column("is_ai", sa.Boolean(), nullable=False),
        sa.Column("heygen_avatar_id", sa.String(1024), nullable=True),
        sa.Column("heygen_voice_id", sa.String(1024), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_creators")),
    )
    op.create_index(op.f("ix_creators_user_id"), "creators", ["user_id"], unique=True)
    op.create_index(op.f("ix_creators_active"), "creators", ["active"], unique=False)

    # Create daily_content table
    op.create_table(
        "daily_content",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_date", sa.Date(), nullable=False),
        sa.Column("mode", sa.String(20), nullable=False),
        sa.Column("language", sa.String(10), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("content_text", sa.Text(), nullable=True),
        sa.Column("verse_reference", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("creator_id", sa.Integer(), nullable=True),
        sa.Column("camera_script", sa.Text(), nullable=True),
        sa.Column("devotional_reflection", sa.Text(), nullable=True),
        sa.Column("meditation_script", sa.Text(), nullable=True),
        sa.Column("background_prompt", sa.Text(), nullable=True),
        sa.Column("rejection_note", sa.Text(), nullable=True),
        sa.Column("creator_video_url", sa.String(1024), nullable=True),
        sa.Column("creator_video_thumbnail", sa.String(1024), nullable=True),
        sa.Column("ai_video_url", sa.String(1024), nullable=True),
        sa.Column("ai_video_thumbnail", sa.String(1024), nullable=True),
        sa.Column("published", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["creator_id"],
            ["creators.id"],
            name=op.f("fk_daily_content_creator_id_creators"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_daily_content")),
        sa.UniqueConstraint(
            "post_date",
            "mode",
            "language",
            name="uq_daily_content_date_mode_language",
        ),
    )
    op.create_index(op.f("ix_daily_content_post_date"), "daily_content", ["post_date"], unique=False)
    op.create_index(op.f("ix_daily_content_creator_id"), "daily_content", ["creator_id"], unique=False)
    op.create_index(
        "ix_daily_content_status_mode_date",
        "daily_content",
        ["status", "mode", "post_date"],
        unique=False,
    )

    # Create used_verses table
    op.create_table(
        "used_verses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("book", sa.String(50), nullable=False),
        sa.Column("chapter", sa.Integer(), nullable=False),
        sa.Column("verse", sa.Integer(), nullable=False),
        sa.Column("reference", sa.String(100), nullable=False),
        sa.Column("content_item_id", sa.Integer(), nullable=False),
        sa.Column("used_date", sa.Date(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["content_item_id"],
            ["daily_content.id"],
            name=op.f("fk_used_verses_content_item_id_daily_content"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_used_verses")),
        sa.UniqueConstraint("book", "chapter", "verse", name="uq_used_verses_book_chapter_verse"),
        sa.UniqueConstraint("content_item_id", name=op.f("uq_used_verses_content_item_id")),
    )

    # Create content_generation_logs table
    op.create_table(
        "content_generation_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("content_item_id", sa.Integer(), nullable=False),
        sa.Column("field", sa.String(50), nullable=False),
        sa.Column("translation_code", sa.String(20), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("heygen_video_id", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["content_item_id"],
            ["daily_content.id"],
            name=op.f("fk_content_generation_logs_content_item_id_daily_content"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_content_generation_logs")),
        sa.UniqueConstraint(
            "heygen_video_id",
            name=op.f("uq_content_generation_logs_heygen_video_id"),
        ),
    )
    op.create_index(
        op.f("ix_content_generation_logs_content_item_id"),
        "content_generation_logs",
        ["content_item_id"],
        unique=False,
    )
    op.create_index(
        "ix_content_generation_logs_status_created",
        "content_generation_logs",
        ["status", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_content_generation_logs_status_created", table_name="content_generation_logs")
    op.drop_index(
        op.f("ix_content_generation_logs_content_item_id"),
        table_name="content_generation_logs",
    )
    op.drop_table("content_generation_logs")

    op.drop_table("used_verses")

    op.drop_index("ix_daily_content_status_mode_date", table_name="daily_content")
    op.drop_index(op.f("ix_daily_content_creator_id"), table_name="daily_content")
    op.drop_index(op.f("ix_daily_content_post_date"), table_name="daily_content")
    op.drop_table("daily_content")

    op.drop_index(op.f("ix_creators_active"), table_name="creators")
    op.drop_index(op.f("ix_creators_user_id"), table_name="creators")
    op.drop_table("creators")

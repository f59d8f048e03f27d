"""Create users, content, donation and contact tables

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True)


def _is_active() -> sa.Column:
    return sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true())


def _sort_order() -> sa.Column:
    return sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0")


def _payee_columns() -> list[sa.Column]:
    return [
        sa.Column("account_name", sa.String(255), nullable=False),
        sa.Column("bank_name", sa.String(255), nullable=False),
        sa.Column("account_number", sa.String(64), nullable=False),
        sa.Column("ifsc_code", sa.String(16), nullable=False),
        sa.Column("swift_code", sa.String(16), nullable=True),
        sa.Column("qr_code_url", sa.Text(), nullable=True),
        _is_active(),
    ]


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(150), nullable=False, unique=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="user"),
        _is_active(),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
    )

    # --- donation targets ---
    op.create_table(
        "donation_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=False, server_default=""),
        sa.Column("image_alt", sa.String(255), nullable=True),
        sa.Column("heading", sa.String(255), nullable=True),
        _is_active(),
        _sort_order(),
        sa.Column("suggested_amounts", sa.JSON(), nullable=True),
    )
    op.create_table(
        "donation_cards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("donation_categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        _is_active(),
        _sort_order(),
        sa.CheckConstraint("amount > 0", name="ck_donation_cards_amount"),
    )
    op.create_index("ix_donation_cards_category_id", "donation_cards", ["category_id"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False, server_default=""),
        sa.Column("image_alt", sa.String(255), nullable=True),
        sa.Column("read_more_url", sa.Text(), nullable=True),
        _is_active(),
        sa.Column("suggested_amounts", sa.JSON(), nullable=True),
        sa.Column(
            "custom_donation_enabled", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column(
            "custom_donation_title",
            sa.String(255),
            nullable=False,
            server_default="Any Donation of Your Choice",
        ),
        _created_at(),
        _updated_at(),
    )
    op.create_table(
        "event_donation_cards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        _is_active(),
        _sort_order(),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("amount > 0", name="ck_event_donation_cards_amount"),
    )
    op.create_index("ix_event_donation_cards_event_id", "event_donation_cards", ["event_id"])

    # --- bank details ---
    op.create_table(
        "bank_details",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_payee_columns(),
    )
    op.create_table(
        "category_bank_details",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("donation_categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_payee_columns(),
        _created_at(),
        _updated_at(),
    )
    op.create_index(
        "ix_category_bank_details_category_id", "category_bank_details", ["category_id"]
    )
    op.create_table(
        "event_bank_details",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_payee_columns(),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_event_bank_details_event_id", "event_bank_details", ["event_id"])

    # --- donations (targets SET NULL so history survives content deletes) ---
    op.create_table(
        "donations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("donation_categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "card_id",
            sa.Integer(),
            sa.ForeignKey("donation_cards.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "event_card_id",
            sa.Integer(),
            sa.ForeignKey("event_donation_cards.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("pan_card", sa.String(10), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("payment_id", sa.String(64), nullable=False, unique=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("payment_gateway_response", sa.Text(), nullable=True),
        sa.Column("invoice_number", sa.String(32), nullable=True, unique=True),
        sa.Column("receipt_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notification_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'failed')", name="ck_donations_status"
        ),
        sa.CheckConstraint("amount > 0", name="ck_donations_amount"),
    )
    op.create_index("ix_donations_user_id", "donations", ["user_id"])
    op.create_index("ix_donations_category_id", "donations", ["category_id"])
    op.create_index("ix_donations_event_id", "donations", ["event_id"])

    # --- contact & newsletter ---
    op.create_table(
        "contact_messages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
    )
    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        _is_active(),
        _created_at(),
    )

    # --- site content ---
    op.create_table(
        "banners",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("image_alt", sa.String(255), nullable=True),
        sa.Column("button_text", sa.String(100), nullable=True),
        sa.Column("button_link", sa.Text(), nullable=True),
        _is_active(),
        _sort_order(),
    )
    op.create_table(
        "quotes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("source", sa.String(255), nullable=True),
        _is_active(),
        _sort_order(),
    )
    op.create_table(
        "gallery",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("image_alt", sa.String(255), nullable=True),
        _is_active(),
        _sort_order(),
    )
    op.create_table(
        "videos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("thumbnail_url", sa.Text(), nullable=False),
        sa.Column("thumbnail_alt", sa.String(255), nullable=True),
        sa.Column("youtube_url", sa.Text(), nullable=False),
        _is_active(),
        _sort_order(),
    )
    op.create_table(
        "live_videos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("youtube_url", sa.Text(), nullable=False),
        _is_active(),
        _sort_order(),
        _created_at(),
        _updated_at(),
    )
    op.create_table(
        "testimonials",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        _is_active(),
        _sort_order(),
    )
    op.create_table(
        "social_links",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("platform", sa.String(64), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("icon", sa.String(64), nullable=True),
        _is_active(),
        _sort_order(),
        _created_at(),
        _updated_at(),
    )
    op.create_table(
        "stats",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.Column("suffix", sa.String(20), nullable=False),
        sa.Column("label", sa.String(255), nullable=False),
        _is_active(),
        _sort_order(),
        _created_at(),
        _updated_at(),
    )
    op.create_table(
        "schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("time", sa.String(10), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _is_active(),
        _sort_order(),
        _created_at(),
        _updated_at(),
    )
    op.create_table(
        "blog_posts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("excerpt", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("image_alt", sa.String(125), nullable=True),
        sa.Column("author", sa.String(100), nullable=False),
        sa.Column("read_time", sa.Integer(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("seo_title", sa.String(60), nullable=True),
        sa.Column("seo_description", sa.String(160), nullable=True),
        sa.Column("seo_keywords", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
    )

    # --- uploads ---
    op.create_table(
        "media_assets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("s3_key", sa.Text(), nullable=False, unique=True),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=True),
        sa.Column("content_type", sa.String(100), nullable=True),
        sa.Column("size_bytes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "uploaded_by",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _created_at(),
    )


def downgrade() -> None:
    for table in (
        "media_assets",
        "blog_posts",
        "schedules",
        "stats",
        "social_links",
        "testimonials",
        "live_videos",
        "videos",
        "gallery",
        "quotes",
        "banners",
        "subscriptions",
        "contact_messages",
        "donations",
        "event_bank_details",
        "category_bank_details",
        "bank_details",
        "event_donation_cards",
        "events",
        "donation_cards",
        "donation_categories",
        "users",
    ):
        op.drop_table(table)

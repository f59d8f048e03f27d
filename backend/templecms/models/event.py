from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column

from templecms.db.base import Base, TimestampMixin


class Event(TimestampMixin, Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    image_alt: Mapped[str | None] = mapped_column(String(255), nullable=True)
    read_more_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true())
    suggested_amounts: Mapped[list[int] | None] = mapped_column(JSON, nullable=True)
    custom_donation_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=true()
    )
    custom_donation_title: Mapped[str] = mapped_column(
        String(255), nullable=False, server_default="Any Donation of Your Choice"
    )


class EventDonationCard(TimestampMixin, Base):
    __tablename__ = "event_donation_cards"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_event_donation_cards_amount"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    event_id: Mapped[int] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")

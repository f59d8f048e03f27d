from sqlalchemy import Boolean, ForeignKey, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column

from templecms.db.base import Base, TimestampMixin


class _PayeeColumns:
    account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    bank_name: Mapped[str] = mapped_column(String(255), nullable=False)
    account_number: Mapped[str] = mapped_column(String(64), nullable=False)
    ifsc_code: Mapped[str] = mapped_column(String(16), nullable=False)
    swift_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    qr_code_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true())


class BankDetails(_PayeeColumns, Base):
    """Temple-wide payee details shown as an alternative to online payment."""

    __tablename__ = "bank_details"

    id: Mapped[int] = mapped_column(primary_key=True)


class CategoryBankDetails(_PayeeColumns, TimestampMixin, Base):
    __tablename__ = "category_bank_details"

    id: Mapped[int] = mapped_column(primary_key=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("donation_categories.id", ondelete="CASCADE"), nullable=False, index=True
    )


class EventBankDetails(_PayeeColumns, TimestampMixin, Base):
    __tablename__ = "event_bank_details"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_id: Mapped[int] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )

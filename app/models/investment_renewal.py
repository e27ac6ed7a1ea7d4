"""
Investment renewal model.

Append-only history of renewal actions. One row per renewal; the
(investment_id, renewal_number) pair makes the insert idempotent.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import MoneyType, MonthlyRateType


class InvestmentRenewal(Base):
    """Investment renewal record - immutable snapshot of old and new terms."""

    __tablename__ = "investment_renewals"
    __table_args__ = (
        UniqueConstraint(
            "investment_id", "renewal_number",
            name="uq_investment_renewal_number",
        ),
        CheckConstraint(
            "action IN ('renew', 'renew_with_new_rules', 'suggest_increase')",
            name="check_investment_renewal_action",
        ),
        CheckConstraint(
            "additional_amount IS NULL OR additional_amount > 0",
            name="check_investment_renewal_additional_positive",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    investment_id: Mapped[int] = mapped_column(
        ForeignKey("investments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # Value of renewal_count after this renewal
    renewal_number: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[str] = mapped_column(String(30), nullable=False)

    # Previous terms
    previous_payment_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    previous_commitment_period: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_liquidity_class: Mapped[str] = mapped_column(String(20), nullable=False)
    previous_monthly_rate: Mapped[Decimal | None] = mapped_column(
        MonthlyRateType, nullable=True
    )
    previous_expiry_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # New terms
    new_payment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    new_commitment_period: Mapped[int] = mapped_column(Integer, nullable=False)
    new_liquidity_class: Mapped[str] = mapped_column(String(20), nullable=False)
    new_monthly_rate: Mapped[Decimal | None] = mapped_column(
        MonthlyRateType, nullable=True
    )
    new_expiry_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    # Suggest-increase details
    additional_amount: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    additional_investment_id: Mapped[int | None] = mapped_column(
        ForeignKey("investments.id", ondelete="SET NULL"), nullable=True
    )

    renewed_by: Mapped[int | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        def _iso(value: datetime | None) -> str | None:
            return value.isoformat() if value else None

        def _str(value: Decimal | None) -> str | None:
            return str(value) if value is not None else None

        return {
            "id": self.id,
            "investment_id": self.investment_id,
            "renewal_number": self.renewal_number,
            "action": self.action,
            "previous_payment_date": _iso(self.previous_payment_date),
            "previous_commitment_period": self.previous_commitment_period,
            "previous_liquidity_class": self.previous_liquidity_class,
            "previous_monthly_rate": _str(self.previous_monthly_rate),
            "previous_expiry_date": _iso(self.previous_expiry_date),
            "new_payment_date": _iso(self.new_payment_date),
            "new_commitment_period": self.new_commitment_period,
            "new_liquidity_class": self.new_liquidity_class,
            "new_monthly_rate": _str(self.new_monthly_rate),
            "new_expiry_date": _iso(self.new_expiry_date),
            "additional_amount": _str(self.additional_amount),
            "additional_investment_id": self.additional_investment_id,
            "renewed_by": self.renewed_by,
            "created_at": _iso(self.created_at),
        }

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<InvestmentRenewal(id={self.id}, investment_id={self.investment_id}, "
            f"renewal_number={self.renewal_number}, action={self.action})>"
        )

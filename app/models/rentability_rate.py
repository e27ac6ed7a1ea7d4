"""
Rentability rate model.

Rate table administered outside the core. A row with neither commitment
period nor liquidity class is a tier-wide fixed rate.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import MonthlyRateType


class RentabilityRate(Base):
    """Rentability rate - monthly rate per tier, period, liquidity and conditions."""

    __tablename__ = "rentability_rates"
    __table_args__ = (
        CheckConstraint(
            "monthly_rate > 0 AND monthly_rate < 1",
            name="check_rentability_rate_fraction",
        ),
        CheckConstraint(
            "(commitment_period IS NULL) = (liquidity_class IS NULL)",
            name="check_rentability_rate_period_liquidity_pair",
        ),
        Index(
            "idx_rentability_rate_lookup",
            "tier", "commitment_period", "liquidity_class",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # NULL tier applies to every tier (condition-scoped rows only)
    tier: Mapped[str | None] = mapped_column(String(20), nullable=True)
    commitment_period: Mapped[int | None] = mapped_column(Integer, nullable=True)
    liquidity_class: Mapped[str | None] = mapped_column(String(20), nullable=True)
    condition_ids: Mapped[list[int] | None] = mapped_column(
        JSONB(none_as_null=True), nullable=True
    )

    # Fraction, 0.02 = 2% per month
    monthly_rate: Mapped[Decimal] = mapped_column(MonthlyRateType, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    @property
    def is_fixed(self) -> bool:
        """Tier-wide rate applying to any period and liquidity."""
        return self.commitment_period is None and self.liquidity_class is None

    @property
    def is_condition_scoped(self) -> bool:
        """Row only applies when matching special conditions are given."""
        return bool(self.condition_ids)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<RentabilityRate(id={self.id}, tier={self.tier}, "
            f"period={self.commitment_period}, liquidity={self.liquidity_class}, "
            f"rate={self.monthly_rate})>"
        )

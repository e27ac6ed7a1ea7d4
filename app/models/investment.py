"""
Investment model.

Represents a capital contribution of an investor. Maturity is derived from
payment_date and commitment_period and never stored.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import InvestmentStatus, LiquidityClass
from app.models.types import MoneyType, MonthlyRateType


class Investment(Base):
    """Investment model - investor contributions."""

    __tablename__ = "investments"
    __table_args__ = (
        CheckConstraint(
            "amount > 0", name="check_investment_amount_positive"
        ),
        CheckConstraint(
            "commitment_period IN (3, 6, 12, 24, 36)",
            name="check_investment_commitment_period",
        ),
        CheckConstraint(
            "liquidity_class IN ('monthly', 'semiannual', 'annual', 'biennial', 'triennial')",
            name="check_investment_liquidity_class",
        ),
        CheckConstraint(
            "status IN ('pending', 'active', 'withdrawn')",
            name="check_investment_status",
        ),
        CheckConstraint(
            "renewal_count >= 0", name="check_investment_renewal_count_non_negative"
        ),
        Index("idx_investment_owner_status", "owner_id", "status"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Owner reference (investor profile)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Terms
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    commitment_period: Mapped[int] = mapped_column(
        Integer, nullable=False
    )  # months: 3, 6, 12, 24, 36
    liquidity_class: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LiquidityClass.MONTHLY.value
    )
    # Frozen at approval/renewal time
    monthly_rate: Mapped[Decimal | None] = mapped_column(
        MonthlyRateType, nullable=True
    )
    # Special condition ids captured at submission
    condition_ids: Mapped[list[int] | None] = mapped_column(
        JSONB(none_as_null=True), nullable=True
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvestmentStatus.PENDING.value, index=True
    )  # pending, active, withdrawn

    # Accrual clock origin
    payment_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    receipt_ref: Mapped[str | None] = mapped_column(
        String(512), nullable=True
    )

    # Cycle tracking
    renewal_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    original_investment_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    current_cycle_start_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_renewal_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Approval / withdrawal audit
    approved_by: Mapped[int | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    withdrawn_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Set on investments created by a suggest-increase renewal
    parent_investment_id: Mapped[int | None] = mapped_column(
        ForeignKey("investments.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Optimistic lock counter
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def liquidity(self) -> LiquidityClass:
        """Liquidity class as enum."""
        return LiquidityClass.parse(self.liquidity_class)

    @property
    def investment_status(self) -> InvestmentStatus:
        """Status as enum."""
        return InvestmentStatus(self.status)

    @property
    def is_active(self) -> bool:
        """Check if investment is active."""
        return self.status == InvestmentStatus.ACTIVE.value

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "amount": str(self.amount),
            "commitment_period": self.commitment_period,
            "liquidity_class": self.liquidity_class,
            "monthly_rate": str(self.monthly_rate) if self.monthly_rate is not None else None,
            "condition_ids": list(self.condition_ids or []),
            "status": self.status,
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "receipt_ref": self.receipt_ref,
            "renewal_count": self.renewal_count,
            "original_investment_date": (
                self.original_investment_date.isoformat()
                if self.original_investment_date else None
            ),
            "current_cycle_start_date": (
                self.current_cycle_start_date.isoformat()
                if self.current_cycle_start_date else None
            ),
            "last_renewal_date": (
                self.last_renewal_date.isoformat() if self.last_renewal_date else None
            ),
            "parent_investment_id": self.parent_investment_id,
            "version": self.version,
        }

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Investment(id={self.id}, owner_id={self.owner_id}, "
            f"amount={self.amount}, status={self.status})>"
        )

"""
Withdrawal request model.

A request reserves part (or all) of an investment's amount until staff
approve or reject it. Approving a total request, or a partial one that
leaves nothing available, withdraws the investment.
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
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import WithdrawalRequestStatus
from app.models.types import MoneyType


class WithdrawalRequest(Base):
    """Withdrawal request awaiting staff review."""

    __tablename__ = "withdrawal_requests"
    __table_args__ = (
        CheckConstraint(
            "amount > 0", name="check_withdrawal_request_amount_positive"
        ),
        CheckConstraint(
            "withdrawal_type IN ('partial', 'total')",
            name="check_withdrawal_request_type",
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="check_withdrawal_request_status",
        ),
        Index("idx_withdrawal_request_investment_status", "investment_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    investment_id: Mapped[int] = mapped_column(
        ForeignKey("investments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    requested_by: Mapped[int | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )

    withdrawal_type: Mapped[str] = mapped_column(String(10), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WithdrawalRequestStatus.PENDING.value
    )  # pending, approved, rejected

    # Review
    processed_by: Mapped[int | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Optimistic lock counter
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_pending(self) -> bool:
        """Check if the request still awaits review."""
        return self.status == WithdrawalRequestStatus.PENDING.value

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        return {
            "id": self.id,
            "investment_id": self.investment_id,
            "owner_id": self.owner_id,
            "requested_by": self.requested_by,
            "withdrawal_type": self.withdrawal_type,
            "amount": str(self.amount),
            "status": self.status,
            "processed_by": self.processed_by,
            "processed_at": self.processed_at.isoformat() if self.processed_at else None,
            "rejection_reason": self.rejection_reason,
            "version": self.version,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<WithdrawalRequest(id={self.id}, investment_id={self.investment_id}, "
            f"type={self.withdrawal_type}, amount={self.amount}, status={self.status})>"
        )

"""
Profile model.

Actors of the portal: distributors, offices, advisors, investors and admins.
"""

from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import ActorTier


class Profile(Base):
    """Profile model - actor identity and hierarchy pointers."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(
            "tier IN ('distributor', 'office', 'advisor', 'investor', 'admin')",
            name="check_profile_tier",
        ),
        CheckConstraint(
            "advisor_id IS NULL OR advisor_id <> id",
            name="check_profile_advisor_not_self",
        ),
        Index("idx_profile_tier", "tier"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Identity
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    tier: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ActorTier.INVESTOR.value
    )

    # Hierarchy pointers
    # investor -> advisor
    advisor_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # advisor (or investor) -> office
    office_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # office (or below) -> distributor
    distributor_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )

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

    @property
    def actor_tier(self) -> ActorTier:
        """Tier as enum."""
        return ActorTier.parse(self.tier)

    @property
    def is_admin(self) -> bool:
        """Check if actor is an admin."""
        return self.tier == ActorTier.ADMIN.value

    def __repr__(self) -> str:
        """String representation."""
        return f"<Profile(id={self.id}, tier={self.tier}, email={self.email})>"

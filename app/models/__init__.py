"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.base import Base
from app.models.enums import (
    ActorTier,
    InvestmentStatus,
    LiquidityClass,
    NotificationEvent,
    NotificationStatus,
    RenewalAction,
    WithdrawalAction,
    WithdrawalRequestStatus,
    WithdrawalType,
)
from app.models.investment import Investment
from app.models.investment_renewal import InvestmentRenewal
from app.models.notification_outbox import NotificationOutbox
from app.models.profile import Profile
from app.models.rentability_rate import RentabilityRate
from app.models.withdrawal_request import WithdrawalRequest


__all__ = [
    "Base",
    # Enums
    "ActorTier",
    "InvestmentStatus",
    "LiquidityClass",
    "NotificationEvent",
    "NotificationStatus",
    "RenewalAction",
    "WithdrawalAction",
    "WithdrawalRequestStatus",
    "WithdrawalType",
    # Models
    "Investment",
    "InvestmentRenewal",
    "NotificationOutbox",
    "Profile",
    "RentabilityRate",
    "WithdrawalRequest",
]

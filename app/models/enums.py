"""
Enumerations shared by models and services.

Values are stored as plain strings in the database; parsing happens at the
boundary so unknown values never reach the business rules.
"""

from enum import Enum

from app.utils.exceptions import ValidationError


class ActorTier(str, Enum):
    """Position of an actor in the reseller hierarchy."""

    DISTRIBUTOR = "distributor"
    OFFICE = "office"
    ADVISOR = "advisor"
    INVESTOR = "investor"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: "str | ActorTier") -> "ActorTier":
        """Parse tier name, raising ValidationError for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown tier: {value}") from None


class LiquidityClass(str, Enum):
    """Payout cadence of an investment."""

    MONTHLY = "monthly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"
    BIENNIAL = "biennial"
    TRIENNIAL = "triennial"

    @property
    def cycle_months(self) -> int:
        """Length of one payout cycle in months."""
        return _LIQUIDITY_CYCLE_MONTHS[self]

    @property
    def is_monthly(self) -> bool:
        """Monthly liquidity accrues simple interest."""
        return self is LiquidityClass.MONTHLY

    @classmethod
    def parse(cls, value: "str | LiquidityClass") -> "LiquidityClass":
        """
        Parse liquidity class.

        Accepts canonical names and the portal's Portuguese labels
        (Mensal, Semestral, Anual, Bienal, Trienal), case-insensitive.

        Raises:
            ValidationError: If the value is not a known liquidity class
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        parsed = _LIQUIDITY_ALIASES.get(key)
        if parsed is None:
            raise ValidationError(f"Unknown liquidity class: {value}")
        return parsed


_LIQUIDITY_CYCLE_MONTHS = {
    LiquidityClass.MONTHLY: 1,
    LiquidityClass.SEMIANNUAL: 6,
    LiquidityClass.ANNUAL: 12,
    LiquidityClass.BIENNIAL: 24,
    LiquidityClass.TRIENNIAL: 36,
}

_LIQUIDITY_ALIASES = {
    **{item.value: item for item in LiquidityClass},
    "mensal": LiquidityClass.MONTHLY,
    "semestral": LiquidityClass.SEMIANNUAL,
    "anual": LiquidityClass.ANNUAL,
    "bienal": LiquidityClass.BIENNIAL,
    "trienal": LiquidityClass.TRIENNIAL,
}


class InvestmentStatus(str, Enum):
    """Investment lifecycle states."""

    PENDING = "pending"
    ACTIVE = "active"
    WITHDRAWN = "withdrawn"


class RenewalAction(str, Enum):
    """Renewal actions available on an active investment."""

    RENEW = "renew"
    RENEW_WITH_NEW_RULES = "renew_with_new_rules"
    SUGGEST_INCREASE = "suggest_increase"

    @classmethod
    def parse(cls, value: "str | RenewalAction") -> "RenewalAction":
        """Parse action name; accepts snake_case and camelCase."""
        if isinstance(value, cls):
            return value
        key = str(value).strip()
        parsed = _RENEWAL_ACTION_ALIASES.get(key) or _RENEWAL_ACTION_ALIASES.get(key.lower())
        if parsed is None:
            raise ValidationError(f"Unknown renewal action: {value}")
        return parsed


_RENEWAL_ACTION_ALIASES = {
    **{item.value: item for item in RenewalAction},
    "renewWithNewRules": RenewalAction.RENEW_WITH_NEW_RULES,
    "suggestIncrease": RenewalAction.SUGGEST_INCREASE,
}


class WithdrawalType(str, Enum):
    """Scope of a withdrawal request."""

    PARTIAL = "partial"
    TOTAL = "total"

    @classmethod
    def parse(cls, value: "str | WithdrawalType") -> "WithdrawalType":
        """Parse withdrawal type name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown withdrawal type: {value}") from None


class WithdrawalRequestStatus(str, Enum):
    """Withdrawal request review state."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WithdrawalAction(str, Enum):
    """Decision on a pending withdrawal request."""

    APPROVE = "approve"
    REJECT = "reject"

    @classmethod
    def parse(cls, value: "str | WithdrawalAction") -> "WithdrawalAction":
        """Parse decision name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown withdrawal action: {value}") from None


class NotificationStatus(str, Enum):
    """Outbox delivery state."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class NotificationEvent(str, Enum):
    """Events the core emits to the notification outbox."""

    INVESTMENT_SUBMITTED = "investment_submitted"
    INVESTMENT_APPROVED = "investment_approved"
    INVESTMENT_WITHDRAWN = "investment_withdrawn"
    WITHDRAWAL_REQUESTED = "withdrawal_requested"
    WITHDRAWAL_APPROVED = "withdrawal_approved"
    WITHDRAWAL_REJECTED = "withdrawal_rejected"
    INVESTMENT_RENEWED = "investment_renewed"
    RENEWAL_WINDOW_OPEN = "renewal_window_open"
    ACCRUAL_STARTED = "accrual_started"
    PAYOUT_DAY = "payout_day"

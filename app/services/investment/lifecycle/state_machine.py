"""
Investment lifecycle state machine.

States: pending -> active -> withdrawn. Renewal keeps an investment
active. "Matured" is derived from the payment date and commitment period
and never blocks accrual or renewal.
"""

from datetime import date, datetime

from app.models.enums import InvestmentStatus
from app.models.investment import Investment
from app.utils.datetime_utils import add_months, to_date
from app.utils.exceptions import ConflictError


# Transition name -> (required current state, resulting state)
TRANSITIONS: dict[str, tuple[InvestmentStatus, InvestmentStatus]] = {
    "approve": (InvestmentStatus.PENDING, InvestmentStatus.ACTIVE),
    "withdraw": (InvestmentStatus.ACTIVE, InvestmentStatus.WITHDRAWN),
    "renew": (InvestmentStatus.ACTIVE, InvestmentStatus.ACTIVE),
}


def ensure_transition(investment: Investment, transition: str) -> InvestmentStatus:
    """
    Check that a transition is allowed from the current state.

    Args:
        investment: Investment to transition
        transition: approve, withdraw or renew

    Returns:
        Resulting status

    Raises:
        ConflictError: If the investment is not in the required state
    """
    required, target = TRANSITIONS[transition]
    current = InvestmentStatus(investment.status)

    if current is InvestmentStatus.WITHDRAWN:
        raise ConflictError(
            f"Investment {investment.id} is withdrawn, no further transitions allowed"
        )
    if current is not required:
        raise ConflictError(
            f"Cannot {transition} investment {investment.id} in status {current.value}"
        )
    return target


def expiry_date(investment: Investment) -> date | None:
    """
    Derived maturity date (payment date + commitment period).

    Returns:
        Expiry date or None while the investment has no payment date
    """
    if investment.payment_date is None:
        return None
    return add_months(investment.payment_date, investment.commitment_period)


def is_matured(investment: Investment, now: date | datetime) -> bool:
    """Check if the commitment period has elapsed."""
    expiry = expiry_date(investment)
    return expiry is not None and to_date(now) >= expiry

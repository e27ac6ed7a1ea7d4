"""
Investment services.

Lifecycle, accrual, renewal, withdrawal requests and periodic checks of
investments, plus the InvestmentService facade exposing them.
"""

from app.services.investment.checks import (
    AccrualGateEntry,
    InvestmentCheckService,
    PayoutDayCheck,
    RenewalWindowEntry,
)
from app.services.investment.lifecycle import InvestmentLifecycleManager
from app.services.investment.renewal import RenewalOutcome, RenewalParams, RenewalProcessor
from app.services.investment.service import InvestmentService
from app.services.investment.withdrawal import WithdrawalOutcome, WithdrawalProcessor


__all__ = [
    "AccrualGateEntry",
    "InvestmentCheckService",
    "InvestmentLifecycleManager",
    "InvestmentService",
    "PayoutDayCheck",
    "RenewalOutcome",
    "RenewalParams",
    "RenewalProcessor",
    "RenewalWindowEntry",
    "WithdrawalOutcome",
    "WithdrawalProcessor",
]

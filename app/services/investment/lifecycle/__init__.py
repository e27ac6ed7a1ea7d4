"""
Investment lifecycle management.

Handles submission, approval, withdrawal and the state rules behind them.
"""

from app.services.investment.lifecycle.manager import (
    InvestmentLifecycleManager,
    check_version,
)
from app.services.investment.lifecycle.state_machine import (
    TRANSITIONS,
    ensure_transition,
    expiry_date,
    is_matured,
)


__all__ = [
    "InvestmentLifecycleManager",
    "TRANSITIONS",
    "check_version",
    "ensure_transition",
    "expiry_date",
    "is_matured",
]

"""
Investment Club Dividend Calculator.

Standalone package for dividend accrual calculations.

Example:
    >>> from dividends import DividendCalculator
    >>> from datetime import date
    >>> from decimal import Decimal
    >>>
    >>> calc = DividendCalculator()
    >>> calc.accrued_dividends(
    ...     Decimal("10000"), Decimal("0.02"),
    ...     date(2024, 1, 1), date(2024, 4, 1), compound=False,
    ... )
    Decimal('200.00000000')
"""

from dividends.constants import ACCRUAL_MONTH_DAYS, ACCRUAL_START_DAYS
from dividends.core.calculator import DividendCalculator
from dividends.core.models import AccrualBreakdown, PeriodDividends


__version__ = "1.0.0"
__all__ = [
    # Core
    "DividendCalculator",
    # Models
    "AccrualBreakdown",
    "PeriodDividends",
    # Constants
    "ACCRUAL_START_DAYS",
    "ACCRUAL_MONTH_DAYS",
]

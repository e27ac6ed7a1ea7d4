"""
Core dividend calculator functionality.
"""

from dividends.core.calculator import DividendCalculator
from dividends.core.models import AccrualBreakdown, PeriodDividends

__all__ = [
    "DividendCalculator",
    "AccrualBreakdown",
    "PeriodDividends",
]

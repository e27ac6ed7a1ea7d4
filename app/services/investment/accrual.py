"""
Investment accrual.

Applies the dividend calculator to investment records. Pending
investments (no payment date or rate yet) accrue nothing.
"""

from datetime import date, datetime
from decimal import Decimal

from app.config.settings import settings
from app.models.enums import LiquidityClass
from app.models.investment import Investment
from app.utils.datetime_utils import to_date
from dividends import AccrualBreakdown, DividendCalculator, PeriodDividends


def build_calculator() -> DividendCalculator:
    """Create a calculator configured from settings."""
    return DividendCalculator(
        start_days=settings.accrual_start_days,
        month_days=settings.accrual_month_days,
    )


def accrual_start_date(
    investment: Investment, calculator: DividendCalculator | None = None
) -> date | None:
    """
    Get the D+60 gate date of an investment.

    Returns:
        Gate date or None without a payment date
    """
    if investment.payment_date is None:
        return None
    return (calculator or build_calculator()).accrual_start_date(
        to_date(investment.payment_date)
    )


def accrual_breakdown(
    investment: Investment,
    as_of: date | datetime,
    calculator: DividendCalculator | None = None,
) -> AccrualBreakdown | None:
    """
    Compute accrued dividends with intermediate values.

    Returns:
        AccrualBreakdown or None when the investment has no accrual clock
    """
    if investment.payment_date is None or investment.monthly_rate is None:
        return None

    calculator = calculator or build_calculator()
    liquidity = LiquidityClass.parse(investment.liquidity_class)
    return calculator.accrual_breakdown(
        amount=Decimal(investment.amount),
        monthly_rate=Decimal(investment.monthly_rate),
        payment_date=to_date(investment.payment_date),
        as_of=to_date(as_of),
        compound=not liquidity.is_monthly,
    )


def accrued_dividends(
    investment: Investment,
    as_of: date | datetime,
    calculator: DividendCalculator | None = None,
) -> Decimal:
    """
    Dividends accrued by an investment up to as_of.

    Status is not consulted: the D+60 gate applies regardless of it.
    """
    breakdown = accrual_breakdown(investment, as_of, calculator)
    if breakdown is None:
        return Decimal("0")
    return breakdown.accrued


def period_dividends(
    investment: Investment,
    as_of: date | datetime,
    calculator: DividendCalculator | None = None,
) -> PeriodDividends:
    """Dividends attributed to the current month and year."""
    if investment.payment_date is None or investment.monthly_rate is None:
        return PeriodDividends.empty()

    calculator = calculator or build_calculator()
    return calculator.period_dividends(
        amount=Decimal(investment.amount),
        monthly_rate=Decimal(investment.monthly_rate),
        payment_date=to_date(investment.payment_date),
        as_of=to_date(as_of),
    )

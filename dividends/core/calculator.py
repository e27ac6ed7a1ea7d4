"""
Pure business logic calculator for investment dividends.

This module contains standalone calculation logic without any
dependencies on database, ORM, or app-specific code.
"""

from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from dividends.constants import ACCRUAL_MONTH_DAYS, ACCRUAL_START_DAYS, ZERO
from dividends.core.models import AccrualBreakdown, PeriodDividends


# Same precision as the money columns
AMOUNT_QUANTUM = Decimal("0.00000001")


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


class DividendCalculator:
    """
    Pure business logic calculator for dividend accrual.

    Accrual starts at the payment date plus a fixed gate (D+60) and
    counts whole 30-day periods from there. Monthly liquidity earns simple
    interest; every other liquidity class compounds.
    """

    def __init__(
        self,
        start_days: int = ACCRUAL_START_DAYS,
        month_days: int = ACCRUAL_MONTH_DAYS,
    ) -> None:
        """
        Initialize calculator.

        Args:
            start_days: Days between payment date and accrual start
            month_days: Length of one accrual period in days
        """
        if month_days <= 0:
            raise ValueError("month_days must be positive")
        if start_days < 0:
            raise ValueError("start_days must not be negative")
        self.start_days = start_days
        self.month_days = month_days

    def accrual_start_date(self, payment_date: date | datetime) -> date:
        """
        Get the first day dividends accrue (D+60).

        Example:
            >>> DividendCalculator().accrual_start_date(date(2024, 1, 1))
            datetime.date(2024, 3, 1)
        """
        return _as_date(payment_date) + timedelta(days=self.start_days)

    def elapsed_periods(
        self, payment_date: date | datetime, as_of: date | datetime
    ) -> int:
        """
        Count whole accrual periods between the gate and as_of.

        Returns 0 before the gate.
        """
        days = (_as_date(as_of) - self.accrual_start_date(payment_date)).days
        if days < 0:
            return 0
        return days // self.month_days

    def accrued_dividends(
        self,
        amount: Decimal,
        monthly_rate: Decimal,
        payment_date: date | datetime,
        as_of: date | datetime,
        compound: bool,
    ) -> Decimal:
        """
        Calculate dividends accrued up to a date.

        Formula:
            simple:   amount * rate * periods
            compound: amount * ((1 + rate) ** periods - 1)

        Args:
            amount: Invested amount
            monthly_rate: Monthly rate as a fraction (0.02 = 2%)
            payment_date: Accrual clock origin
            as_of: Date to compute for
            compound: False for monthly liquidity, True otherwise

        Returns:
            Accrued dividends (0 before the gate)

        Example:
            >>> calc = DividendCalculator()
            >>> calc.accrued_dividends(
            ...     Decimal("10000"), Decimal("0.02"),
            ...     date(2024, 1, 1), date(2024, 4, 1), compound=False,
            ... )
            Decimal('200.00000000')
        """
        return self.accrual_breakdown(
            amount, monthly_rate, payment_date, as_of, compound
        ).accrued

    def accrual_breakdown(
        self,
        amount: Decimal,
        monthly_rate: Decimal,
        payment_date: date | datetime,
        as_of: date | datetime,
        compound: bool,
    ) -> AccrualBreakdown:
        """
        Calculate accrued dividends with intermediate values.

        Returns:
            AccrualBreakdown
        """
        as_of_day = _as_date(as_of)
        start = self.accrual_start_date(payment_date)
        gate_crossed = as_of_day >= start
        periods = self.elapsed_periods(payment_date, as_of_day)

        accrued = ZERO
        if gate_crossed and periods > 0 and amount > 0 and monthly_rate > 0:
            if compound:
                accrued = amount * ((Decimal("1") + monthly_rate) ** periods - Decimal("1"))
            else:
                accrued = amount * monthly_rate * periods

        return AccrualBreakdown(
            as_of=as_of_day,
            accrual_start_date=start,
            gate_crossed=gate_crossed,
            elapsed_periods=periods,
            compound=compound,
            accrued=accrued.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP),
        )

    def proportional_commission(
        self, monthly_commission: Decimal, days: int
    ) -> Decimal:
        """
        Pro-rate a monthly commission by days.

        Formula: monthly_commission / 30 * days
        """
        if days <= 0:
            return ZERO
        return monthly_commission * Decimal(days) / Decimal(self.month_days)

    def period_dividends(
        self,
        amount: Decimal,
        monthly_rate: Decimal,
        payment_date: date | datetime,
        as_of: date | datetime,
    ) -> PeriodDividends:
        """
        Attribute paid dividends to the current month and year.

        Nothing is counted until one whole period after the gate. After
        that, the month window gets a full commission when the gate lies
        before the first day of the month, otherwise a commission pro-rated
        by the days elapsed in the month. The year window counts whole
        periods since the later of January 1st and the gate when the gate
        lies before the year, otherwise a commission pro-rated by the days
        since the gate.

        Args:
            amount: Invested amount
            monthly_rate: Monthly rate as a fraction
            payment_date: Accrual clock origin
            as_of: Report date

        Returns:
            PeriodDividends
        """
        today = _as_date(as_of)
        commission = amount * monthly_rate
        gate = self.accrual_start_date(payment_date)

        if gate > today:
            return PeriodDividends.empty(commission)

        periods = (today - gate).days // self.month_days
        if periods <= 0:
            return PeriodDividends.empty(commission)

        start_of_month = today.replace(day=1)
        if gate < start_of_month:
            month_paid = commission
        else:
            month_paid = self.proportional_commission(
                commission, (today - start_of_month).days
            )

        start_of_year = today.replace(month=1, day=1)
        if gate < start_of_year:
            year_periods = (today - max(start_of_year, gate)).days // self.month_days
            year_paid = commission * max(0, year_periods)
        else:
            year_paid = self.proportional_commission(commission, (today - gate).days)

        return PeriodDividends(
            monthly_commission=commission,
            total_paid=(commission * periods).quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP),
            current_month=month_paid.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP),
            current_year=year_paid.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP),
        )

"""
Business logic constants.

Central location for business rules and constants used across the application.
"""

from decimal import Decimal

from app.models.enums import LiquidityClass


# Allowed commitment periods (months)
COMMITMENT_PERIODS: tuple[int, ...] = (3, 6, 12, 24, 36)

# Default investor rate matrix (monthly rate as a fraction)
# Keyed by (commitment_period, liquidity_class); used to seed rentability_rates
DEFAULT_INVESTOR_RATES: dict[tuple[int, LiquidityClass], Decimal] = {
    (3, LiquidityClass.MONTHLY): Decimal("0.018"),
    (6, LiquidityClass.MONTHLY): Decimal("0.019"),
    (6, LiquidityClass.SEMIANNUAL): Decimal("0.020"),
    (12, LiquidityClass.MONTHLY): Decimal("0.021"),
    (12, LiquidityClass.SEMIANNUAL): Decimal("0.022"),
    (12, LiquidityClass.ANNUAL): Decimal("0.025"),
    (24, LiquidityClass.MONTHLY): Decimal("0.023"),
    (24, LiquidityClass.SEMIANNUAL): Decimal("0.025"),
    (24, LiquidityClass.ANNUAL): Decimal("0.027"),
    (24, LiquidityClass.BIENNIAL): Decimal("0.030"),
    (36, LiquidityClass.MONTHLY): Decimal("0.024"),
    (36, LiquidityClass.SEMIANNUAL): Decimal("0.026"),
    (36, LiquidityClass.BIENNIAL): Decimal("0.032"),
    (36, LiquidityClass.TRIENNIAL): Decimal("0.035"),
}


def is_valid_commitment_period(months: int) -> bool:
    """Check if commitment period is one of the offered terms."""
    return months in COMMITMENT_PERIODS


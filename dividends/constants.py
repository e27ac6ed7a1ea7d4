"""
Default constants for the dividend calculator.
"""

from decimal import Decimal


# Investors start earning this many days after the payment date (D+60)
ACCRUAL_START_DAYS = 60

# Fixed accrual month length; calendar months are not used
ACCRUAL_MONTH_DAYS = 30

ZERO = Decimal("0")

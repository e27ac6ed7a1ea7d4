"""
Validators package.

Provides validation functions for operation parameters.
"""

from app.validators.investment import (
    require,
    validate_amount,
    validate_commitment_period,
    validate_condition_ids,
    validate_datetime,
    validate_liquidity,
    validate_reason,
    validate_receipt_ref,
)


__all__ = [
    "require",
    "validate_amount",
    "validate_commitment_period",
    "validate_condition_ids",
    "validate_datetime",
    "validate_liquidity",
    "validate_reason",
    "validate_receipt_ref",
]

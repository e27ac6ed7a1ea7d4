"""
Validators for investment operation parameters.

Each validator returns a tuple of (is_valid, parsed_value, error_message).
Use require() to turn a failed validation into a ValidationError.
"""

from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar

from app.config.business_constants import COMMITMENT_PERIODS
from app.models.enums import LiquidityClass
from app.utils.exceptions import ValidationError


T = TypeVar("T")


def require(result: tuple[bool, T | None, str | None]) -> T:
    """
    Unwrap a validator result.

    Raises:
        ValidationError: If the value is invalid
    """
    is_valid, value, error = result
    if not is_valid:
        raise ValidationError(error or "Invalid value")
    return value  # type: ignore[return-value]


def validate_amount(value: Any, field: str = "amount") -> tuple[bool, Decimal | None, str | None]:
    """
    Validate a positive money amount.

    Examples:
        >>> validate_amount("5000")
        (True, Decimal('5000'), None)
        >>> validate_amount("-1")
        (False, None, 'amount must be greater than 0')
    """
    if value is None or isinstance(value, bool):
        return False, None, f"{field} is required"

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return False, None, f"{field} must be a number"

    if not amount.is_finite():
        return False, None, f"{field} must be a number"
    if amount <= 0:
        return False, None, f"{field} must be greater than 0"
    if amount.as_tuple().exponent < -8:
        return False, None, f"{field} has too many decimal places"

    return True, amount, None


def validate_commitment_period(value: Any) -> tuple[bool, int | None, str | None]:
    """
    Validate commitment period in months.

    Examples:
        >>> validate_commitment_period("12")
        (True, 12, None)
        >>> validate_commitment_period(7)
        (False, None, 'commitment_period must be one of 3, 6, 12, 24, 36')
    """
    allowed = ", ".join(str(p) for p in COMMITMENT_PERIODS)
    if value is None or isinstance(value, bool):
        return False, None, "commitment_period is required"

    try:
        period = int(str(value).strip())
    except ValueError:
        return False, None, f"commitment_period must be one of {allowed}"

    if period not in COMMITMENT_PERIODS:
        return False, None, f"commitment_period must be one of {allowed}"

    return True, period, None


def validate_liquidity(value: Any) -> tuple[bool, LiquidityClass | None, str | None]:
    """Validate liquidity class name or alias."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return False, None, "liquidity_class is required"

    try:
        return True, LiquidityClass.parse(value), None
    except ValidationError as e:
        return False, None, e.message


def validate_datetime(value: Any, field: str) -> tuple[bool, datetime | None, str | None]:
    """
    Validate a date or datetime (ISO string accepted).

    Naive values and plain dates are interpreted as UTC midnight.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return False, None, f"{field} is required"

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return False, None, f"{field} must be an ISO date"

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)

    return True, parsed, None


def validate_condition_ids(value: Any) -> tuple[bool, list[int] | None, str | None]:
    """Validate an optional list of positive condition ids."""
    if value is None:
        return True, [], None

    if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        return False, None, "condition_ids must be a list of integers"

    ids: list[int] = []
    for item in value:
        try:
            condition_id = int(item)
        except (TypeError, ValueError):
            return False, None, "condition_ids must be a list of integers"
        if condition_id <= 0:
            return False, None, "condition_ids must be positive"
        if condition_id not in ids:
            ids.append(condition_id)

    return True, ids, None


def validate_receipt_ref(value: Any) -> tuple[bool, str | None, str | None]:
    """Validate payment receipt reference."""
    if not isinstance(value, str) or not value.strip():
        return False, None, "receipt_ref is required"
    if len(value.strip()) > 512:
        return False, None, "receipt_ref is too long"
    return True, value.strip(), None


def validate_reason(value: Any) -> tuple[bool, str | None, str | None]:
    """Validate an optional free-text reason (empty means none)."""
    if value is None:
        return True, None, None
    if not isinstance(value, str):
        return False, None, "reason must be text"
    if len(value.strip()) > 500:
        return False, None, "reason is too long"
    return True, value.strip() or None, None

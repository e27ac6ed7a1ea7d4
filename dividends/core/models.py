"""Pydantic models for the dividend calculator."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AccrualBreakdown(BaseModel):
    """Accrued dividends of one investment at a given date.

    Carries the intermediate values so reports can show how the amount
    was reached.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
    )

    as_of: date = Field(..., description="Date the accrual was computed for")
    accrual_start_date: date = Field(..., description="Payment date plus the D+60 gate")
    gate_crossed: bool = Field(..., description="Whether as_of is on or after the gate")
    elapsed_periods: int = Field(..., ge=0, description="Whole 30-day periods since the gate")
    compound: bool = Field(..., description="Compound (non-monthly) or simple interest")
    accrued: Decimal = Field(..., ge=0, description="Dividends accrued to date")


class PeriodDividends(BaseModel):
    """Dividends attributed to reporting windows.

    Uses the same 30-day approximation as the accrual itself.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
    )

    monthly_commission: Decimal = Field(..., ge=0, description="amount * monthly rate")
    total_paid: Decimal = Field(..., ge=0, description="Commission times whole periods since the gate")
    current_month: Decimal = Field(..., ge=0, description="Dividends counted for the current month")
    current_year: Decimal = Field(..., ge=0, description="Dividends counted for the current year")

    @classmethod
    def empty(cls, monthly_commission: Decimal = Decimal("0")) -> "PeriodDividends":
        """Windows with nothing paid yet."""
        zero = Decimal("0")
        return cls(
            monthly_commission=monthly_commission,
            total_paid=zero,
            current_month=zero,
            current_year=zero,
        )

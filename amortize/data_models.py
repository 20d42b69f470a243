"""Data models for the amortization engine.

This module defines the dataclasses passed across the engine boundary: the
loan request supplied by the caller, one record per installment and the
computed result with its summary totals. Monetary values are ``Decimal``
amounts rounded to cents by the engine.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Mapping


@dataclass(frozen=True)
class LoanRequest:
    """Inputs for a single schedule calculation.

    Attributes
    ----------
    principal: Decimal
        The initial loan balance.
    annual_rate: Decimal
        Nominal annual interest rate in percent (``6.5`` means 6.5 %).
    term_months: int
        Number of scheduled monthly installments without extra payments.
    extra_payments: Mapping[int, Decimal]
        Sparse mapping from 1-based payment number to an additional principal
        amount paid with that installment. Missing numbers mean no extra.
    """

    principal: Any
    annual_rate: Any
    term_months: Any
    extra_payments: Mapping[Any, Any] = field(default_factory=dict)


@dataclass
class PaymentRecord:
    """One installment of the schedule.

    ``principal_payment`` includes any extra payment applied this period and
    ``payment_amount`` is always ``principal_payment + interest_payment``.
    """

    payment_number: int
    payment_amount: Decimal
    principal_payment: Decimal
    interest_payment: Decimal
    remaining_balance: Decimal


@dataclass
class ScheduleResult:
    """A computed schedule with its summary totals."""

    monthly_payment: Decimal
    schedule: List[PaymentRecord]
    total_interest: Decimal
    total_paid: Decimal
    # extra principal actually applied, clamped on the payoff record
    total_extra_paid: Decimal = Decimal("0.00")
    # payment numbers from the request that the schedule never reached
    unapplied_extra_payments: List[int] = field(default_factory=list)

    @property
    def payoff_months(self) -> int:
        return len(self.schedule)


@dataclass
class ScheduleComparison:
    """Savings produced by extra payments relative to the plain schedule."""

    baseline: ScheduleResult
    adjusted: ScheduleResult
    interest_saved: Decimal
    months_saved: int
    total_cost_saved: Decimal

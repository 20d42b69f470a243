"""Core calculation engine for the amortization calculator.

This module builds fixed-rate amortization schedules. A schedule is driven by
the nominal annuity payment computed once from the loan terms; optional extra
payments keyed by payment number are added to the principal portion of their
installment, which shortens the payoff term without changing the nominal
payment. Every monetary value is rounded to cents (ROUND_HALF_UP) when it is
produced, so the summary totals are exact sums of the per-period values.
"""

from __future__ import annotations

import logging
from decimal import Decimal, Overflow, localcontext
from typing import Dict, List, Mapping, Optional, Tuple

from .data_models import LoanRequest, PaymentRecord, ScheduleComparison, ScheduleResult
from .errors import InvalidInput
from .utils import ZERO, to_cents, to_decimal

logger = logging.getLogger(__name__)

MAX_ANNUAL_RATE = Decimal(100)
# Largest principal or extra payment accepted; keeps cents exact at prec 28.
MAX_AMOUNT = Decimal("1e15")
# Digits used for the annuity factor so tiny positive rates still register.
ANNUITY_PRECISION = 60


def _calculate_annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, or too
    small to change ``(1 + i)^n`` at the working precision, the payment
    simplifies to ``P / n``. When ``(1 + i)^n`` overflows the payment is the
    interest-only limit ``P * i``. The result is not rounded.
    """
    if rate_per_month == 0:
        return principal / Decimal(term)
    with localcontext() as ctx:
        ctx.prec = ANNUITY_PRECISION
        try:
            factor = (1 + rate_per_month) ** term
        except Overflow:
            return principal * rate_per_month
        if factor == 1:
            return principal / Decimal(term)
        return principal * (rate_per_month * factor) / (factor - 1)


def _validate_extra_payments(extra_payments: Optional[Mapping]) -> Dict[int, Decimal]:
    if extra_payments is None:
        return {}
    if not isinstance(extra_payments, Mapping):
        raise InvalidInput("extra payments must be a mapping of payment number to amount")
    for key in extra_payments:
        if isinstance(key, bool) or not isinstance(key, int) or key <= 0:
            raise InvalidInput(f"extra payment key must be a positive integer: {key!r}")
    extras: Dict[int, Decimal] = {}
    for key in sorted(extra_payments):
        amount = to_decimal(extra_payments[key], "extra payment")
        if amount < 0:
            raise InvalidInput("extra payment cannot be negative")
        if amount > MAX_AMOUNT:
            raise InvalidInput("extra payment too large")
        extras[key] = to_cents(amount)
    return extras


def validate_request(request: LoanRequest) -> Tuple[Decimal, Decimal, int, Dict[int, Decimal]]:
    """Check a request and return its normalised values.

    Returns ``(principal, annual_rate, term_months, extra_payments)`` with the
    principal and extra amounts rounded to cents. The first violated
    constraint raises ``InvalidInput``; constraints are checked in the order
    principal, rate, term, extra payments (ascending payment number).
    """
    principal = to_decimal(request.principal, "principal")
    if principal > MAX_AMOUNT:
        raise InvalidInput("principal too large")
    if principal <= 0:
        raise InvalidInput("principal must be positive")
    principal = to_cents(principal)
    if principal == 0:
        # rounds away to nothing, e.g. 0.004
        raise InvalidInput("principal must be positive")

    annual_rate = to_decimal(request.annual_rate, "rate")
    if annual_rate < 0 or annual_rate > MAX_ANNUAL_RATE:
        raise InvalidInput("rate out of range")

    term = request.term_months
    if isinstance(term, bool) or not isinstance(term, int):
        raise InvalidInput("term must be a whole number of months")
    if term <= 0:
        raise InvalidInput("term must be positive")

    extras = _validate_extra_payments(request.extra_payments)
    return principal, annual_rate, term, extras


def compute_schedule(request: LoanRequest) -> ScheduleResult:
    """Compute the amortization schedule and summary for a loan.

    Parameters
    ----------
    request: LoanRequest
        The loan terms and an optional sparse mapping of extra payments.

    Returns
    -------
    ScheduleResult
        One ``PaymentRecord`` per installment until the balance reaches zero,
        never more than ``term_months`` records, plus the nominal monthly
        payment and the interest / total paid sums.

    Raises
    ------
    InvalidInput
        If any input fails validation. Nothing is computed in that case.
    """
    principal, annual_rate, term, extras = validate_request(request)

    rate_per_month = annual_rate / Decimal(100) / Decimal(12)
    monthly_payment = to_cents(_calculate_annuity_payment(principal, rate_per_month, term))

    schedule: List[PaymentRecord] = []
    balance = principal
    total_interest = ZERO
    total_paid = ZERO
    total_extra = ZERO

    # The range is the hard upper bound: extras only ever shorten the schedule.
    for payment_number in range(1, term + 1):
        interest_payment = to_cents(balance * rate_per_month)
        extra = extras.get(payment_number, ZERO)
        scheduled_principal = monthly_payment - interest_payment
        principal_payment = scheduled_principal + extra

        if principal_payment >= balance:
            # Final payment: pay off exactly what is left.
            principal_payment = balance
        elif payment_number == term:
            # Last scheduled installment absorbs the residual left by rounding.
            principal_payment = balance

        # Principal the installment would have paid without any extra.
        base_principal = balance if payment_number == term else min(scheduled_principal, balance)
        total_extra += max(principal_payment - base_principal, ZERO)
        balance -= principal_payment
        payment_amount = interest_payment + principal_payment
        total_interest += interest_payment
        total_paid += payment_amount

        schedule.append(
            PaymentRecord(
                payment_number=payment_number,
                payment_amount=payment_amount,
                principal_payment=principal_payment,
                interest_payment=interest_payment,
                remaining_balance=balance,
            )
        )
        if balance == 0:
            break

    payoff = len(schedule)
    unapplied = [number for number in extras if number > payoff]
    logger.debug(
        "Computed schedule: term=%d payoff=%d extras=%d unapplied=%d",
        term,
        payoff,
        len(extras),
        len(unapplied),
    )

    return ScheduleResult(
        monthly_payment=monthly_payment,
        schedule=schedule,
        total_interest=total_interest,
        total_paid=total_paid,
        total_extra_paid=total_extra,
        unapplied_extra_payments=unapplied,
    )


def calculate_amortization(principal, annual_rate, term_months: int) -> ScheduleResult:
    """Compute the standard fixed-payment schedule."""
    return compute_schedule(LoanRequest(principal, annual_rate, term_months))


def calculate_with_extra_payments(
    principal, annual_rate, term_months: int, extra_payments: Mapping[int, object]
) -> ScheduleResult:
    """Compute a schedule with extra principal payments applied."""
    return compute_schedule(LoanRequest(principal, annual_rate, term_months, extra_payments))


def compare_with_baseline(request: LoanRequest) -> ScheduleComparison:
    """Compare a request's schedule against the same loan without extras.

    The baseline is computed from the same principal, rate and term with no
    extra payments. Savings are reported as baseline minus adjusted, so they
    are zero when the request carries no extra payments.
    """
    adjusted = compute_schedule(request)
    baseline = compute_schedule(
        LoanRequest(request.principal, request.annual_rate, request.term_months)
    )
    return ScheduleComparison(
        baseline=baseline,
        adjusted=adjusted,
        interest_saved=baseline.total_interest - adjusted.total_interest,
        months_saved=baseline.payoff_months - adjusted.payoff_months,
        total_cost_saved=baseline.total_paid - adjusted.total_paid,
    )

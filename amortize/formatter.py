"""Output helpers for the amortization calculator.

This module provides simple functions to render schedules and summaries in a
tabular text format for the terminal. We rely only on built-in printing and
string formatting.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .data_models import PaymentRecord, ScheduleComparison, ScheduleResult


def print_summary(result: ScheduleResult, comparison: Optional[ScheduleComparison] = None) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Monthly payment    : {result.monthly_payment:.2f}")
    print(f"Total interest     : {result.total_interest:.2f}")
    if result.total_extra_paid:
        print(f"Total extra paid   : {result.total_extra_paid:.2f}")
    print(f"Total paid         : {result.total_paid:.2f}")
    print(f"Payments made      : {result.payoff_months}")
    if result.unapplied_extra_payments:
        numbers = ", ".join(str(n) for n in result.unapplied_extra_payments)
        print(f"Unapplied extras   : {numbers}")
    if comparison is not None:
        print(f"Baseline interest  : {comparison.baseline.total_interest:.2f}")
        print(f"Interest saved     : {comparison.interest_saved:.2f}")
        print(f"Total cost saved   : {comparison.total_cost_saved:.2f}")
        if comparison.months_saved:
            print(f"Term reduction     : {comparison.months_saved} months")
    print("-" * 72)


def print_schedule(schedule: Iterable[PaymentRecord]) -> None:
    """Print the amortization schedule as a simple tab-separated table."""
    headers = ["Payment", "Amount", "Principal", "Interest", "Balance"]
    print("\t".join(headers))
    for record in schedule:
        row = [
            str(record.payment_number),
            f"{record.payment_amount:.2f}",
            f"{record.principal_payment:.2f}",
            f"{record.interest_payment:.2f}",
            f"{record.remaining_balance:.2f}",
        ]
        print("\t".join(row))

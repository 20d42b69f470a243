"""Command-line interface for the amortization calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries or
compare a schedule with extra payments against the plain one. Schedules can
be printed to the terminal or exported to CSV/JSON files.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Dict, Optional, Tuple

import click

from .data_models import LoanRequest
from .engine import compare_with_baseline, compute_schedule
from .errors import InvalidInput
from .exporter import to_csv, to_json
from .formatter import print_schedule, print_summary
from .utils import decimal_from_str, parse_payment_number

logger = logging.getLogger(__name__)

# Rows printed to the terminal; exports always contain the full schedule.
MAX_PRINTED_ROWS = 120
# Longest term accepted on the command line (100 years).
MAX_TERM_MONTHS = 1200


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000", "250,000.50") and shorthand with
    ``k``/``m`` suffixes (e.g. "500k" meaning 500_000).
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    try:
        return decimal_from_str(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_extra_payment_strings(values: Tuple[str, ...]) -> Dict[int, Decimal]:
    """Parse ``N:AMOUNT`` strings into an extra-payment mapping.

    Amounts given more than once for the same payment number are summed.
    """
    extras: Dict[int, Decimal] = {}
    for item in values:
        parts = item.split(":")
        if len(parts) != 2:
            raise click.BadParameter(f"Extra payment must be in N:AMOUNT format; got {item}")
        number_str, amount_str = parts
        try:
            number = parse_payment_number(number_str)
        except InvalidInput as exc:
            raise click.BadParameter(str(exc))
        extras[number] = extras.get(number, Decimal(0)) + parse_amount(amount_str)
    return extras


def build_request_from_options(
    principal: str,
    rate: float,
    term: int,
    extra: Tuple[str, ...] = (),
    monthly_extra: Optional[str] = None,
) -> LoanRequest:
    extras = parse_extra_payment_strings(extra) if extra else {}
    if monthly_extra:
        amount = parse_amount(monthly_extra)
        # Apply the same extra to every installment of the original term
        for number in range(1, term + 1):
            extras[number] = extras.get(number, Decimal(0)) + amount
    return LoanRequest(
        principal=parse_amount(principal),
        annual_rate=decimal_from_str(str(rate)),
        term_months=term,
        extra_payments=extras,
    )


def loan_options(func):
    """Attach the loan parameter options shared by every command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (e.g. 250000, 250k)"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
        click.option(
            "--term",
            "-t",
            "term",
            required=True,
            type=click.IntRange(1, MAX_TERM_MONTHS),
            help="Loan term in months",
        ),
        click.option("--extra", "extra", multiple=True, help="Extra payment in N:AMOUNT format, e.g. 12:5000"),
        click.option(
            "--monthly-extra",
            "monthly_extra",
            help="Apply the same extra payment to every installment. Example: --monthly-extra 200",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """A command-line loan amortization calculator with extra payments."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.csv or .json)")
def schedule(
    principal: str,
    rate: float,
    term: int,
    extra: Tuple[str, ...],
    monthly_extra: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    request = build_request_from_options(principal, rate, term, extra, monthly_extra)
    try:
        result = compute_schedule(request)
    except InvalidInput as exc:
        raise click.ClickException(str(exc))
    if output:
        path = Path(output)
        suffix = path.suffix.lower()
        if suffix == ".csv":
            content = to_csv(result.schedule)
        elif suffix == ".json":
            content = to_json(result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        with path.open("w", newline="", encoding="utf-8") as f:
            f.write(content)
        logger.info("Wrote %d rows to %s", result.payoff_months, path)
        click.echo(f"Schedule exported to {path}")
    else:
        print_summary(result)
        # Limit schedule length printed to avoid flooding the terminal
        if result.payoff_months > MAX_PRINTED_ROWS:
            click.echo(
                f"Schedule has {result.payoff_months} rows; showing first {MAX_PRINTED_ROWS} rows."
            )
            print_schedule(result.schedule[:MAX_PRINTED_ROWS])
        else:
            print_schedule(result.schedule)


@cli.command()
@loan_options
def summary(
    principal: str,
    rate: float,
    term: int,
    extra: Tuple[str, ...],
    monthly_extra: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    request = build_request_from_options(principal, rate, term, extra, monthly_extra)
    try:
        result = compute_schedule(request)
    except InvalidInput as exc:
        raise click.ClickException(str(exc))
    print_summary(result)


@cli.command()
@loan_options
def compare(
    principal: str,
    rate: float,
    term: int,
    extra: Tuple[str, ...],
    monthly_extra: Optional[str],
) -> None:
    """Compare a schedule with extra payments against the plain schedule."""
    request = build_request_from_options(principal, rate, term, extra, monthly_extra)
    try:
        comparison = compare_with_baseline(request)
    except InvalidInput as exc:
        raise click.ClickException(str(exc))
    print_summary(comparison.adjusted, comparison)


if __name__ == "__main__":
    cli()

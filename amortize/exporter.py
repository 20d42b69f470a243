"""Serialisation of computed schedules.

``to_csv`` produces the portable tabular export; the JSON helpers convert
schedules and results into plain dictionaries for the web layer and for
``.json`` file exports.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .data_models import PaymentRecord, ScheduleResult
from .errors import InvalidInput
from .utils import to_cents, to_decimal

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Payment Number",
    "Payment Amount",
    "Principal",
    "Interest",
    "Remaining Balance",
]


def _money(value: Decimal) -> str:
    return f"{to_cents(to_decimal(value, 'amount')):.2f}"


def to_csv(schedule: Sequence[PaymentRecord]) -> str:
    """Export a schedule to CSV text.

    The document starts with a fixed header row followed by one row per
    record in schedule order. Monetary fields carry exactly two fraction
    digits, fields are separated by ``,`` and every line (including the last)
    ends with a single ``\\n``.

    Raises
    ------
    InvalidInput
        If the schedule is empty.
    """
    if not schedule:
        raise InvalidInput("schedule is empty, nothing to export")
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in schedule:
        writer.writerow(
            [
                record.payment_number,
                _money(record.payment_amount),
                _money(record.principal_payment),
                _money(record.interest_payment),
                _money(record.remaining_balance),
            ]
        )
    logger.debug("Exported %d schedule rows to CSV", len(schedule))
    return buffer.getvalue()


def schedule_to_dicts(schedule: Iterable[PaymentRecord]) -> List[Dict[str, Any]]:
    """Convert schedule records into JSON-serialisable dictionaries."""
    serialized = []
    for record in schedule:
        serialized.append(
            {
                "payment_number": record.payment_number,
                "payment_amount": float(record.payment_amount),
                "principal_payment": float(record.principal_payment),
                "interest_payment": float(record.interest_payment),
                "remaining_balance": float(record.remaining_balance),
            }
        )
    return serialized


def result_to_dict(result: ScheduleResult) -> Dict[str, Any]:
    """Convert a ``ScheduleResult`` into a JSON-serialisable dictionary."""
    return {
        "monthly_payment": float(result.monthly_payment),
        "total_interest": float(result.total_interest),
        "total_paid": float(result.total_paid),
        "total_extra_paid": float(result.total_extra_paid),
        "payoff_months": result.payoff_months,
        "unapplied_extra_payments": list(result.unapplied_extra_payments),
        "schedule": schedule_to_dicts(result.schedule),
    }


def to_json(result: ScheduleResult) -> str:
    """Export a result (summary and schedule) to an indented JSON document."""
    if not result.schedule:
        raise InvalidInput("schedule is empty, nothing to export")
    return json.dumps(result_to_dict(result), indent=2)


_RECORD_FIELDS = (
    "payment_amount",
    "principal_payment",
    "interest_payment",
    "remaining_balance",
)


def records_from_dicts(rows: Any) -> List[PaymentRecord]:
    """Rebuild ``PaymentRecord`` objects from their serialised form.

    This is the inverse of ``schedule_to_dicts`` and is used when a caller
    sends back a previously computed schedule for export.
    """
    if not isinstance(rows, list):
        raise InvalidInput("schedule must be a list of payment records")
    records: List[PaymentRecord] = []
    for index, row in enumerate(rows, start=1):
        if not isinstance(row, Mapping):
            raise InvalidInput(f"schedule row {index} must be an object")
        missing = [name for name in ("payment_number",) + _RECORD_FIELDS if name not in row]
        if missing:
            raise InvalidInput(f"schedule row {index} is missing {', '.join(missing)}")
        number = row["payment_number"]
        if isinstance(number, bool) or not isinstance(number, int):
            raise InvalidInput(f"schedule row {index} has an invalid payment number")
        values = {name: to_decimal(row[name], name.replace("_", " ")) for name in _RECORD_FIELDS}
        records.append(PaymentRecord(payment_number=number, **values))
    return records

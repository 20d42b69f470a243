import logging
import os

from flask import Flask, Response, jsonify, request

from amortize.data_models import LoanRequest
from amortize.engine import compare_with_baseline, compute_schedule
from amortize.errors import InvalidInput
from amortize.exporter import records_from_dicts, result_to_dict, to_csv
from amortize.utils import parse_payment_number

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["PREVIEW_ROWS"] = int(os.environ.get("AMORTIZE_PREVIEW_ROWS", "120"))


def _json_payload() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidInput("request body must be a JSON object")
    return payload


def _payload_to_request(payload: dict, with_extras: bool) -> LoanRequest:
    missing = [name for name in ("principal", "annual_rate", "term_months") if name not in payload]
    if missing:
        raise InvalidInput(f"missing field(s): {', '.join(missing)}")
    extras = {}
    if with_extras:
        raw = payload.get("extra_payments")
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise InvalidInput("extra_payments must be an object keyed by payment number")
        # JSON object keys are always strings
        extras = {parse_payment_number(key): amount for key, amount in raw.items()}
    return LoanRequest(
        principal=payload["principal"],
        annual_rate=payload["annual_rate"],
        term_months=payload["term_months"],
        extra_payments=extras,
    )


def _result_for_view(result, preview: bool) -> dict:
    data = result_to_dict(result)
    if preview:
        limit = app.config["PREVIEW_ROWS"]
        rows = data["schedule"]
        data["schedule"] = rows[:limit]
        if len(rows) > limit:
            data["truncated"] = len(rows) - limit
    return data


def _wants_preview() -> bool:
    return request.args.get("preview") == "1"


@app.errorhandler(InvalidInput)
def handle_invalid_input(exc: InvalidInput):
    logger.info("Rejected request to %s: %s", request.path, exc.reason)
    return jsonify({"error": exc.reason}), 400


@app.post("/api/schedule")
def standard_schedule():
    loan = _payload_to_request(_json_payload(), with_extras=False)
    result = compute_schedule(loan)
    return jsonify(_result_for_view(result, _wants_preview()))


@app.post("/api/schedule/extra")
def schedule_with_extra_payments():
    loan = _payload_to_request(_json_payload(), with_extras=True)
    comparison = compare_with_baseline(loan)
    data = _result_for_view(comparison.adjusted, _wants_preview())
    data["comparison"] = {
        "baseline_total_interest": float(comparison.baseline.total_interest),
        "interest_saved": float(comparison.interest_saved),
        "total_cost_saved": float(comparison.total_cost_saved),
        "months_saved": comparison.months_saved,
    }
    return jsonify(data)


@app.post("/api/export")
def export_schedule():
    payload = _json_payload()
    records = records_from_dicts(payload.get("schedule"))
    csv_text = to_csv(records)
    return Response(
        csv_text,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=amortization_schedule.csv"},
    )


if __name__ == "__main__":
    print("Starting amortization web service...")
    app.run(host="0.0.0.0", port=8710, debug=os.environ.get("FLASK_DEBUG") == "1")

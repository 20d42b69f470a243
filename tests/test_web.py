import pytest

from amortize_web.app import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def test_standard_schedule(client) -> None:
    response = client.post(
        "/api/schedule", json={"principal": 250000, "annual_rate": 6.5, "term_months": 360}
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["monthly_payment"] == 1580.17
    assert data["payoff_months"] == 360
    assert len(data["schedule"]) == 360
    assert data["schedule"][-1]["remaining_balance"] == 0.0
    assert "truncated" not in data


def test_standard_schedule_ignores_extra_payments(client) -> None:
    response = client.post(
        "/api/schedule",
        json={"principal": 10000, "annual_rate": 5, "term_months": 12, "extra_payments": {"1": 9500}},
    )

    assert response.status_code == 200
    assert response.get_json()["payoff_months"] == 12


def test_preview_truncates_rows(client) -> None:
    response = client.post(
        "/api/schedule?preview=1", json={"principal": 250000, "annual_rate": 6.5, "term_months": 360}
    )

    data = response.get_json()
    assert len(data["schedule"]) == app.config["PREVIEW_ROWS"]
    assert data["truncated"] == 360 - app.config["PREVIEW_ROWS"]


def test_schedule_with_extra_payments(client) -> None:
    response = client.post(
        "/api/schedule/extra",
        json={
            "principal": 10000,
            "annual_rate": 5,
            "term_months": 12,
            "extra_payments": {"1": 9500, "8": 100},
        },
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["monthly_payment"] == 856.07
    assert data["payoff_months"] == 1
    assert data["schedule"][0]["principal_payment"] == 10000.0
    assert data["schedule"][0]["remaining_balance"] == 0.0
    assert data["unapplied_extra_payments"] == [8]
    assert data["comparison"]["months_saved"] == 11
    assert data["comparison"]["interest_saved"] > 0


@pytest.mark.parametrize(
    "payload, reason",
    [
        ({"principal": -100, "annual_rate": 5, "term_months": 12}, "principal must be positive"),
        ({"principal": 100, "annual_rate": 150, "term_months": 12}, "rate out of range"),
        ({"principal": 100, "annual_rate": 5, "term_months": 0}, "term must be positive"),
        (
            {"principal": 100, "annual_rate": 5, "term_months": 12, "extra_payments": {"2": -5}},
            "extra payment cannot be negative",
        ),
        ({"principal": 100}, "missing field(s): annual_rate, term_months"),
    ],
)
def test_invalid_requests_return_400(client, payload, reason) -> None:
    response = client.post("/api/schedule/extra", json=payload)

    assert response.status_code == 400
    assert response.get_json() == {"error": reason}


@pytest.mark.parametrize("key", ["0", "-1", "1.5", "first"])
def test_invalid_extra_payment_keys_return_400(client, key) -> None:
    response = client.post(
        "/api/schedule/extra",
        json={"principal": 100, "annual_rate": 5, "term_months": 12, "extra_payments": {key: 5}},
    )

    assert response.status_code == 400
    assert "extra payment key" in response.get_json()["error"]


def test_non_json_body_returns_400(client) -> None:
    response = client.post("/api/schedule", data="principal=100", content_type="text/plain")

    assert response.status_code == 400


def test_export_returns_csv(client) -> None:
    computed = client.post(
        "/api/schedule", json={"principal": 1000, "annual_rate": 0, "term_months": 2}
    ).get_json()

    response = client.post("/api/export", json={"schedule": computed["schedule"]})

    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert response.get_data(as_text=True) == (
        "Payment Number,Payment Amount,Principal,Interest,Remaining Balance\n"
        "1,500.00,500.00,0.00,500.00\n"
        "2,500.00,500.00,0.00,0.00\n"
    )


def test_export_of_empty_schedule_is_rejected(client) -> None:
    response = client.post("/api/export", json={"schedule": []})

    assert response.status_code == 400
    assert "empty" in response.get_json()["error"]


@pytest.mark.parametrize("extras", [[], "", 0, False, [1, 2]])
def test_non_object_extra_payments_return_400(client, extras) -> None:
    response = client.post(
        "/api/schedule/extra",
        json={"principal": 100, "annual_rate": 5, "term_months": 12, "extra_payments": extras},
    )

    assert response.status_code == 400
    assert response.get_json() == {
        "error": "extra_payments must be an object keyed by payment number"
    }


def test_null_extra_payments_mean_none(client) -> None:
    response = client.post(
        "/api/schedule/extra",
        json={"principal": 12000, "annual_rate": 0, "term_months": 12, "extra_payments": None},
    )

    assert response.status_code == 200
    assert response.get_json()["payoff_months"] == 12


def test_tiny_positive_rate_is_computed(client) -> None:
    response = client.post(
        "/api/schedule", json={"principal": 1000, "annual_rate": 1e-25, "term_months": 12}
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["monthly_payment"] == 83.33
    assert data["total_interest"] == 0.0


def test_huge_principal_returns_400(client) -> None:
    response = client.post(
        "/api/schedule", json={"principal": 1e26, "annual_rate": 5, "term_months": 12}
    )

    assert response.status_code == 400
    assert response.get_json() == {"error": "principal too large"}


def test_export_of_huge_amount_returns_400(client) -> None:
    row = {
        "payment_number": 1,
        "payment_amount": 1e30,
        "principal_payment": 1e30,
        "interest_payment": 0.0,
        "remaining_balance": 0.0,
    }

    response = client.post("/api/export", json={"schedule": [row]})

    assert response.status_code == 400
    assert "amount too large" in response.get_json()["error"]

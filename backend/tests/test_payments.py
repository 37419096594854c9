from __future__ import annotations

from decimal import Decimal

import pytest

from backend.app import models


@pytest.fixture
def bill(client, seed_basic_data) -> dict:
    response = client.post(
        "/bills/generate",
        json={
            "room_id": seed_basic_data["room"].id,
            "period": "2026-01",
            "meter_start": 100,
            "meter_end": 180,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def _pay(client, bill_id: str, amount: str, **extra):
    return client.post("/payments", json={"bill_id": bill_id, "amount": amount, **extra})


def test_partial_payments_accumulate_until_paid(client, bill):
    first = _pay(client, bill["id"], "1000000", method="transfer", paid_on="2026-02-03")
    assert first.status_code == 201, first.text
    assert first.json()["method"] == "transfer"
    assert first.json()["paid_on"] == "2026-02-03"

    partial = client.get(f"/bills/{bill['id']}").json()
    assert Decimal(partial["paid_amount"]) == Decimal("1000000")
    assert Decimal(partial["balance_due"]) == Decimal("2195000")
    assert partial["is_paid"] is False

    second = _pay(client, bill["id"], "2195000")
    assert second.status_code == 201, second.text

    settled = client.get(f"/bills/{bill['id']}").json()
    assert Decimal(settled["paid_amount"]) == Decimal("3195000")
    assert settled["is_paid"] is True
    assert settled["paid_at"] is not None
    assert len(settled["payments"]) == 2


def test_payment_above_remaining_balance_is_rejected(client, db_session, bill):
    response = _pay(client, bill["id"], "5000000")

    assert response.status_code == 400
    assert response.json()["detail"] == "Payment amount exceeds remaining balance of 3195000.00"

    assert db_session.query(models.Payment).count() == 0
    rejected = (
        db_session.query(models.OperationEvent)
        .filter(models.OperationEvent.operation == "payments.record")
        .one()
    )
    assert rejected.outcome == "rejected"
    assert rejected.reason.startswith("Payment amount exceeds remaining balance")


def test_payment_on_paid_bill_is_rejected(client, bill):
    assert client.patch(f"/bills/{bill['id']}/pay").status_code == 200

    response = _pay(client, bill["id"], "1000")

    assert response.status_code == 400
    assert response.json()["detail"] == "Bill is already paid"


def test_payment_requires_positive_amount(client, bill):
    response = _pay(client, bill["id"], "0")

    assert response.status_code == 422


def test_payment_for_unknown_bill_returns_404(client, seed_basic_data):
    response = _pay(client, "missing-bill", "1000")

    assert response.status_code == 404


def test_deleting_payment_rederives_bill_state(client, bill):
    first = _pay(client, bill["id"], "3000000").json()
    _pay(client, bill["id"], "195000")
    assert client.get(f"/bills/{bill['id']}").json()["is_paid"] is True

    response = client.delete(f"/payments/{first['id']}")
    assert response.status_code == 204

    reopened = client.get(f"/bills/{bill['id']}").json()
    assert Decimal(reopened["paid_amount"]) == Decimal("195000")
    assert reopened["is_paid"] is False
    assert reopened["paid_at"] is None


def test_list_payments_filters_by_bill_and_method(client, bill, seed_basic_data):
    _pay(client, bill["id"], "100000", method="cash", paid_on="2026-02-01")
    _pay(client, bill["id"], "200000", method="e_wallet", paid_on="2026-02-05")

    by_bill = client.get("/payments", params={"bill_id": bill["id"]})
    assert by_bill.status_code == 200
    assert by_bill.json()["total"] == 2
    assert by_bill.json()["items"][0]["paid_on"] == "2026-02-05"

    by_method = client.get("/payments", params={"method": "e_wallet"})
    assert [Decimal(item["amount"]) for item in by_method.json()["items"]] == [Decimal("200000")]

    by_room = client.get(
        "/payments",
        params={"room_id": seed_basic_data["room"].id, "start_date": "2026-02-02"},
    )
    assert by_room.json()["total"] == 1


def test_list_payments_rejects_inverted_date_range(client):
    response = client.get(
        "/payments", params={"start_date": "2026-02-10", "end_date": "2026-02-01"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "start_date cannot be after end_date"


def test_get_payment_returns_404_for_unknown_id(client):
    assert client.get("/payments/missing").status_code == 404

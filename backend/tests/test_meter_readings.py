from __future__ import annotations

import pytest


@pytest.fixture
def reading(client, seed_basic_data) -> dict:
    response = client.post(
        "/meter-readings",
        json={
            "room_id": seed_basic_data["room"].id,
            "period": "2026-01",
            "meter_start": 1200,
            "meter_end": 1290,
            "recorded_by": "caretaker",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_create_reading_reports_consumption(reading):
    assert reading["period"] == "2026-01"
    assert reading["consumption"] == 90
    assert reading["recorded_by"] == "caretaker"


def test_duplicate_reading_for_period_is_rejected(client, reading, seed_basic_data):
    response = client.post(
        "/meter-readings",
        json={
            "room_id": seed_basic_data["room"].id,
            "period": "2026-01",
            "meter_start": 1290,
            "meter_end": 1300,
        },
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "A meter reading for 2026-01 already exists for this room"


@pytest.mark.parametrize(
    "payload",
    [
        {"period": "2026-13", "meter_start": 0, "meter_end": 1},
        {"period": "2026-01", "meter_start": 10, "meter_end": 5},
        {"period": "2026-01", "meter_start": -1, "meter_end": 5},
    ],
)
def test_invalid_readings_are_rejected(client, seed_basic_data, payload):
    response = client.post(
        "/meter-readings", json={"room_id": seed_basic_data["room"].id, **payload}
    )

    assert response.status_code == 422


def test_reading_for_unknown_room_returns_404(client):
    response = client.post(
        "/meter-readings",
        json={"room_id": "missing", "period": "2026-01", "meter_start": 0, "meter_end": 1},
    )

    assert response.status_code == 404


def test_update_reading_checks_range_against_stored_values(client, reading):
    rejected = client.put(f"/meter-readings/{reading['id']}", json={"meter_end": 1000})
    assert rejected.status_code == 400

    accepted = client.put(f"/meter-readings/{reading['id']}", json={"meter_end": 1310})
    assert accepted.status_code == 200, accepted.text
    assert accepted.json()["consumption"] == 110


def test_reading_used_by_paid_bill_is_locked(client, reading, seed_basic_data):
    bill = client.post(
        "/bills/generate", json={"room_id": seed_basic_data["room"].id, "period": "2026-01"}
    )
    assert bill.status_code == 201, bill.text
    assert client.patch(f"/bills/{bill.json()['id']}/pay").status_code == 200

    update = client.put(f"/meter-readings/{reading['id']}", json={"meter_end": 1400})
    assert update.status_code == 400
    assert update.json()["detail"] == "Cannot update a meter reading used by a paid bill"

    delete = client.delete(f"/meter-readings/{reading['id']}")
    assert delete.status_code == 400

    stored = client.get(f"/meter-readings/{reading['id']}").json()
    assert stored["meter_end"] == 1290


def test_list_readings_filters_by_room_and_period(client, reading, seed_basic_data):
    client.post(
        "/meter-readings",
        json={
            "room_id": seed_basic_data["room"].id,
            "period": "2026-02",
            "meter_start": 1290,
            "meter_end": 1350,
        },
    )

    all_readings = client.get("/meter-readings", params={"room_id": seed_basic_data["room"].id})
    assert [item["period"] for item in all_readings.json()["items"]] == ["2026-02", "2026-01"]

    january = client.get("/meter-readings", params={"period": "2026-01"})
    assert january.json()["total"] == 1


def test_delete_unused_reading(client, reading):
    assert client.delete(f"/meter-readings/{reading['id']}").status_code == 204
    assert client.get(f"/meter-readings/{reading['id']}").status_code == 404


def _put_reading(client, room_id: str, **payload):
    body = {"room_id": room_id, "period": "2026-01", "meter_start": 1200, "meter_end": 1290, **payload}
    return client.put("/meter-readings", json=body)


def test_put_reading_creates_then_overwrites(client, seed_basic_data):
    room_id = seed_basic_data["room"].id

    created = _put_reading(client, room_id)
    assert created.status_code == 201, created.text

    overwritten = _put_reading(client, room_id, meter_end=1350, recorded_by="owner")
    assert overwritten.status_code == 200, overwritten.text
    assert overwritten.json()["id"] == created.json()["id"]
    assert overwritten.json()["consumption"] == 150
    assert overwritten.json()["recorded_by"] == "owner"

    listing = client.get("/meter-readings", params={"room_id": room_id})
    assert listing.json()["total"] == 1


def test_put_reading_keeps_paid_bill_guard(client, reading, seed_basic_data):
    room_id = seed_basic_data["room"].id
    bill = client.post("/bills/generate", json={"room_id": room_id, "period": "2026-01"})
    assert client.patch(f"/bills/{bill.json()['id']}/pay").status_code == 200

    response = _put_reading(client, room_id, meter_end=1400)

    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot update a meter reading used by a paid bill"
    assert client.get(f"/meter-readings/{reading['id']}").json()["meter_end"] == 1290


def test_put_reading_for_unknown_room_returns_404(client):
    assert _put_reading(client, "missing").status_code == 404

from __future__ import annotations

from datetime import date
from decimal import Decimal

from backend.app import models
from backend.app.schemas import ReminderStatus
from backend.app.services.reminders import classify_due_date, due_date_for


def _occupied_room(db_session, seed_basic_data, name: str, move_in_date):
    tenant = models.Tenant(
        name=f"Tenant {name}", contact="0811000000", id_card_number=f"34040100{name}"
    )
    db_session.add(tenant)
    db_session.flush()
    room = models.Room(
        property_id=seed_basic_data["property"].id,
        tenant_id=tenant.id,
        name=name,
        price=Decimal("2000000"),
        status=models.RoomStatus.OCCUPIED,
        move_in_date=move_in_date,
    )
    db_session.add(room)
    db_session.commit()
    return room


def _bill(client, room_id: str, period: str = "2026-02") -> dict:
    response = client.post(
        "/bills/generate",
        json={"room_id": room_id, "period": period, "meter_start": 0, "meter_end": 10},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_due_date_is_clamped_to_month_length():
    assert due_date_for(date(2025, 1, 31), date(2026, 2, 10)) == date(2026, 2, 28)
    assert due_date_for(None, date(2026, 2, 10)) is None


def test_classify_due_date_buckets():
    today = date(2026, 2, 8)

    assert classify_due_date(date(2026, 2, 5), today) == (ReminderStatus.OVERDUE, -3)
    assert classify_due_date(date(2026, 2, 8), today) == (ReminderStatus.DUE_SOON, 0)
    assert classify_due_date(date(2026, 2, 11), today) == (ReminderStatus.DUE_SOON, 3)
    assert classify_due_date(date(2026, 2, 20), today) == (ReminderStatus.UNPAID, 12)
    assert classify_due_date(None, today) == (ReminderStatus.UNPAID, None)


def test_due_soon_lists_rooms_with_unpaid_bills_by_urgency(client, db_session, seed_basic_data):
    overdue_room = _occupied_room(db_session, seed_basic_data, "B1", date(2025, 9, 5))
    undated_room = _occupied_room(db_session, seed_basic_data, "B2", None)
    settled_room = _occupied_room(db_session, seed_basic_data, "B3", date(2025, 9, 9))

    _bill(client, seed_basic_data["room"].id)
    _bill(client, overdue_room.id)
    _bill(client, undated_room.id)
    settled = _bill(client, settled_room.id)
    assert client.patch(f"/bills/{settled['id']}/pay").status_code == 200

    response = client.get("/reminders/due-soon", params={"reference_date": "2026-02-08"})
    assert response.status_code == 200, response.text
    payload = response.json()

    assert [item["room_name"] for item in payload["items"]] == ["B1", "A1", "B2"]
    assert [item["status"] for item in payload["items"]] == ["overdue", "due_soon", "unpaid"]
    assert (payload["overdue"], payload["due_soon"], payload["unpaid"]) == (1, 1, 1)

    due_soon = payload["items"][1]
    assert due_soon["due_date"] == "2026-02-10"
    assert due_soon["days_until_due"] == 2
    assert due_soon["tenant_name"] == seed_basic_data["tenant"].name
    assert due_soon["unpaid_bills"] == 1
    assert Decimal(due_soon["total_unpaid"]) == Decimal("3090000")


def test_due_soon_window_is_configurable(client, seed_basic_data):
    _bill(client, seed_basic_data["room"].id)

    response = client.get(
        "/reminders/due-soon", params={"reference_date": "2026-02-08", "days_ahead": 1}
    )

    assert response.json()["items"][0]["status"] == "unpaid"


def test_due_soon_total_subtracts_partial_payments(client, seed_basic_data):
    bill = _bill(client, seed_basic_data["room"].id)
    client.post("/payments", json={"bill_id": bill["id"], "amount": "1090000"})

    response = client.get("/reminders/due-soon", params={"reference_date": "2026-02-08"})

    assert Decimal(response.json()["items"][0]["total_unpaid"]) == Decimal("2000000")


def test_due_soon_is_empty_without_unpaid_bills(client, seed_basic_data):
    response = client.get("/reminders/due-soon", params={"reference_date": "2026-02-08"})

    assert response.status_code == 200
    assert response.json()["items"] == []


def test_unpaid_bills_are_listed_most_urgent_first(client, db_session, seed_basic_data):
    late_room = _occupied_room(db_session, seed_basic_data, "C1", date(2025, 9, 5))
    undated_room = _occupied_room(db_session, seed_basic_data, "C2", None)
    settled_room = _occupied_room(db_session, seed_basic_data, "C3", date(2025, 9, 9))

    _bill(client, seed_basic_data["room"].id)
    _bill(client, seed_basic_data["room"].id, period="2026-03")
    _bill(client, late_room.id)
    _bill(client, undated_room.id)
    settled = _bill(client, settled_room.id)
    assert client.patch(f"/bills/{settled['id']}/pay").status_code == 200

    response = client.get("/reminders", params={"reference_date": "2026-02-08"})
    assert response.status_code == 200, response.text
    payload = response.json()

    assert [(item["room_name"], item["due_date"]) for item in payload["items"]] == [
        ("C2", "2026-02-01"),
        ("C1", "2026-02-05"),
        ("A1", "2026-02-10"),
        ("A1", "2026-03-10"),
    ]
    assert [item["urgency"] for item in payload["items"]] == [
        "overdue",
        "overdue",
        "due_soon",
        "upcoming",
    ]
    assert (payload["total"], payload["overdue"], payload["due_soon"], payload["upcoming"]) == (
        4,
        2,
        1,
        1,
    )
    assert payload["items"][1]["days_until_due"] == -3
    assert settled["id"] not in {item["bill_id"] for item in payload["items"]}


def test_unpaid_bill_outstanding_reflects_partial_payments(client, seed_basic_data):
    bill = _bill(client, seed_basic_data["room"].id)
    client.post("/payments", json={"bill_id": bill["id"], "amount": "1090000"})

    response = client.get("/reminders", params={"reference_date": "2026-02-08"})
    item = response.json()["items"][0]

    assert item["billing_code"] == bill["billing_code"]
    assert Decimal(item["paid_amount"]) == Decimal("1090000")
    assert Decimal(item["outstanding"]) == Decimal("2000000")
    assert item["tenant_name"] == seed_basic_data["tenant"].name
    assert item["property_name"] == seed_basic_data["property"].name


def test_unpaid_bills_window_and_validation(client, seed_basic_data):
    _bill(client, seed_basic_data["room"].id)

    narrow = client.get("/reminders", params={"reference_date": "2026-02-08", "days_ahead": 1})
    assert narrow.json()["items"][0]["urgency"] == "upcoming"
    assert narrow.json()["days_ahead"] == 1

    assert client.get("/reminders", params={"days_ahead": -1}).status_code == 422

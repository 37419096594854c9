from __future__ import annotations

from decimal import Decimal


def _create(client, **payload):
    body = {
        "expense_date": "2026-01-12",
        "category": "Maintenance",
        "description": "Fix water pump",
        "amount": "350000",
        **payload,
    }
    return client.post("/expenses", json=body)


def test_create_expense_for_property(client, seed_basic_data):
    response = _create(client, property_id=seed_basic_data["property"].id, created_by="owner")

    assert response.status_code == 201, response.text
    expense = response.json()
    assert expense["property_id"] == seed_basic_data["property"].id
    assert Decimal(expense["amount"]) == Decimal("350000")
    assert expense["created_by"] == "owner"


def test_create_expense_for_unknown_property_returns_404(client):
    response = _create(client, property_id="missing")

    assert response.status_code == 404


def test_list_expenses_filters(client, seed_basic_data):
    property_id = seed_basic_data["property"].id
    _create(client, property_id=property_id)
    _create(client, category="Electricity", amount="1200000", expense_date="2026-02-01")
    _create(client, category="electricity", amount="900000", expense_date="2026-03-01")

    by_category = client.get("/expenses", params={"category": "ELECTRICITY"})
    assert by_category.json()["total"] == 2

    by_property = client.get("/expenses", params={"property_id": property_id})
    assert by_property.json()["total"] == 1

    by_range = client.get(
        "/expenses",
        params={"start_date": "2026-02-01", "min_amount": "1000000"},
    )
    assert [Decimal(item["amount"]) for item in by_range.json()["items"]] == [Decimal("1200000")]


def test_list_expenses_rejects_inverted_ranges(client):
    dates = client.get("/expenses", params={"start_date": "2026-02-01", "end_date": "2026-01-01"})
    amounts = client.get("/expenses", params={"min_amount": "10", "max_amount": "1"})

    assert dates.status_code == 400
    assert amounts.status_code == 400


def test_delete_expense(client):
    expense_id = _create(client).json()["id"]

    assert client.delete(f"/expenses/{expense_id}").status_code == 204
    assert client.delete(f"/expenses/{expense_id}").status_code == 404


def test_get_expense_and_blank_category(client):
    created = _create(client, category="  Cleaning ").json()

    fetched = client.get(f"/expenses/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["category"] == "Cleaning"

    assert _create(client, category="   ").status_code == 422
    assert client.get("/expenses/missing").status_code == 404


def test_patch_expense_changes_only_given_fields(client, seed_basic_data):
    expense = _create(client).json()

    response = client.patch(
        f"/expenses/{expense['id']}",
        json={"amount": "400000", "property_id": seed_basic_data["property"].id},
    )

    assert response.status_code == 200, response.text
    updated = response.json()
    assert Decimal(updated["amount"]) == Decimal("400000")
    assert updated["property_id"] == seed_basic_data["property"].id
    assert updated["category"] == "Maintenance"
    assert updated["description"] == "Fix water pump"


def test_patch_expense_can_detach_property(client, seed_basic_data):
    expense = _create(client, property_id=seed_basic_data["property"].id).json()

    response = client.patch(f"/expenses/{expense['id']}", json={"property_id": None})

    assert response.status_code == 200
    assert response.json()["property_id"] is None


def test_patch_expense_validation(client):
    expense_id = _create(client).json()["id"]

    assert client.patch(f"/expenses/{expense_id}", json={"property_id": "missing"}).status_code == 404
    assert client.patch(f"/expenses/{expense_id}", json={"amount": "-1"}).status_code == 422
    assert client.patch(f"/expenses/{expense_id}", json={"category": None}).status_code == 422
    assert client.patch("/expenses/missing", json={"amount": "1"}).status_code == 404

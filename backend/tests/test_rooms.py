from __future__ import annotations

from decimal import Decimal

from backend.app import models


def test_create_property_with_settings(client):
    created = client.post(
        "/properties",
        json={"name": "Kost Mawar", "address": "Jl. Mawar 12", "description": "Putri"},
    )
    assert created.status_code == 201, created.text
    property_id = created.json()["id"]
    assert created.json()["settings"] is None

    missing = client.get(f"/properties/{property_id}/settings")
    assert missing.status_code == 404

    saved = client.put(
        f"/properties/{property_id}/settings",
        json={"cost_per_kwh": "1444.70", "water_fee": "40000", "trash_fee": "15000"},
    )
    assert saved.status_code == 200, saved.text
    assert Decimal(saved.json()["cost_per_kwh"]) == Decimal("1444.70")

    fetched = client.get(f"/properties/{property_id}").json()
    assert Decimal(fetched["settings"]["water_fee"]) == Decimal("40000")


def test_property_settings_reject_zero_kwh_rate(client, seed_basic_data):
    response = client.put(
        f"/properties/{seed_basic_data['property'].id}/settings",
        json={"cost_per_kwh": "0", "water_fee": "0", "trash_fee": "0"},
    )

    assert response.status_code == 422


def test_search_properties(client, seed_basic_data):
    response = client.get("/properties", params={"search": "melati"})

    assert response.status_code == 200
    assert [item["name"] for item in response.json()["items"]] == ["Kost Melati"]


def test_property_with_rooms_cannot_be_deleted(client, seed_basic_data):
    response = client.delete(f"/properties/{seed_basic_data['property'].id}")

    assert response.status_code == 409


def test_global_settings_default_values(client):
    response = client.get("/settings")

    assert response.status_code == 200
    assert Decimal(response.json()["cost_per_kwh"]) == Decimal("1500")
    assert Decimal(response.json()["water_fee"]) == Decimal("0")


def test_tenant_crud_and_filters(client):
    created = client.post(
        "/tenants",
        json={"name": "Siti Aminah", "contact": "085700001111", "id_card_number": "3174015505950002"},
    )
    assert created.status_code == 201, created.text
    tenant_id = created.json()["id"]
    assert created.json()["status"] == "active"

    updated = client.put(f"/tenants/{tenant_id}", json={"status": "inactive"})
    assert updated.status_code == 200
    assert updated.json()["status"] == "inactive"

    inactive = client.get("/tenants", params={"status": "inactive"})
    assert [item["id"] for item in inactive.json()["items"]] == [tenant_id]

    by_search = client.get("/tenants", params={"search": "0857"})
    assert by_search.json()["total"] == 1

    assert client.delete(f"/tenants/{tenant_id}").status_code == 204
    assert client.get(f"/tenants/{tenant_id}").status_code == 404


def test_assigned_tenant_cannot_be_deleted(client, seed_basic_data):
    response = client.delete(f"/tenants/{seed_basic_data['tenant'].id}")

    assert response.status_code == 409


def test_create_room_with_tenant_marks_it_occupied(client, db_session, seed_basic_data):
    tenant = models.Tenant(name="Dewi", contact="081300002222", id_card_number="3404016101000003")
    db_session.add(tenant)
    db_session.commit()

    response = client.post(
        "/rooms",
        json={
            "property_id": seed_basic_data["property"].id,
            "name": "C1",
            "price": "1750000",
            "tenant_id": tenant.id,
            "occupant_count": 2,
            "move_in_date": "2026-03-05",
        },
    )

    assert response.status_code == 201, response.text
    room = response.json()
    assert room["status"] == "occupied"
    assert room["tenant"]["name"] == "Dewi"
    assert room["occupant_count"] == 2
    assert room["use_trash_service"] is True


def test_room_name_is_unique_per_property(client, seed_basic_data):
    response = client.post(
        "/rooms",
        json={"property_id": seed_basic_data["property"].id, "name": "A1", "price": "1000000"},
    )

    assert response.status_code == 409


def test_room_validation(client, seed_basic_data):
    too_many = client.post(
        "/rooms",
        json={
            "property_id": seed_basic_data["property"].id,
            "name": "Z9",
            "price": "1000000",
            "occupant_count": 11,
        },
    )
    assert too_many.status_code == 422

    unknown_property = client.post(
        "/rooms", json={"property_id": "missing", "name": "Z9", "price": "1000000"}
    )
    assert unknown_property.status_code == 404


def test_list_rooms_by_status(client, seed_basic_data):
    response = client.get("/rooms", params={"status": "available"})

    assert response.status_code == 200
    assert [item["name"] for item in response.json()["items"]] == ["A2"]


def test_update_room_price_and_trash_flag(client, seed_basic_data):
    room_id = seed_basic_data["room"].id
    response = client.put(
        f"/rooms/{room_id}", json={"price": "3250000", "use_trash_service": False}
    )

    assert response.status_code == 200, response.text
    assert Decimal(response.json()["price"]) == Decimal("3250000")
    assert response.json()["use_trash_service"] is False


def test_room_with_bills_cannot_be_deleted(client, seed_basic_data):
    room_id = seed_basic_data["room"].id
    generated = client.post(
        "/bills/generate",
        json={"room_id": room_id, "period": "2026-01", "meter_start": 0, "meter_end": 1},
    )
    assert generated.status_code == 201, generated.text

    assert client.delete(f"/rooms/{room_id}").status_code == 409
    assert client.delete(f"/rooms/{seed_basic_data['vacant_room'].id}").status_code == 204


def test_removing_tenant_frees_an_occupied_room(client, seed_basic_data):
    room_id = seed_basic_data["room"].id

    response = client.put(f"/rooms/{room_id}", json={"tenant_id": None})

    assert response.status_code == 200, response.text
    assert response.json()["tenant_id"] is None
    assert response.json()["status"] == "available"


def test_removing_tenant_keeps_maintenance_status(client, db_session, seed_basic_data):
    room = seed_basic_data["room"]
    room.status = models.RoomStatus.MAINTENANCE
    db_session.commit()

    response = client.put(f"/rooms/{room.id}", json={"tenant_id": None})

    assert response.status_code == 200, response.text
    assert response.json()["status"] == "maintenance"

from datetime import date, timedelta


def _rent(client, seeded):
    today = date.today()
    return client.post("/api/rentals/", json={
        "unit_id": seeded["unit"]["id"],
        "customer_id": seeded["customer"]["id"],
        "start_date": today.isoformat(),
        "end_date": (today + timedelta(days=30)).isoformat(),
    }).json()


def test_create_unit(client, seeded):
    unit = seeded["unit"]
    assert unit["status"] == "available"
    assert unit["building_name"] == "North Depot"


def test_duplicate_unit_number_in_building(client, seeded):
    response = client.post("/api/units/", json={
        "building_id": seeded["building"]["id"],
        "number": "A-101",
        "size": "5x5",
        "price_per_month": 40.0,
    })
    assert response.status_code == 409


def test_unit_in_unknown_building(client):
    response = client.post("/api/units/", json={
        "building_id": "00000000-0000-0000-0000-000000000000",
        "number": "Z-1",
        "size": "5x5",
        "price_per_month": 40.0,
    })
    assert response.status_code == 404


def test_invalid_size_rejected(client, seeded):
    response = client.post("/api/units/", json={
        "building_id": seeded["building"]["id"],
        "number": "Z-1",
        "size": "7x7",
        "price_per_month": 40.0,
    })
    assert response.status_code == 422


def test_list_units_filters(client, seeded):
    client.post("/api/units/", json={
        "building_id": seeded["building"]["id"],
        "number": "B-202",
        "size": "5x5",
        "price_per_month": 40.0,
        "status": "maintenance",
    })

    assert [u["number"] for u in client.get("/api/units/").json()] == ["A-101", "B-202"]
    assert [u["number"] for u in client.get("/api/units/", params={"status": "maintenance"}).json()] == ["B-202"]
    assert [u["number"] for u in client.get("/api/units/", params={"size": "10x10"}).json()] == ["A-101"]
    assert [u["number"] for u in client.get("/api/units/", params={"q": "b-2"}).json()] == ["B-202"]


def test_leaving_rented_completes_rental(client, seeded):
    rental = _rent(client, seeded)

    response = client.patch(f"/api/units/{seeded['unit']['id']}/status", json={"status": "maintenance"})

    assert response.status_code == 200
    body = response.json()
    assert body["previous_status"] == "rented"
    assert body["status"] == "maintenance"
    assert body["completed_rentals"] == [rental["id"]]

    stored = client.get(f"/api/rentals/{rental['id']}").json()
    assert stored["status"] == "completed"
    assert stored["end_date"] == date.today().isoformat()


def test_invalid_status_value(client, seeded):
    response = client.patch(f"/api/units/{seeded['unit']['id']}/status", json={"status": "demolished"})
    assert response.status_code == 422


def test_delete_unit_with_active_rental(client, seeded):
    _rent(client, seeded)

    response = client.delete(f"/api/units/{seeded['unit']['id']}")

    assert response.status_code == 409
    assert response.json()["detail"] == "This unit has active rentals. Please end the rentals first."


def test_delete_unit(client, seeded):
    assert client.delete(f"/api/units/{seeded['unit']['id']}").status_code == 204
    assert client.get(f"/api/units/{seeded['unit']['id']}").status_code == 404


def test_building_occupancy_and_delete_guard(client, seeded):
    _rent(client, seeded)

    buildings = client.get("/api/buildings/").json()
    assert buildings[0]["total_units"] == 1
    assert buildings[0]["occupancy_rate"] == 100

    assert client.delete(f"/api/buildings/{seeded['building']['id']}").status_code == 409


def test_customer_active_rentals_and_delete_guard(client, seeded):
    _rent(client, seeded)

    customers = client.get("/api/customers/").json()
    assert customers[0]["active_rentals"] == 1

    assert client.delete(f"/api/customers/{seeded['customer']['id']}").status_code == 409


def test_delete_unit_with_completed_rental(client, seeded):
    rental = _rent(client, seeded)
    client.post(f"/api/rentals/{rental['id']}/end")

    response = client.delete(f"/api/units/{seeded['unit']['id']}")

    assert response.status_code == 409
    assert response.json()["detail"] == "This unit has rentals on record and cannot be deleted."
    listed = client.get("/api/rentals/").json()["rentals"]
    assert [r["unit_number"] for r in listed] == ["A-101"]

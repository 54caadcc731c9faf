from datetime import date, timedelta


def test_dashboard_overview(client, seeded):
    today = date.today()
    rental = client.post("/api/rentals/", json={
        "unit_id": seeded["unit"]["id"],
        "customer_id": seeded["customer"]["id"],
        "start_date": today.isoformat(),
        "end_date": (today + timedelta(days=30)).isoformat(),
    }).json()
    client.post("/api/payments/", json={"rental_id": rental["id"], "amount": 120.0, "method": "cash"})
    client.post("/api/payments/", json={
        "rental_id": rental["id"],
        "amount": 30.0,
        "method": "bank_transfer",
        "date": (today - timedelta(days=3)).isoformat(),
        "is_late": True,
    })

    response = client.get("/api/dashboard/")

    assert response.status_code == 200
    data = response.json()
    assert data["stats"]["total_units"] == 1
    assert data["stats"]["occupied_units"] == 1
    assert data["stats"]["occupancy_rate"] == 100
    assert data["stats"]["total_customers"] == 1
    assert data["unit_status"]["rented"] == 1
    assert len(data["revenue"]) == 6
    assert data["revenue"][-1]["revenue"] >= 120.0
    assert data["recent_rentals"][0]["unit_number"] == "A-101"
    assert data["overdue_payments"][0]["days_overdue"] == 3


def test_payments_list_status_filter(client, seeded):
    today = date.today()
    rental = client.post("/api/rentals/", json={
        "unit_id": seeded["unit"]["id"],
        "customer_id": seeded["customer"]["id"],
        "start_date": today.isoformat(),
        "end_date": (today + timedelta(days=30)).isoformat(),
    }).json()
    client.post("/api/payments/", json={"rental_id": rental["id"], "amount": 10.0, "is_late": True})
    client.post("/api/payments/", json={"rental_id": rental["id"], "amount": 20.0})

    overdue = client.get("/api/payments/", params={"status": "overdue"}).json()

    assert [p["amount"] for p in overdue] == [10.0]
    assert overdue[0]["customer_name"] == "Ada Park"


def test_payment_for_unknown_rental(client):
    response = client.post("/api/payments/", json={
        "rental_id": "00000000-0000-0000-0000-000000000000",
        "amount": 10.0,
    })
    assert response.status_code == 404


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_payments_filter_by_rental(client, seeded):
    today = date.today()
    rental = client.post("/api/rentals/", json={
        "unit_id": seeded["unit"]["id"],
        "customer_id": seeded["customer"]["id"],
        "start_date": today.isoformat(),
        "end_date": (today + timedelta(days=30)).isoformat(),
    }).json()
    client.post("/api/payments/", json={"rental_id": rental["id"], "amount": 15.0})

    listed = client.get("/api/payments/", params={"rental_id": rental["id"]}).json()
    assert [p["amount"] for p in listed] == [15.0]


def test_payments_filter_rejects_malformed_rental_id(client):
    response = client.get("/api/payments/", params={"rental_id": "not-a-uuid"})
    assert response.status_code == 422

from fastapi.testclient import TestClient

from app.main import app
from app.routers.entries import merge_entries
from app.utils import pdf_report


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_analytics_requires_token(store):
    response = TestClient(app).get("/api/analytics/")
    assert response.status_code == 401


def test_analytics_for_default_vehicle(client):
    response = client.get("/api/analytics/", params={"as_of": "2025-11-15"})
    assert response.status_code == 200
    body = response.json()
    assert body["user"] == {"name": "Sam Driver"}

    report = body["report"]
    assert report["generated_at"] == "2025-11-15T00:00:00"
    assert report["monthly_expenses"] == 50.0
    assert report["yearly_expenses"] == 92.0
    assert report["vehicle_stats"]["make"] == "Honda"
    assert report["next_service"] == "2,650 miles until next service"
    assert [p["type"] for p in report["maintenance_predictions"]] == ["Oil Change"]
    assert report["cost_optimization"]["optimal_refueling_time"] == "saturday"


def test_analytics_for_selected_vehicle(client):
    response = client.get("/api/analytics/", params={"vehicle_id": "v-2", "as_of": "2025-11-15"})
    assert response.status_code == 200
    report = response.json()["report"]
    assert report["monthly_expenses"] == 20.0
    assert report["avg_mpg"] == 0.0
    assert report["next_service"] == "Service Due Now"
    assert report["service_history"] == []


def test_analytics_unknown_vehicle(client):
    response = client.get("/api/analytics/", params={"vehicle_id": "nope"})
    assert response.status_code == 404


def test_analytics_without_data(client, store):
    store.fuel_expenses.clear()
    store.vehicles.clear()
    store.service_records.clear()
    store.users.clear()
    response = client.get("/api/analytics/", params={"as_of": "2025-11-15"})
    assert response.status_code == 200
    body = response.json()
    assert body["user"] == {"name": "User"}
    assert body["report"]["monthly_expenses"] == 0.0
    assert body["report"]["next_service"] == "No vehicle data"


def test_monthly_report(client, monkeypatch):
    uploaded = {}

    def fake_pdf(user_id, month, report, report_id):
        uploaded["pdf"] = pdf_report.render_pdf(month, report)
        return f"https://bucket/reports/{user_id}/{report_id}.pdf"

    def fake_csv(user_id, expenses, report_id):
        uploaded["csv"] = pdf_report.render_csv(expenses)
        return f"https://bucket/reports/{user_id}/{report_id}.csv"

    monkeypatch.setattr(pdf_report, "generate_and_upload_pdf", fake_pdf)
    monkeypatch.setattr(pdf_report, "generate_and_upload_csv", fake_csv)

    response = client.get("/api/reports/monthly/2025-11")
    assert response.status_code == 200
    body = response.json()
    assert body["month"] == "2025-11"
    assert body["total_spent"] == 50.0
    assert body["total_gallons"] == 15.0
    assert body["pdf_report_url"].endswith(".pdf")
    assert body["csv_report_url"].endswith(".csv")
    assert uploaded["pdf"].startswith(b"%PDF")
    assert uploaded["csv"].count("\n") == 3  # header + two November fill-ups


def test_monthly_report_survives_upload_failure(client, monkeypatch):
    def failing_upload(*args):
        raise RuntimeError("S3 unavailable")

    monkeypatch.setattr(pdf_report, "generate_and_upload_pdf", failing_upload)
    monkeypatch.setattr(pdf_report, "generate_and_upload_csv", lambda *args: None)

    response = client.get("/api/reports/monthly/2025-11")
    assert response.status_code == 200
    assert response.json()["pdf_report_url"] is None
    assert response.json()["csv_report_url"] is None


def test_monthly_report_errors(client):
    assert client.get("/api/reports/monthly/2025-13").status_code == 400
    assert client.get("/api/reports/monthly/november").status_code == 400
    assert client.get("/api/reports/monthly/2025-1").status_code == 400
    assert client.get("/api/reports/monthly/2025-09").status_code == 404


def test_create_fuel_expense_derives_total(client, store):
    response = client.post("/api/fuel-expenses/", json={
        "date": "2025-11-12T09:00:00",
        "location": "  Shell ",
        "mileage": 1400,
        "gallons": 8,
        "price_per_unit": 3.25,
    })
    assert response.status_code == 201
    body = response.json()
    assert body["total"] == 26.0
    assert body["location"] == "Shell"
    assert body["expense_id"].startswith("2025-11-12T09:00:00_")
    assert len(store.fuel_expenses) == 4


def test_create_fuel_expense_requires_an_amount(client):
    response = client.post("/api/fuel-expenses/", json={
        "location": "Shell",
        "mileage": 1400,
        "price_per_unit": 3.25,
    })
    assert response.status_code == 422


def test_list_fuel_expenses_newest_first(client):
    response = client.get("/api/fuel-expenses/", params={"month": "2025-11"})
    assert response.status_code == 200
    assert [e["location"] for e in response.json()] == ["Shell", "Costco"]


def test_create_vehicle_defaults_next_service(client):
    response = client.post("/api/vehicles/", json={
        "make": "Mazda",
        "model": "3",
        "year": 2022,
        "current_mileage": 12000,
        "license_plate": "  ",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["next_service_mileage"] == 17000
    assert body["license_plate"] is None


def test_service_record_needs_known_vehicle(client):
    response = client.post("/api/service-records/", json={
        "vehicle_id": "missing",
        "mileage": 1000,
        "service_type": "Oil Change",
    })
    assert response.status_code == 404


def test_entries_feed(client, store):
    store.payments.append({"user_id": "user-1", "payment_id": "2025-11-05T00:00:00_cccc0001",
                           "date": "2025-11-05T00:00:00", "amount": 100.0})
    response = client.get("/api/entries/")
    assert response.status_code == 200
    assert [e["type"] for e in response.json()] == ["fuel", "payment", "fuel", "fuel"]


def test_merge_entries():
    expenses = [
        {"date": "2025-11-01", "total": 30.0, "gallons": 10.0},
        {"date": None, "total": "bad", "gallons": 0},
    ]
    payments = [{"date": "2025-11-03", "amount": 50}]
    entries = merge_entries(expenses, payments)
    assert [e["type"] for e in entries] == ["payment", "fuel", "fuel"]
    assert entries[1]["price_per_gallon"] == 3.0
    assert entries[2]["amount"] == 0.0
    assert entries[2]["price_per_gallon"] == 0.0


def test_update_profile(client, store):
    response = client.put("/api/auth/me", json={"full_name": "Sam D.", "phone_number": "5551234567"})
    assert response.status_code == 200
    body = response.json()
    assert body["full_name"] == "Sam D."
    assert body["phone_number"] == "(555) 123-4567"
    assert "password_hash" not in body
    assert store.users["user-1"]["full_name"] == "Sam D."


def test_update_profile_requires_fields(client):
    assert client.put("/api/auth/me", json={}).status_code == 400


def test_changing_the_date_moves_the_expense_to_its_new_month(client, store):
    response = client.put(
        "/api/fuel-expenses/2025-10-06T08:00:00_aaaa0001",
        json={"date": "2025-12-03T08:00:00"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["date"] == "2025-12-03T08:00:00"
    assert body["expense_id"].startswith("2025-12-03T08:00:00_")
    assert body["location"] == "Shell"

    december = client.get("/api/fuel-expenses/", params={"month": "2025-12"}).json()
    october = client.get("/api/fuel-expenses/", params={"month": "2025-10"}).json()
    assert [e["expense_id"] for e in december] == [body["expense_id"]]
    assert october == []
    assert len(store.fuel_expenses) == 3


def test_update_without_date_keeps_the_expense_id(client):
    response = client.put("/api/fuel-expenses/2025-11-01T13:00:00_aaaa0002", json={"total": 31.5})
    assert response.status_code == 200
    assert response.json()["expense_id"] == "2025-11-01T13:00:00_aaaa0002"
    assert response.json()["total"] == 31.5


def test_update_unknown_expense(client):
    assert client.put("/api/fuel-expenses/missing", json={"date": "2025-12-03T08:00:00"}).status_code == 404
    assert client.put("/api/fuel-expenses/missing", json={"total": 10}).status_code == 404
    assert client.put("/api/fuel-expenses/missing", json={}).status_code == 400
    assert client.put("/api/fuel-expenses/missing", json={"date": None}).status_code == 400


def test_expense_ids_work_unencoded_in_paths(client):
    created = client.post("/api/fuel-expenses/", json={
        "date": "2025-11-12T09:00:00",
        "location": "Shell",
        "mileage": 1400,
        "gallons": 8,
        "price_per_unit": 3.25,
    }).json()
    response = client.get(f"/api/fuel-expenses/{created['expense_id']}")
    assert response.status_code == 200
    assert response.json()["mileage"] == 1400


def test_offset_dates_are_filed_under_their_analytics_month(client, store, monkeypatch):
    monkeypatch.setattr(pdf_report, "generate_and_upload_pdf", lambda *args: None)
    monkeypatch.setattr(pdf_report, "generate_and_upload_csv", lambda *args: None)

    # 22:00 at UTC-5 on 31 Dec is already 1 Jan in UTC
    response = client.post("/api/fuel-expenses/", json={
        "date": "2025-12-31T22:00:00-05:00",
        "location": "Shell",
        "mileage": 1500,
        "gallons": 10,
        "price_per_unit": 3.0,
    })
    assert response.status_code == 201
    body = response.json()
    assert body["date"] == "2026-01-01T03:00:00"
    assert body["expense_id"].startswith("2026-01-01T03:00:00_")

    assert client.get("/api/reports/monthly/2025-12").status_code == 404
    january = client.get("/api/reports/monthly/2026-01").json()
    assert january["total_spent"] == 30.0
    assert january["total_gallons"] == 10.0


def test_payment_and_service_dates_are_normalised(client, store):
    payment = client.post("/api/payments/", json={"amount": 50, "date": "2025-12-31T22:00:00-05:00"})
    assert payment.status_code == 201
    assert payment.json()["payment_id"].startswith("2026-01-01T03:00:00_")

    record = client.post("/api/service-records/", json={
        "vehicle_id": "v-1",
        "date": "2025-12-31T22:00:00-05:00",
        "mileage": 1500,
        "service_type": "Oil Change",
    })
    assert record.status_code == 201
    assert record.json()["date"] == "2026-01-01T03:00:00"


def test_default_analytics_include_every_vehicles_services(client, store):
    store.service_records.append({
        "user_id": "user-1", "record_id": "2025-11-05T00:00:00_bbbb0002", "vehicle_id": "v-2",
        "date": "2025-11-05T00:00:00", "mileage": 51500, "service_type": "Tire Rotation",
        "cost": 20.0, "description": "Tires - rotation",
    })
    combined = client.get("/api/analytics/", params={"as_of": "2025-11-15"}).json()["report"]
    assert combined["maintenance_costs"]["total"] == 65.5
    assert combined["yearly_expenses"] == 92.0

    single = client.get("/api/analytics/", params={"vehicle_id": "v-2", "as_of": "2025-11-15"}).json()["report"]
    assert single["maintenance_costs"]["total"] == 20.0
    assert single["yearly_expenses"] == 20.0

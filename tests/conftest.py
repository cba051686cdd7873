import pytest
from fastapi.testclient import TestClient

from app.db import dynamo
from app.main import app
from app.routers.auth import get_current_user_id

USER_ID = "user-1"

FUEL_EXPENSES = [
    {"user_id": USER_ID, "expense_id": "2025-10-06T08:00:00_aaaa0001", "date": "2025-10-06T08:00:00",
     "location": "Shell", "mileage": 1000, "gallons": 12.0, "price_per_unit": 3.5, "total": 42.0,
     "payment_type": "Card", "vehicle_id": "v-1"},
    {"user_id": USER_ID, "expense_id": "2025-11-01T13:00:00_aaaa0002", "date": "2025-11-01T13:00:00",
     "location": "Costco", "mileage": 1300, "gallons": 10.0, "price_per_unit": 3.0, "total": 30.0,
     "payment_type": "Card", "vehicle_id": "v-1"},
    {"user_id": USER_ID, "expense_id": "2025-11-10T18:00:00_aaaa0003", "date": "2025-11-10T18:00:00",
     "location": "Shell", "mileage": 1350, "gallons": 5.0, "price_per_unit": 4.0, "total": 20.0,
     "payment_type": "Cash", "vehicle_id": "v-2"},
]

VEHICLES = [
    {"user_id": USER_ID, "vehicle_id": "v-1", "make": "Honda", "model": "Civic", "year": 2020,
     "current_mileage": 1350, "next_service_mileage": 4000, "service_interval": 5000, "rated_mpg": 30},
    {"user_id": USER_ID, "vehicle_id": "v-2", "make": "Toyota", "model": "Corolla", "year": 2018,
     "current_mileage": 52000, "next_service_mileage": 51000, "service_interval": 5000, "rated_mpg": 32},
]

SERVICE_RECORDS = [
    {"user_id": USER_ID, "record_id": "2025-06-01T00:00:00_bbbb0001", "vehicle_id": "v-1",
     "date": "2025-06-01T00:00:00", "mileage": 800, "service_type": "Oil Change", "cost": 45.5,
     "description": "Oil Change - synthetic"},
]


class FakeStore:
    """In-memory stand-in for the DynamoDB accessors used by the routers."""

    def __init__(self):
        self.fuel_expenses = [dict(e) for e in FUEL_EXPENSES]
        self.vehicles = [dict(v) for v in VEHICLES]
        self.service_records = [dict(r) for r in SERVICE_RECORDS]
        self.payments = []
        self.users = {USER_ID: {"user_id": USER_ID, "email": "sam@example.com", "full_name": "Sam Driver"}}

    def get_fuel_expenses_for_user(self, user_id, month_prefix=None):
        return [
            e for e in self.fuel_expenses
            if e["user_id"] == user_id and (not month_prefix or e["expense_id"].startswith(month_prefix))
        ]

    def get_vehicles_for_user(self, user_id):
        return [v for v in self.vehicles if v["user_id"] == user_id]

    def get_vehicle(self, user_id, vehicle_id):
        return next((v for v in self.get_vehicles_for_user(user_id) if v["vehicle_id"] == vehicle_id), None)

    def get_service_records_for_user(self, user_id, vehicle_id=None):
        return [
            r for r in self.service_records
            if r["user_id"] == user_id and (vehicle_id is None or r["vehicle_id"] == vehicle_id)
        ]

    def get_payments_for_user(self, user_id):
        return [p for p in self.payments if p["user_id"] == user_id]

    def get_user_by_id(self, user_id):
        return self.users.get(user_id)

    def update_user(self, user_id, updates):
        user = self.users.get(user_id)
        if user is None:
            return None
        user.update(updates)
        return dict(user)

    def get_fuel_expense(self, user_id, expense_id):
        return next(
            (e for e in self.get_fuel_expenses_for_user(user_id) if e["expense_id"] == expense_id), None
        )

    def update_fuel_expense(self, user_id, expense_id, updates):
        expense = self.get_fuel_expense(user_id, expense_id)
        if expense is None:
            return None
        expense.update(updates)
        return dict(expense)

    def delete_fuel_expense(self, user_id, expense_id):
        expense = self.get_fuel_expense(user_id, expense_id)
        if expense is None:
            return False
        self.fuel_expenses.remove(expense)
        return True

    def put_fuel_expense(self, item):
        self.fuel_expenses.append(item)
        return True

    def put_payment(self, item):
        self.payments.append(item)
        return True

    def put_vehicle(self, item):
        self.vehicles.append(item)
        return True

    def put_service_record(self, item):
        self.service_records.append(item)
        return True


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore()
    for name in (
        "get_fuel_expenses_for_user",
        "get_vehicles_for_user",
        "get_vehicle",
        "get_service_records_for_user",
        "get_payments_for_user",
        "get_user_by_id",
        "update_user",
        "get_fuel_expense",
        "update_fuel_expense",
        "delete_fuel_expense",
        "put_fuel_expense",
        "put_payment",
        "put_vehicle",
        "put_service_record",
    ):
        monkeypatch.setattr(dynamo, name, getattr(fake, name))
    return fake


@pytest.fixture
def client(store):
    app.dependency_overrides[get_current_user_id] = lambda: USER_ID
    yield TestClient(app)
    app.dependency_overrides.clear()

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.db import dynamo
from app.models.fuel_expense import (
    FuelExpenseCreate,
    FuelExpenseInDB,
    FuelExpensePublic,
    FuelExpenseUpdate,
)
from app.routers.analytics import fuel_analyzer
from app.routers.auth import get_current_user_id
from app.utils.analyzer import parse_timestamp

router = APIRouter()

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def local_timestamp(value: datetime) -> str:
    """
    ISO wall-clock time in the analytics timezone.

    Stored dates and sort keys use this form so month filters and reports
    agree with the analytics windows.
    """
    return parse_timestamp(value, fuel_analyzer.tz).isoformat()


def make_sort_key(timestamp: str) -> str:
    """ISO timestamp plus a short suffix so two entries at the same instant don't collide."""
    return f"{timestamp}_{uuid.uuid4().hex[:8]}"


@router.post("/", response_model=FuelExpensePublic, status_code=status.HTTP_201_CREATED)
def create_fuel_expense(expense: FuelExpenseCreate, user_id: str = Depends(get_current_user_id)):
    data = expense.model_dump(mode="json")
    data["date"] = local_timestamp(expense.date)
    expense_db = FuelExpenseInDB(user_id=user_id, expense_id=make_sort_key(data["date"]), **data)
    if not dynamo.put_fuel_expense(expense_db.model_dump()):
        raise HTTPException(status_code=500, detail="Failed to save fuel expense")
    return FuelExpensePublic(**expense_db.model_dump())


@router.get("/", response_model=List[FuelExpensePublic])
def list_fuel_expenses(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM"),
    user_id: str = Depends(get_current_user_id),
):
    """Fuel expenses of the current user, newest first."""
    expenses = dynamo.get_fuel_expenses_for_user(user_id, month)
    return sorted(expenses, key=lambda e: e["expense_id"], reverse=True)


@router.get("/{expense_id}", response_model=FuelExpensePublic)
def get_fuel_expense(expense_id: str, user_id: str = Depends(get_current_user_id)):
    expense = dynamo.get_fuel_expense(user_id, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Fuel expense not found")
    return expense


@router.put("/{expense_id}", response_model=FuelExpensePublic)
def update_fuel_expense(
    expense_id: str,
    expense_update: FuelExpenseUpdate,
    user_id: str = Depends(get_current_user_id),
):
    """
    Partially update an expense. Changing the date moves the expense to a new
    sort key, so the returned expense_id differs from the one in the path.
    """
    mutable_fields = expense_update.model_dump(mode="json", exclude_unset=True)
    if expense_update.date is None:
        mutable_fields.pop("date", None)
    if not mutable_fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    if expense_update.date is not None:
        mutable_fields["date"] = local_timestamp(expense_update.date)
        return _move_fuel_expense(user_id, expense_id, mutable_fields)

    updated = dynamo.update_fuel_expense(user_id, expense_id, mutable_fields)
    if not updated:
        raise HTTPException(status_code=404, detail="Fuel expense not found")
    return updated


def _move_fuel_expense(user_id: str, expense_id: str, updates: dict):
    existing = dynamo.get_fuel_expense(user_id, expense_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Fuel expense not found")

    moved = {**existing, **updates, "expense_id": make_sort_key(updates["date"])}
    if not dynamo.put_fuel_expense(moved):
        raise HTTPException(status_code=500, detail="Failed to save fuel expense")
    if not dynamo.delete_fuel_expense(user_id, expense_id):
        # Roll back the new item.
        dynamo.delete_fuel_expense(user_id, moved["expense_id"])
        raise HTTPException(status_code=404, detail="Fuel expense not found")
    return moved


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_fuel_expense(expense_id: str, user_id: str = Depends(get_current_user_id)):
    if not dynamo.delete_fuel_expense(user_id, expense_id):
        raise HTTPException(status_code=404, detail="Fuel expense not found")
    return None

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from app.db import dynamo
from app.routers.auth import get_current_user_id
from app.utils.analyzer import to_number

router = APIRouter()


def merge_entries(expenses: List[Dict[str, Any]], payments: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Fuel expenses and payments as one feed, newest first."""
    entries = []
    for expense in expenses:
        gallons = to_number(expense.get("gallons"))
        entries.append({
            "type": "fuel",
            "date": expense.get("date") or "",
            "amount": to_number(expense.get("total")),
            "price_per_gallon": to_number(expense.get("total")) / gallons if gallons > 0 else 0.0,
            "data": expense,
        })
    for payment in payments:
        entries.append({
            "type": "payment",
            "date": payment.get("date") or "",
            "amount": to_number(payment.get("amount")),
            "data": payment,
        })
    return sorted(entries, key=lambda entry: entry["date"], reverse=True)


@router.get("/")
def list_entries(user_id: str = Depends(get_current_user_id)):
    expenses = dynamo.get_fuel_expenses_for_user(user_id)
    payments = dynamo.get_payments_for_user(user_id)
    return merge_entries(expenses, payments)

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.db import dynamo
from app.models.payment import PaymentCreate, PaymentInDB, PaymentPublic
from app.routers.auth import get_current_user_id
from app.routers.fuel_expenses import local_timestamp, make_sort_key

router = APIRouter()


@router.post("/", response_model=PaymentPublic, status_code=status.HTTP_201_CREATED)
def create_payment(payment: PaymentCreate, user_id: str = Depends(get_current_user_id)):
    data = payment.model_dump(mode="json")
    data["date"] = local_timestamp(payment.date)
    payment_db = PaymentInDB(user_id=user_id, payment_id=make_sort_key(data["date"]), **data)
    if not dynamo.put_payment(payment_db.model_dump()):
        raise HTTPException(status_code=500, detail="Failed to save payment")
    return PaymentPublic(**payment_db.model_dump())


@router.get("/", response_model=List[PaymentPublic])
def list_payments(user_id: str = Depends(get_current_user_id)):
    payments = dynamo.get_payments_for_user(user_id)
    return sorted(payments, key=lambda p: p["payment_id"], reverse=True)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(payment_id: str, user_id: str = Depends(get_current_user_id)):
    if not dynamo.delete_payment(user_id, payment_id):
        raise HTTPException(status_code=404, detail="Payment not found")
    return None

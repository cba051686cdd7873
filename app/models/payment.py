from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PaymentCreate(BaseModel):
    amount: float = Field(gt=0)
    date: datetime = Field(default_factory=datetime.utcnow)
    source: str = ""
    type: str = ""
    notes: Optional[str] = ""


class PaymentInDB(BaseModel):
    user_id: str
    payment_id: str  # "<ISO date>_<suffix>"
    amount: float
    date: str
    source: str = ""
    type: str = ""
    notes: Optional[str] = ""
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class PaymentPublic(BaseModel):
    payment_id: str
    amount: float
    date: str
    source: str = ""
    type: str = ""
    notes: Optional[str] = ""

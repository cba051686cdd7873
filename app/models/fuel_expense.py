from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class FuelExpenseCreate(BaseModel):
    """
    A fuel purchase as entered by the user.

    Either ``gallons`` or ``total`` may be omitted; the missing one is derived
    from the other and ``price_per_unit``, rounded to cents / hundredths.
    """

    date: datetime = Field(default_factory=datetime.utcnow)
    location: str
    mileage: int = Field(ge=0)
    gallons: Optional[float] = Field(default=None, gt=0)
    price_per_unit: float = Field(ge=0)
    total: Optional[float] = Field(default=None, ge=0)
    payment_type: str = ""
    vehicle_id: Optional[str] = None
    notes: Optional[str] = ""

    @field_validator("location")
    @classmethod
    def location_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter a location")
        return value

    @model_validator(mode="after")
    def derive_amounts(self) -> "FuelExpenseCreate":
        if self.gallons is None and self.total is None:
            raise ValueError("Please enter either gallons or total")
        if self.total is None:
            self.total = round(self.gallons * self.price_per_unit, 2)
        elif self.gallons is None:
            if self.price_per_unit <= 0:
                raise ValueError("price_per_unit must be positive to derive gallons")
            self.gallons = round(self.total / self.price_per_unit, 2)
        return self


class FuelExpenseUpdate(BaseModel):
    date: Optional[datetime] = None
    location: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    gallons: Optional[float] = Field(default=None, gt=0)
    price_per_unit: Optional[float] = Field(default=None, ge=0)
    total: Optional[float] = Field(default=None, ge=0)
    payment_type: Optional[str] = None
    notes: Optional[str] = None


class FuelExpenseInDB(BaseModel):
    user_id: str
    expense_id: str  # "<ISO date>_<suffix>", sortable and month-prefix queryable
    date: str
    location: str
    mileage: int
    gallons: float
    price_per_unit: float
    total: float
    payment_type: str = ""
    vehicle_id: Optional[str] = None
    notes: Optional[str] = ""
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class FuelExpensePublic(BaseModel):
    expense_id: str
    date: str
    location: str
    mileage: int
    gallons: float
    price_per_unit: float
    total: float
    payment_type: str = ""
    vehicle_id: Optional[str] = None
    notes: Optional[str] = ""

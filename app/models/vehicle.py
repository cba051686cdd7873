from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


class VehicleCreate(BaseModel):
    make: str
    model: str
    year: int = Field(ge=1886, le=2100)
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    current_mileage: int = Field(ge=0)
    next_service_mileage: Optional[int] = Field(default=None, ge=0)
    service_interval: int = Field(default=5000, gt=0)
    rated_mpg: float = Field(default=0.0, ge=0)

    @field_validator("make", "model")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please fill in all required fields")
        return value

    @field_validator("license_plate", "vin")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class VehicleUpdate(BaseModel):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1886, le=2100)
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    current_mileage: Optional[int] = Field(default=None, ge=0)
    next_service_mileage: Optional[int] = Field(default=None, ge=0)
    service_interval: Optional[int] = Field(default=None, gt=0)
    rated_mpg: Optional[float] = Field(default=None, ge=0)


class VehicleInDB(BaseModel):
    user_id: str
    vehicle_id: str = Field(default_factory=lambda: str(uuid4()))
    make: str
    model: str
    year: int
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    current_mileage: int
    next_service_mileage: Optional[int] = None
    service_interval: int = 5000
    rated_mpg: float = 0.0
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class VehiclePublic(BaseModel):
    vehicle_id: str
    make: str
    model: str
    year: int
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    current_mileage: int
    next_service_mileage: Optional[int] = None
    service_interval: int = 5000
    rated_mpg: float = 0.0

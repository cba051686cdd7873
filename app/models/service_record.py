from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ServiceRecordCreate(BaseModel):
    vehicle_id: str
    date: datetime = Field(default_factory=datetime.utcnow)
    mileage: int = Field(ge=0)
    service_type: str
    # Analytics groups costs by the text before " - ", e.g. "Brakes - front pads"
    description: Optional[str] = ""
    cost: float = Field(default=0.0, ge=0)
    location: Optional[str] = None


class ServiceRecordInDB(BaseModel):
    user_id: str
    record_id: str  # "<ISO date>_<suffix>"
    vehicle_id: str
    date: str
    mileage: int
    service_type: str
    description: Optional[str] = ""
    cost: float = 0.0
    location: Optional[str] = None
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class ServiceRecordPublic(BaseModel):
    record_id: str
    vehicle_id: str
    date: str
    mileage: int
    service_type: str
    description: Optional[str] = ""
    cost: float = 0.0
    location: Optional[str] = None

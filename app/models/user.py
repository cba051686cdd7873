import re
from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, EmailStr, Field, field_validator

PHONE_PATTERN = re.compile(r"^\+?[\d\s-]{10,}$")


def format_phone_number(phone: str) -> str:
    """'5551234567' -> '(555) 123-4567'. Numbers that aren't ten digits are returned unchanged."""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    license_number: Optional[str] = None
    license_expiry: Optional[str] = None

    @field_validator("phone_number")
    @classmethod
    def valid_phone_number(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return value
        if not PHONE_PATTERN.match(value):
            raise ValueError("Please enter a valid phone number")
        return format_phone_number(value)


class UserInDB(BaseModel):
    user_id: str = Field(default_factory=lambda: str(uuid4()))
    email: EmailStr
    password_hash: str
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    license_number: Optional[str] = None
    license_expiry: Optional[str] = None
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class UserPublic(BaseModel):
    user_id: str
    email: EmailStr
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    license_number: Optional[str] = None
    license_expiry: Optional[str] = None
    created_at: str = ""

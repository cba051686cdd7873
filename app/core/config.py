from functools import lru_cache
from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "FuelTracker"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = "INFO"

    # DynamoDB
    DYNAMO_REGION: str = "us-east-1"
    DYNAMO_USERS_TABLE: str = Field(default="fuel-tracker-users", alias="DYNAMO_TABLE_USERS")
    DYNAMO_FUEL_EXPENSES_TABLE: str = Field(default="fuel-tracker-fuel-expenses", alias="DYNAMO_TABLE_FUEL_EXPENSES")
    DYNAMO_SERVICE_RECORDS_TABLE: str = Field(default="fuel-tracker-service-records", alias="DYNAMO_TABLE_SERVICE_RECORDS")
    DYNAMO_VEHICLES_TABLE: str = Field(default="fuel-tracker-vehicles", alias="DYNAMO_TABLE_VEHICLES")
    DYNAMO_PAYMENTS_TABLE: str = Field(default="fuel-tracker-payments", alias="DYNAMO_TABLE_PAYMENTS")

    # AWS S3
    S3_BUCKET_NAME: str = "fuel-tracker-reports"
    S3_REGION: str = "us-east-1"

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(default="change-me-in-production", alias="JWT_SECRET")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Analytics tuning
    MAINTENANCE_INTERVALS: Dict[str, float] = {"Oil Change": 5000}  # JSON in the environment
    AVERAGE_DAILY_MILES: float = Field(default=30.0, gt=0)
    PRICE_SPREAD_THRESHOLD: float = 0.5
    ANALYTICS_TIMEZONE: str = "UTC"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

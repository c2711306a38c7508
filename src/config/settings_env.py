from decimal import Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Development
    DEV_MODE: bool = Field(default=True, description="Enable debug mode")

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./parking.db", description="Database connection URL")
    ASYNC_DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./parking.db", description="Async database URL")
    READ_RETRY_ATTEMPTS: int = Field(default=2, ge=1, description="Attempts for idempotent reads on storage errors")

    # FastAPI
    FASTAPI_HOST: str = Field(default="localhost", description="FastAPI host")
    FASTAPI_PORT: int = Field(default=8080, description="FastAPI port")

    # Parking Configuration
    DEFAULT_HOURLY_RATE: Decimal = Field(default=Decimal("5.00"), ge=0, description="Hourly rate when a space has none")
    PARKING_FLOORS: int = Field(default=3, description="Number of parking floors to seed")
    SPACES_PER_FLOOR: int = Field(default=20, description="Spaces per floor to seed")

    # Receipts
    SESSION_RECEIPT_PREFIX: str = Field(default="R", description="Prefix for receipts minted at exit")
    PAYMENT_RECEIPT_PREFIX: str = Field(default="PAY", description="Prefix for payment receipts")

    # Reports
    REPORT_TIMEZONE: str = Field(default="UTC", description="IANA zone whose calendar day a daily report covers")

    @field_validator("REPORT_TIMEZONE")
    @classmethod
    def validate_report_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {v}") from exc
        return v


# Create settings instance
settings = Settings()

from datetime import timedelta
from functools import lru_cache
import os
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    env: str = Field(default="dev", alias="ENV")
    timezone: str = Field(default="Asia/Kuala_Lumpur", alias="TIMEZONE")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    app_base_url: str = Field(default="http://localhost:5173", alias="APP_BASE_URL")

    database_url: str = Field(default="", alias="DATABASE_URL")
    postgres_db: str = Field(default="cinemate", alias="POSTGRES_DB")
    postgres_user: str = Field(default="cinemate", alias="POSTGRES_USER")
    postgres_password: str = Field(default="cinemate", alias="POSTGRES_PASSWORD")
    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, alias="POSTGRES_PORT")

    scheduler_jobstore_url: str = Field(default="", alias="SCHEDULER_JOBSTORE_URL")
    seat_hold_minutes: int = Field(default=10, alias="SEAT_HOLD_MINUTES")
    expiry_retry_delay_seconds: int = Field(default=30, alias="EXPIRY_RETRY_DELAY_SECONDS")
    expiry_max_attempts: int = Field(default=5, alias="EXPIRY_MAX_ATTEMPTS")
    ledger_retry_attempts: int = Field(default=3, alias="LEDGER_RETRY_ATTEMPTS")

    identity_jwt_key: str = Field(default="secret", alias="IDENTITY_JWT_KEY")
    identity_jwt_algorithm: str = Field(default="HS256", alias="IDENTITY_JWT_ALGORITHM")
    identity_webhook_secret: str = Field(default="", alias="IDENTITY_WEBHOOK_SECRET")

    mail_api_url: str = Field(default="https://api.brevo.com/v3/smtp/email", alias="MAIL_API_URL")
    mail_api_key: str = Field(default="", alias="MAIL_API_KEY")
    mail_sender: str = Field(default="no-reply@cinemate.app", alias="MAIL_SENDER")

    payment_provider: str = Field(default="stub", alias="PAYMENT_PROVIDER")
    payment_currency: str = Field(default="MYR", alias="PAYMENT_CURRENCY")
    payment_return_url: str = Field(default="http://localhost:5173/loading/my-bookings", alias="PAYMENT_RETURN_URL")
    payment_webhook_secret: str = Field(default="", alias="PAYMENT_WEBHOOK_SECRET")

    class Config:
        populate_by_name = True

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def jobstore_url(self) -> str:
        return self.scheduler_jobstore_url or self.sqlalchemy_url

    @property
    def seat_hold_timeout(self) -> timedelta:
        return timedelta(minutes=self.seat_hold_minutes)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv(override=False)
    return Settings(**os.environ)

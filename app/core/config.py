from pathlib import Path
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# -------------------------------------------------
# Explicitly load .env
# -------------------------------------------------

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_PATH = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_PATH)


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ENVIRONMENT: str = "development"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    ALGORITHM: str = "HS256"
    DATABASE_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = ["*"]
    # Base URL of the web client, used to build onboarding magic links
    CLIENT_URL: str = "http://localhost:5173"
    ONBOARDING_TOKEN_TTL_HOURS: int = Field(default=48, description="Lifetime of an onboarding magic link")

    # Mail: accept MAIL_* or SMTP_*. Leave MAIL_SERVER empty to disable sending.
    MAIL_FROM: str = Field(default="", validation_alias=AliasChoices("MAIL_FROM", "SMTP_FROM_EMAIL"))
    MAIL_FROM_NAME: str = Field(default="FleetSync", validation_alias=AliasChoices("MAIL_FROM_NAME", "SMTP_FROM_NAME"))
    MAIL_USERNAME: str = Field(default="", validation_alias=AliasChoices("MAIL_USERNAME", "SMTP_USER"))
    MAIL_PASSWORD: str = Field(default="", validation_alias=AliasChoices("MAIL_PASSWORD", "SMTP_PASSWORD"))
    MAIL_SERVER: str = Field(default="", validation_alias=AliasChoices("MAIL_SERVER", "SMTP_HOST"))
    MAIL_PORT: int = Field(default=587, validation_alias=AliasChoices("MAIL_PORT", "SMTP_PORT"))

    DEFAULT_ADMIN_EMAIL: str = "admin@fleetsync.com.au"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"
    AUTO_CREATE_TABLES: bool = Field(default=False, description="Run metadata.create_all on startup instead of Alembic")

    # Periodic compliance / overdue / billing sweep (env: FLEET_JOBS_ENABLED, FLEET_JOBS_INTERVAL_HOURS)
    FLEET_JOBS_ENABLED: bool = Field(default=False, description="Run fleet jobs in a background loop")
    FLEET_JOBS_INTERVAL_HOURS: float = Field(default=24.0, description="Fleet jobs interval in hours")

    # Work-rights (VEVO) verification provider. Only "mock" is implemented.
    VEVO_PROVIDER: str = "mock"

    class Config:
        extra = "ignore"
        env_file = str(ENV_PATH)
        env_file_encoding = "utf-8"


settings = Settings()

import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import DateRange, Environment


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(default=Environment.DEV.value, validation_alias="APP_ENV")
    ALLOWED_ORIGIN: str = Field(
        default="http://localhost:3000", validation_alias="ALLOWED_ORIGIN"
    )

    # Job-execution backend
    BACKEND_BASE_URL: str = Field(
        default="http://localhost:8080/api", validation_alias="BACKEND_BASE_URL"
    )
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0, validation_alias="HTTP_TIMEOUT_SECONDS"
    )
    HTTP_CONNECT_TIMEOUT_SECONDS: float = Field(
        default=5.0, validation_alias="HTTP_CONNECT_TIMEOUT_SECONDS"
    )

    # Polling & pagination
    POLL_INTERVAL_MS: int = Field(default=3000, gt=0, validation_alias="POLL_INTERVAL_MS")
    PAGE_SIZE: int = Field(default=1000, gt=0, validation_alias="PAGE_SIZE")
    ACTIONS_FALLBACK_DAYS: int = Field(default=30, validation_alias="ACTIONS_FALLBACK_DAYS")
    ACTIONS_FALLBACK_SIZE: int = Field(
        default=1000, validation_alias="ACTIONS_FALLBACK_SIZE"
    )
    DEFAULT_DATE_RANGE: DateRange = Field(
        default=DateRange.ALL_TIME, validation_alias="DEFAULT_DATE_RANGE"
    )
    NOTIFICATION_BUFFER: int = Field(default=50, validation_alias="NOTIFICATION_BUFFER")

    # Logging knobs
    LOGGER_NAME: str = "job-dashboard"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="dashboard.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)

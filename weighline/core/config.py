from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="WEIGHLINE_", extra="ignore")

    app_name: str = "Weighline Sensor Service"
    timezone: str = "Europe/Paris"

    # Mode: "sim" serves scale/photocell text from in-process devices; "real" polls the URLs
    mode: str = Field(default="sim")

    # Line wiring; unset means the sensor is not installed on this line
    scale_url: Optional[str] = None
    photocell_url: Optional[str] = None
    polling_interval_ms: int = Field(default=200, gt=0)

    # Unit the scale reports in, and display precision override
    line_unit: str = "g"
    decimal_precision: Optional[int] = Field(default=None, ge=0, le=6)

    # One-shot sensor test
    check_timeout_seconds: float = 3.0

    # Logging
    log_file: str = "weighline.log"
    log_max_bytes: int = 2_000_000
    log_backup_count: int = 5


settings = Settings()

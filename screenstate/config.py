from __future__ import annotations
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils import clamp_period

OVERFLOW_POLICIES = ("unbounded", "saturate", "wrap")


class Settings(BaseSettings):
    # ----------------
    # Counter screen
    # ----------------
    counter_interval_seconds: int = Field(1, alias="COUNTER_INTERVAL")
    counter_autostart: bool = Field(True, alias="COUNTER_AUTOSTART")
    counter_overflow: str = Field("unbounded", alias="COUNTER_OVERFLOW")

    # ----------------
    # Temperature dashboard
    # ----------------
    dashboard_period_seconds: int = Field(2, alias="DASHBOARD_PERIOD")
    dashboard_autostart: bool = Field(True, alias="DASHBOARD_AUTOSTART")
    dashboard_window: int = Field(20, alias="DASHBOARD_WINDOW")
    temperature_min: float = Field(18.0, alias="TEMPERATURE_MIN")
    temperature_max: float = Field(30.0, alias="TEMPERATURE_MAX")

    # ----------------
    # Lifecycle logger
    # ----------------
    event_log_max: Optional[int] = Field(100, alias="EVENT_LOG_MAX")  # 0 = unbounded
    notifications_enabled: bool = Field(True, alias="NOTIFICATIONS_ENABLED")

    # ----------------
    # Logging
    # ----------------
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field("logs/screenstate.log", alias="LOG_FILE")
    log_json: bool = Field(True, alias="LOG_JSON")

    @field_validator("counter_interval_seconds", "dashboard_period_seconds")
    @classmethod
    def _clamp_period(cls, v: int) -> int:
        return clamp_period(v)

    @field_validator("dashboard_window")
    @classmethod
    def _positive_window(cls, v: int) -> int:
        return max(v, 1)

    @field_validator("counter_overflow")
    @classmethod
    def _known_policy(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in OVERFLOW_POLICIES:
            raise ValueError(f"COUNTER_OVERFLOW must be one of {OVERFLOW_POLICIES}, got {v!r}")
        return v

    @property
    def event_log_cap(self) -> Optional[int]:
        if not self.event_log_max or self.event_log_max < 0:
            return None
        return self.event_log_max

    # ----------------
    # Pydantic settings
    # ----------------
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

settings = Settings()

"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_SCHEDULER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Job Route Scheduler API"
    api_prefix: str = ""
    log_level: str = Field(default="INFO", description="Root logging level applied by create_app.")
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=("*",),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Chat/completion provider (OpenAI-compatible)
    openai_api_key: Optional[str] = Field(default=None, description="API key for the chat completion provider.")
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    openai_model: str = Field(default="gpt-3.5-turbo")
    chat_max_tokens: int = Field(default=300, ge=1)
    chat_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    ordering_max_tokens: int = Field(default=1000, ge=1)
    ordering_temperature: float = Field(default=0.3, ge=0.0, le=2.0)

    # Travel-time provider
    travel_provider: Literal["google", "osrm"] = Field(
        default="google",
        description="Which service answers distance matrix lookups.",
    )
    google_maps_api_key: Optional[str] = Field(default=None, description="Google Distance Matrix API key.")
    google_maps_base_url: str = Field(default="https://maps.googleapis.com/maps/api")
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(default="driving")

    http_timeout_seconds: float = Field(default=30.0, gt=0.0)
    external_max_retries: int = Field(default=0, ge=0)
    external_backoff_seconds: float = Field(default=1.0, ge=0.0)

    # Default start location (Bunnings Carlingford)
    default_start_latitude: float = -33.77895597508021
    default_start_longitude: float = 151.05162274718293
    default_start_address: str = "295 Pennant Hills Road, Carlingford NSW 2118"

    # Scheduling heuristics
    max_jobs_per_day: int = Field(default=7, ge=1)
    max_minutes_per_day: int = Field(default=480, ge=1)
    max_jobs_per_request: int = Field(default=20, ge=1)
    cluster_radius_km: float = Field(default=15.0, ge=0.0)
    outlier_distance_km: float = Field(default=10.0, ge=0.0)
    day_start_time: str = Field(default="07:30", pattern=r"^\d{2}:\d{2}$")
    default_job_minutes: int = Field(default=60, ge=1)
    default_travel_minutes: int = Field(default=15, ge=0)
    buffer_min_minutes: int = Field(default=15, ge=0)
    buffer_max_minutes: int = Field(default=30, ge=0)

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("buffer_max_minutes")
    @classmethod
    def _buffer_range(cls, value: int, info) -> int:
        lower = info.data.get("buffer_min_minutes", 0)
        if value < lower:
            raise ValueError("buffer_max_minutes must be >= buffer_min_minutes")
        return value


settings = Settings()

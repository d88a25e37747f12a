import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Field Logger Sync"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Local durable store (SQLite file on the device)
    database_url: str = "sqlite:///data/field_logger.db"

    # Remote inspection service
    remote_api_url: str = "http://localhost:3000"
    remote_create_path: str = "/inspections"
    remote_stream_path: str = "/inspections/events/stream"
    remote_health_path: str = "/health"
    remote_timeout_seconds: float = 10.0

    # Sync engine
    # "probe" polls the remote health endpoint, "manual" waits for the host
    # to report online/offline, "none" assumes online and relies on the timer
    connectivity_mode: Literal["probe", "manual", "none"] = "probe"
    sync_interval_seconds: float = 30.0
    stream_reconnect_delay_seconds: float = 3.0
    connectivity_probe_interval_seconds: float = 15.0

    # Per-record retry backoff — off keeps the fixed-interval retry
    sync_backoff_enabled: bool = False
    sync_backoff_base_seconds: float = 30.0
    sync_backoff_cap_seconds: float = 900.0
    sync_backoff_jitter_seconds: float = 5.0

    # Local SSE broadcast of the merged view
    sse_heartbeat_seconds: float = 15.0

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine — SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_sync: str = "INFO"             # SyncEngine passes and pushes
    log_level_stream: str = "INFO"           # LiveMergeView stream connection

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Warn about timer values the engine would clamp."""
        if self.sync_interval_seconds <= 0:
            _config_logger.warning(
                "sync_interval_seconds=%s is not positive — periodic sync disabled",
                self.sync_interval_seconds,
            )


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()

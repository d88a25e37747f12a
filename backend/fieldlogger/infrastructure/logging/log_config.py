"""Per-category log levels for the sync host.

SQL echo and outbound HTTP are quiet by default; the sync engine and the
live stream keep their own levels so a pass can be traced at DEBUG
without drowning in driver output.
"""

import logging
import sys

from fieldlogger.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Settings field -> logger names it governs
_CATEGORY_MAP: dict[str, tuple[str, ...]] = {
    "log_level_sql": ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite"),
    "log_level_http": ("httpx", "httpcore"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_sync": (
        "SyncEngine",
        "fieldlogger.application.services.sync_engine",
        "fieldlogger.infrastructure.remote",
        "fieldlogger.infrastructure.connectivity",
    ),
    "log_level_stream": (
        "LiveMergeView",
        "fieldlogger.application.services.live_merge_view",
        "fieldlogger.application.services.sse_manager",
    ),
}


def setup_logging(settings: Settings | None = None) -> dict[str, int]:
    """Apply the configured levels. Returns the level chosen per category."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))
    _ensure_handler(root)

    applied: dict[str, int] = {}
    for settings_field, logger_names in _CATEGORY_MAP.items():
        level = _parse_level(getattr(settings, settings_field))
        applied[settings_field] = level
        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Log levels: root=%s %s",
        settings.log_level,
        " ".join(f"{k.removeprefix('log_level_')}={logging.getLevelName(v)}" for k, v in applied.items()),
    )
    return applied


def _ensure_handler(root: logging.Logger) -> None:
    # uvicorn installs its own handler; scripts and tests start bare
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def _parse_level(raw: str) -> int:
    """Level name to logging constant; unknown names fall back to INFO."""
    numeric = logging.getLevelName(raw.upper())
    return numeric if isinstance(numeric, int) else logging.INFO

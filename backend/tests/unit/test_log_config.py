"""Unit tests for per-category logging setup."""

import logging

import pytest

from fieldlogger.config import Settings
from fieldlogger.infrastructure.logging.log_config import setup_logging


@pytest.fixture
def restore_levels():
    names = ["", "sqlalchemy.engine", "httpx", "SyncEngine", "LiveMergeView"]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_category_levels_follow_settings(restore_levels):
    settings = Settings(
        _env_file=None,
        log_level="WARNING",
        log_level_sql="ERROR",
        log_level_sync="DEBUG",
        log_level_stream="nonsense",
    )

    applied = setup_logging(settings)

    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.ERROR
    assert logging.getLogger("SyncEngine").level == logging.DEBUG
    assert logging.getLogger("LiveMergeView").level == logging.INFO
    assert applied["log_level_stream"] == logging.INFO
    assert logging.getLogger().handlers

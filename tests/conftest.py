"""Pytest configuration and fixtures for all tests."""

import tempfile
from pathlib import Path

import pytest
import yaml

from aerotwin.core.logging_system import initialize_logging

_TEST_LOG_DIR = Path(tempfile.mkdtemp(prefix="aerotwin-tests-"))


def _initialize_test_logging() -> None:
    """Send all test logging to a throwaway directory, never the user's home."""
    config_path = _TEST_LOG_DIR / "logging.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "version": 1,
                "level": "DEBUG",
                "log_dir": str(_TEST_LOG_DIR),
                "combined_log": {"enabled": True, "filename": "aerotwin.log", "backup_count": 1},
                "console": {"enabled": False},
                "loggers": {},
            }
        ),
        encoding="utf-8",
    )
    initialize_logging(config_path, use_platform_dir=False)


# Must run before any aerotwin module asks for a logger
_initialize_test_logging()


@pytest.fixture
def restore_test_logging():
    """Re-apply the test logging setup after a test reconfigures logging."""
    yield
    _initialize_test_logging()

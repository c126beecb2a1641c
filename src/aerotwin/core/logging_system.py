"""Logging system for the simulation core and its front ends.

Logging is configured from YAML, writes a combined log file in a
platform-aware location and rotates that file on every start.

Platform-specific log locations:
    - macOS: ~/Library/Logs/AeroTwin/aerotwin.log
    - Linux: ~/.aerotwin/logs/aerotwin.log
    - Windows: %AppData%/AeroTwin/Logs/aerotwin.log

Each start rotates logs, keeping the last 5 runs.

Typical usage example:
    from aerotwin.core.logging_system import get_logger

    logger = get_logger(__name__)
    logger.warning("Breaker %s tripped at %.1f A", name, current)
"""

import logging
import logging.handlers
import os
import platform
import time
from pathlib import Path
from typing import Any

import yaml

# Global configuration
_logging_config: dict[str, Any] = {}
_loggers_cache: dict[str, logging.Logger] = {}
_initialized = False


class LoggingError(Exception):
    """Raised when logging system operations fail."""


def get_platform_log_dir() -> Path:
    """Get platform-specific log directory.

    Returns:
        Path to the platform-appropriate log directory:
        - macOS: ~/Library/Logs/AeroTwin
        - Linux: ~/.aerotwin/logs
        - Windows: %AppData%/AeroTwin/Logs
    """
    system = platform.system()

    if system == "Darwin":  # macOS
        return Path.home() / "Library" / "Logs" / "AeroTwin"
    elif system == "Windows":
        appdata = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return appdata / "AeroTwin" / "Logs"
    else:  # Linux and other Unix-like systems
        return Path.home() / ".aerotwin" / "logs"


def rotate_logs(log_dir: Path, log_filename: str = "aerotwin.log", keep_count: int = 5) -> None:
    """Rotate logs on startup, keeping the last N runs.

    Renames the current log to ``<name>.1``, shifts older logs up by one and
    deletes logs beyond ``keep_count``.

    Args:
        log_dir: Directory containing log files.
        log_filename: Base name of the log file.
        keep_count: Number of old logs to keep.
    """
    log_file = log_dir / log_filename

    if not log_file.exists():
        return

    oldest_log = log_dir / f"{log_filename}.{keep_count}"
    if oldest_log.exists():
        oldest_log.unlink()

    for i in range(keep_count - 1, 0, -1):
        old_log = log_dir / f"{log_filename}.{i}"
        new_log = log_dir / f"{log_filename}.{i + 1}"
        if old_log.exists():
            old_log.rename(new_log)

    log_file.rename(log_dir / f"{log_filename}.1")


def initialize_logging(config_path: str | Path | None = None, use_platform_dir: bool = True) -> None:
    """Initialize the logging system from YAML configuration.

    Call once at startup before the simulation runs. Rotates the previous
    runs' logs.

    Args:
        config_path: Path to logging configuration YAML file.
            If None, uses default configuration.
        use_platform_dir: If True, use platform-specific log directory.
            If False, use directory from config (for development/testing).

    Raises:
        LoggingError: If the configuration file is missing or invalid.

    Examples:
        >>> initialize_logging("config/logging.yaml")
        >>> get_logger("aerotwin.main").info("Logging initialized")
    """
    global _logging_config, _initialized

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise LoggingError(f"Logging config file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as f:
                _logging_config = yaml.safe_load(f) or {}
        except Exception as e:
            raise LoggingError(f"Failed to load logging config: {e}") from e
    else:
        _logging_config = _get_default_config()

    if use_platform_dir:
        _logging_config["log_dir"] = str(get_platform_log_dir())

    _setup_directories()

    log_dir = Path(_logging_config.get("log_dir", "logs"))
    log_filename = _logging_config.get("combined_log", {}).get("filename", "aerotwin.log")
    keep_count = _logging_config.get("combined_log", {}).get("backup_count", 5)
    rotate_logs(log_dir, log_filename, keep_count)

    _configure_root_logger()

    # Loggers handed out before a reconfiguration keep their old overrides
    _loggers_cache.clear()
    _initialized = True


def _get_default_config() -> dict[str, Any]:
    """Get default logging configuration.

    Returns:
        Default logging configuration dictionary.
    """
    return {
        "version": 1,
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "date_format": "%Y-%m-%d %H:%M:%S",
        "log_dir": "logs",
        "combined_log": {
            "enabled": True,
            "filename": "aerotwin.log",
            "backup_count": 5,
        },
        "console": {
            "enabled": True,
            "level": "INFO",
        },
        "loggers": {},
    }


def _setup_directories() -> None:
    """Create log directories if they don't exist."""
    log_dir = Path(_logging_config.get("log_dir", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)


def _configure_root_logger() -> None:
    """Configure the root logger with handlers."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, filter in handlers

    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()

    if _logging_config.get("console", {}).get("enabled", True):
        console_handler = logging.StreamHandler()
        console_level = _logging_config.get("console", {}).get("level", "INFO")
        console_handler.setLevel(getattr(logging, console_level))
        console_handler.setFormatter(_get_formatter())
        root_logger.addHandler(console_handler)

    # Plain FileHandler: rotation happens once at startup, not by size
    if _logging_config.get("combined_log", {}).get("enabled", True):
        combined_config = _logging_config.get("combined_log", {})
        log_dir = Path(_logging_config.get("log_dir", "logs"))
        log_file = log_dir / combined_config.get("filename", "aerotwin.log")

        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_get_formatter())
        root_logger.addHandler(file_handler)


class MillisecondFormatter(logging.Formatter):
    """Formatter that appends milliseconds with a dot separator."""

    def formatTime(self, record, datefmt=None):
        ct = self.converter(record.created)
        if datefmt:
            s = time.strftime(datefmt, ct)
        else:
            s = time.strftime("%Y-%m-%d %H:%M:%S", ct)
        return f"{s}.{int(record.msecs):03d}"


def _get_formatter() -> logging.Formatter:
    fmt = _logging_config.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    datefmt = _logging_config.get("date_format", "%Y-%m-%d %H:%M:%S")
    return MillisecondFormatter(fmt, datefmt)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module or subsystem.

    Loggers are cached. Each logger can be tuned in the YAML ``loggers``
    section (level, dedicated rotating file, or disabled entirely).

    Args:
        name: Logger name, usually ``__name__``.

    Returns:
        Configured logger instance.

    Note:
        Use lazy formatting (%) instead of f-strings.
    """
    if not _initialized:
        initialize_logging()

    if name in _loggers_cache:
        return _loggers_cache[name]

    logger = logging.getLogger(name)

    logger_config = _logging_config.get("loggers", {}).get(name, {})

    if logger_config.get("enabled", True):
        if "level" in logger_config:
            logger.setLevel(getattr(logging, logger_config["level"]))

        if logger_config.get("dedicated_file", False):
            log_dir = Path(_logging_config.get("log_dir", "logs"))
            log_file = log_dir / f"{name}.log"

            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=logger_config.get("max_bytes", 10485760),
                backupCount=logger_config.get("backup_count", 5),
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(_get_formatter())
            logger.addHandler(file_handler)
    else:
        logger.disabled = True

    _loggers_cache[name] = logger
    return logger


def shutdown_logging() -> None:
    """Flush and close all handlers. Call at application shutdown."""
    global _initialized

    logging.shutdown()
    _loggers_cache.clear()
    _initialized = False

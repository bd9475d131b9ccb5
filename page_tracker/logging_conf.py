"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path

import structlog

LOG_DIR_ENV_VAR = "PAGE_TRACKER_LOG_DIR"
INFO_LOG_NAME = "page_tracker.log"
ERROR_LOG_NAME = "error.log"

_LOGGING_INITIALISED = False


def default_log_dir() -> Path:
    override = os.environ.get(LOG_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser().resolve()
    return Path(__file__).resolve().parents[1] / "logs"


def configure_logging(verbose: bool = False) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return application logger."""

    global _LOGGING_INITIALISED
    log_dir = default_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    info_log = log_dir / INFO_LOG_NAME
    error_log = log_dir / ERROR_LOG_NAME

    if not _LOGGING_INITIALISED:
        level = "DEBUG" if verbose else "INFO"
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "json": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "json",
                        "stream": "ext://sys.stderr",
                    },
                    "info_file": {
                        "class": "logging.FileHandler",
                        "level": "INFO",
                        "filename": str(info_log),
                        "encoding": "utf-8",
                        "formatter": "json",
                    },
                    "error_file": {
                        "class": "logging.FileHandler",
                        "level": "ERROR",
                        "filename": str(error_log),
                        "encoding": "utf-8",
                        "formatter": "json",
                    },
                },
                "loggers": {
                    "page_tracker": {
                        "handlers": ["console", "info_file", "error_file"],
                        "level": level,
                        "propagate": False,
                    },
                    # Per-request noise only when debugging
                    "httpx": {
                        "handlers": ["console"],
                        "level": "DEBUG" if verbose else "WARNING",
                        "propagate": False,
                    },
                },
            }
        )

        # Event dict becomes the message plus JSON extras on the stdlib record
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.render_to_log_kwargs,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger("page_tracker")


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:] if line_count > 0 else []


__all__ = ["configure_logging", "default_log_dir", "tail_log"]

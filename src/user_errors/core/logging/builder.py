# src/user_errors/core/logging/builder.py
"""
Logging builder: build a dictConfig mapping from Settings and apply it.

  - make_dict_config(settings): pure function returning the mapping.
  - setup_logging(settings): creates LOG_DIR when logging to files and applies the config.

Active handlers:
| LOG_TO_STDOUT | LOG_DIR set    | Handlers                       |
| ------------- | -------------- | ------------------------------ |
| true          | doesn't matter | console + error_console        |
| false         | not set        | console + error_console        |
| false         | set            | console + file + error_file    |
"""

from __future__ import annotations

from pathlib import Path
import logging
import logging.config
from user_errors.utils.logging import get_project_name

from .formatters import JsonFormatter, ColorFormatter
from .filters import RequestIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)


def _log_to_files(settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings) -> dict:
    """
    Build the dictConfig mapping using the provided settings.

    Loggers configured: root, uvicorn.error, uvicorn.access, sqlalchemy.engine.
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(),
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}

    if _log_to_files(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "uvicorn.error": {
                "level": settings.LOG_LEVEL,
                "handlers": list(handlers.keys()),
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            # SQL logging may contain sensitive data (bound parameters)
            "sqlalchemy.engine": {
                "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings) -> None:
    """
    Initialize logging from settings.
    """
    if _log_to_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    # keeps %(request_id)s safe for handlers added later without the filter
    logging.getLogger().addFilter(RequestIdFilter())

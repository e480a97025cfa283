"""
Core pytest configuration for the entire test suite.

Shared fixtures (fake driver errors, translators, listeners) live in
tests/test_fixtures/error_fixtures.py and are imported at the bottom of this module so
every test can use them without importing.
"""

from __future__ import annotations

# -------------------------------
# Standard library imports
# -------------------------------
import sys
import logging
from pathlib import Path
from types import SimpleNamespace

# -------------------------------
# Early logging tuning (IMPORTANT)
# -------------------------------
# Silence noisy third-party loggers before anything imports them.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "asyncio",
    "httpx",
    "urllib3",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# ------------------------------------------------------------------------------------------------
# PATH PATCHING
# ------------------------------------------------------------------------------------------------

# Ensure 'src' on sys.path so `import user_errors...` works without an install
SRC = Path(__file__).resolve().parents[2]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest

from user_errors.core.logging.builder import setup_logging


def make_logging_settings(**overrides) -> SimpleNamespace:
    """Lightweight, duck-typed settings object for logging tests (no environment needed)."""
    values = {
        "ENV": "testing",
        "LOG_LEVEL": "DEBUG",
        "LOG_FORMAT": "json",
        "LOG_TO_STDOUT": True,
        "LOG_DIR": None,
        "LOG_MAX_BYTES": 1_000_000,
        "LOG_BACKUP_COUNT": 1,
        "ENABLE_SQL_LOGGING": False,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install the application's logging configuration once for the whole session.
    caplog still works: pytest attaches its capture handler per test.
    """
    setup_logging(make_logging_settings())
    yield


# Shared error/translation fixtures
from .test_fixtures.error_fixtures import (  # noqa: E402,F401
    catalog,
    translator,
    listener,
)

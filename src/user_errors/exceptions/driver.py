"""
Helpers that read SQLSTATE codes and primary messages out of driver exceptions.

SQLAlchemy wraps the DBAPI exception in `DBAPIError.orig`; the driver-level object is
what carries the useful bits:

| Driver     | SQLSTATE attribute | Primary message                    |
| ---------- | ------------------ | ---------------------------------- |
| psycopg2   | `pgcode`           | `diag.message_primary`             |
| psycopg 3  | `sqlstate`         | `diag.message_primary`             |
| asyncpg    | `sqlstate`         | `str(exc)` (wrapped by SQLAlchemy) |

Everything here is best-effort and never raises: a missing attribute simply means
"not reported by this driver".
"""
import re
from enum import Enum

from sqlalchemy.exc import DBAPIError


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    RAISE_EXCEPTION = "P0001"


# "<class 'asyncpg.exceptions.RaiseError'>: message" (SQLAlchemy's asyncpg adapter)
_CLASS_WRAPPER_RE = re.compile(r"^<class '[^']+'>:\s*")

# "SQLSTATE[P0001]: Raise exception: 7 ERROR:  message" (PDO style) or "ERROR:  message"
_SQLSTATE_WRAPPER_RE = re.compile(r"^SQLSTATE\[[0-9A-Z]{5}\]:.*?ERROR:\s+", flags=re.IGNORECASE)
_ERROR_LABEL_RE = re.compile(r"^ERROR:\s+")


def _driver_error(exc: BaseException) -> BaseException:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return exc.orig
    return exc


def get_sqlstate(exc: BaseException) -> str | None:
    """
    Return the SQLSTATE reported for `exc` (or its wrapped DBAPI error), if any.
    """
    orig = _driver_error(exc)
    for attr in ("pgcode", "sqlstate"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return None


def get_primary_message(exc: BaseException) -> str:
    """
    Return the primary error message of `exc` without driver decorations.

    Prefers the diagnostics object when the driver has one, otherwise cleans up
    `str(orig)`: strips class/SQLSTATE/ERROR labels and drops the DETAIL/CONTEXT lines
    that follow the first line.
    """
    orig = _driver_error(exc)

    diag = getattr(orig, "diag", None)
    primary = getattr(diag, "message_primary", None) if diag is not None else None
    if primary:
        return str(primary)

    msg = str(orig)
    msg = _CLASS_WRAPPER_RE.sub("", msg, count=1)
    msg = _SQLSTATE_WRAPPER_RE.sub("", msg, count=1)
    msg = _ERROR_LABEL_RE.sub("", msg, count=1)
    return msg.split("\n", 1)[0]


__all__ = ["PostgresErrorCodes", "get_sqlstate", "get_primary_message"]

"""
Map user-errors raised inside the database to translated, app-level UserError exceptions.

A user-error is an exception raised on purpose by a database routine (function,
trigger, ...) as a last check, for example in PL/pgSQL:

    RAISE EXCEPTION 'app-exception: "order.out_of_stock"|product:%|available:%', p, n;

The listener decides whether a caught exception is such a user-error:
  1. its type is one of the watched exception types;
  2. when the driver reports a SQLSTATE, it is one of the accepted codes (P0001 by default);
  3. the primary message starts with the configured prefix.
It then parses the rest of the message, translates it and returns a UserError chained to
the original exception. Anything else is left alone so the caller can re-raise it unmodified.
"""
import importlib
import logging
from contextlib import asynccontextmanager
from typing import Iterable

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from user_errors.parser import MessageParser
from user_errors.translation import CatalogTranslator, Translator
from .base import AppError, DatabaseError, UserError
from .driver import PostgresErrorCodes, get_primary_message, get_sqlstate

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "app-exception: "
DEFAULT_EXCEPTION_TYPES: tuple[type[BaseException], ...] = (DBAPIError,)
DEFAULT_SQLSTATES: tuple[str, ...] = (PostgresErrorCodes.RAISE_EXCEPTION.value,)


def import_exception_type(path: str) -> type[BaseException]:
    """
    Resolve a dotted path like "sqlalchemy.exc.DBAPIError" to an exception class.
    """
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ValueError(f"Not a dotted path to an exception class: {path!r}")

    obj = getattr(importlib.import_module(module_name), attr, None)
    if not (isinstance(obj, type) and issubclass(obj, BaseException)):
        raise ValueError(f"{path!r} is not an exception class")
    return obj


class UserErrorListener:
    """
    Converts watched database exceptions carrying a user-error message into UserError.

    Args:
        translator: used to turn (key, parameters) into the final message.
        prefix: literal prefix marking a user-error message.
        exception_types: exception classes to inspect (isinstance check).
        sqlstates: accepted SQLSTATE codes for drivers that report one.
        parser: message parser; a fresh MessageParser by default.
    """

    def __init__(
        self,
        translator: Translator,
        prefix: str = DEFAULT_PREFIX,
        exception_types: Iterable[type[BaseException]] = DEFAULT_EXCEPTION_TYPES,
        sqlstates: Iterable[str] = DEFAULT_SQLSTATES,
        parser: MessageParser | None = None,
    ):
        self.translator = translator
        self.prefix = prefix
        self.exception_types = tuple(exception_types)
        self.sqlstates = frozenset(code.upper() for code in sqlstates)
        self.parser = parser or MessageParser()

    @classmethod
    def from_settings(cls, settings, translator: Translator | None = None) -> "UserErrorListener":
        """
        Build a listener from Settings. Without an explicit translator the catalog at
        USER_ERROR_CATALOG is loaded (or an empty catalog is used when none is set).
        """
        if translator is None:
            catalog = getattr(settings, "USER_ERROR_CATALOG", None)
            translator = CatalogTranslator.from_file(catalog) if catalog else CatalogTranslator()

        exception_types = tuple(import_exception_type(p) for p in settings.USER_ERROR_EXCEPTIONS)
        return cls(
            translator,
            prefix=settings.USER_ERROR_PREFIX,
            exception_types=exception_types,
            sqlstates=settings.USER_ERROR_SQLSTATES,
        )

    def extract_message(self, exc: BaseException) -> str | None:
        """
        Return the user-error text of `exc` with the prefix removed, or None when `exc`
        is not a user-error.
        """
        if not isinstance(exc, self.exception_types):
            return None

        sqlstate = get_sqlstate(exc)
        if sqlstate is not None and sqlstate.upper() not in self.sqlstates:
            logger.debug(
                "user_error.skipped_sqlstate",
                extra={"sqlstate": sqlstate, "exception_type": type(exc).__name__},
            )
            return None

        message = get_primary_message(exc)
        if not message.startswith(self.prefix):
            return None
        return message[len(self.prefix):]

    def convert(self, exc: BaseException) -> UserError | None:
        """
        Translate a user-error into a UserError chained to `exc`; None means "not ours".
        """
        text = self.extract_message(exc)
        if text is None:
            return None

        parsed = self.parser.parse(text)
        translated = self.translator.trans(parsed.key, parsed.parameters)

        # INFO: user-errors are expected, client-level outcomes
        logger.info(
            "user_error.translated",
            extra={
                "key": parsed.key,
                "parameter_names": list(parsed.parameters),
                "exception_type": type(exc).__name__,
            },
        )

        user_error = UserError(translated, key=parsed.key, parameters=parsed.parameters)
        user_error.__cause__ = exc
        return user_error

    def raise_for(self, exc: BaseException) -> None:
        """
        Raise the translated UserError for `exc` if it is a user-error; otherwise return.
        """
        user_error = self.convert(exc)
        if user_error is not None:
            raise user_error from exc


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def db_error_handler(
    db: AsyncSession,
    model_name: str | None = None,
    listener: UserErrorListener | None = None,
):
    """
    Usage:
        async with db_error_handler(self.db, "Order", listener):
            ... DB ops that may hit a user-error raised by a trigger ...
    Rolls back on error. User-errors become UserError, AppError passes through,
    everything else becomes a generic DatabaseError chained to the original.
    """
    try:
        yield
    except Exception as exc:
        try:
            await db.rollback()
        except Exception:
            # If rollback fails, that is unusual; log with stack at ERROR.
            logger.exception("Failed to rollback session after database error", extra={"model": model_name})

        if isinstance(exc, AppError):
            raise

        if listener is not None:
            listener.raise_for(exc)

        # Unexpected exceptions are logged with stack trace for diagnostics.
        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        raise DatabaseError(f"Failed to operate on {model_name or 'database'}") from exc


__all__ = [
    "UserErrorListener",
    "db_error_handler",
    "import_exception_type",
    "DEFAULT_PREFIX",
    "DEFAULT_SQLSTATES",
]

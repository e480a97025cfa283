# src/user_errors/api/error_handlers.py
"""
FastAPI exception handlers for user-errors and other app-level exceptions.

- DBAPIError reaching the framework is offered to the UserErrorListener. A user-error
  becomes a UserError response (422 with the translated message); anything else is
  re-raised unmodified so the server's default 500 handling applies.
- UserError / AppError raised by application code are rendered with .to_payload()
  and .http_status().
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging
from sqlalchemy.exc import DBAPIError
from user_errors.exceptions.base import AppError, UserError
from user_errors.exceptions.mapper import UserErrorListener

logger = logging.getLogger(__name__)


async def user_error_handler(request: Request, exc: UserError) -> JSONResponse:
    """
    422 with {"detail": <translated>, "code": "user_error", "key": ..., "parameters": {...}}
    """
    logger.info("UserError for %s %s: key=%s", request.method, request.url.path, exc.key)
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Fallback for other app errors; keeps driver internals out of the payload.
    """
    logger.warning("AppError for %s %s: %s", request.method, request.url.path, str(exc))
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


def make_dbapi_error_handler(listener: UserErrorListener):
    """
    Build a DBAPIError handler bound to `listener`.
    """

    async def dbapi_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
        user_error = listener.convert(exc)
        if user_error is None:
            # not a user-error: let it surface as-is
            raise exc
        return await user_error_handler(request, user_error)

    return dbapi_error_handler


# Helper to register all handlers on an app (call this from the app factory)
def register_exception_handlers(app: FastAPI, listener: UserErrorListener) -> None:
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(AppError, app_error_handler)
    for exc_type in listener.exception_types:
        app.add_exception_handler(exc_type, make_dbapi_error_handler(listener))

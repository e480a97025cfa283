# src/user_errors/main.py
"""
App factory wiring logging, request ids and user-error handling together.

    from user_errors.main import create_app
    app = create_app()

Routes that talk to the database need nothing special: a user-error raised by the
database surfaces as a DBAPIError and is turned into a 422 response with the translated
message. Repository code that wants the UserError itself can use
`db_error_handler(session, "Model", app.state.user_error_listener)`.
"""

import logging

from fastapi import FastAPI

from user_errors.api.error_handlers import register_exception_handlers
from user_errors.config.settings import Settings, get_settings
from user_errors.core.logging import RequestIDMiddleware, setup_logging
from user_errors.exceptions.mapper import UserErrorListener
from user_errors.translation import Translator

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, translator: Translator | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)

    listener = UserErrorListener.from_settings(settings, translator=translator)
    app.state.user_error_listener = listener
    register_exception_handlers(app, listener)

    logger.info(
        "app.user_errors_enabled",
        extra={"prefix": listener.prefix, "sqlstates": sorted(listener.sqlstates)},
    )
    return app

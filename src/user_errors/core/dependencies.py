from fastapi import Request

from user_errors.exceptions.mapper import UserErrorListener


def get_user_error_listener(request: Request) -> UserErrorListener:
    # Returns the listener installed by create_app()
    return request.app.state.user_error_listener

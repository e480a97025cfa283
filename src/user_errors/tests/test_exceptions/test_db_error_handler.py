from unittest.mock import AsyncMock

import pytest

from user_errors.exceptions.base import AppError, DatabaseError, UserError
from user_errors.exceptions.mapper import db_error_handler
from user_errors.tests.test_fixtures.error_fixtures import make_dbapi_error


@pytest.fixture()
def session():
    # only rollback() is used by the handler
    return AsyncMock()


async def test_no_error_no_rollback(session, listener):
    async with db_error_handler(session, "Order", listener):
        pass
    session.rollback.assert_not_awaited()


async def test_user_error_is_translated_and_rolled_back(session, listener):
    exc = make_dbapi_error("app-exception: order.out_of_stock|product:Chair|available:0")

    with pytest.raises(UserError) as info:
        async with db_error_handler(session, "Order", listener):
            raise exc

    session.rollback.assert_awaited_once()
    assert info.value.message == "Only 0 items of Chair left."
    assert info.value.__cause__ is exc


async def test_other_db_error_becomes_database_error(session, listener):
    exc = make_dbapi_error("connection reset", sqlstate="08006")

    with pytest.raises(DatabaseError) as info:
        async with db_error_handler(session, "Order", listener):
            raise exc

    assert info.value.__cause__ is exc
    assert "Order" in info.value.message
    assert "connection reset" not in info.value.message


async def test_app_errors_pass_through(session, listener):
    original = AppError("nope", error_code="user_error")

    with pytest.raises(AppError) as info:
        async with db_error_handler(session, "Order", listener):
            raise original

    assert info.value is original
    session.rollback.assert_awaited_once()


async def test_without_listener_user_errors_are_not_translated(session):
    with pytest.raises(DatabaseError):
        async with db_error_handler(session, "Order"):
            raise make_dbapi_error("app-exception: order.out_of_stock")


async def test_rollback_failure_does_not_hide_user_error(session, listener):
    session.rollback.side_effect = RuntimeError("connection closed")

    with pytest.raises(UserError):
        async with db_error_handler(session, "Order", listener):
            raise make_dbapi_error("app-exception: generic.denied")

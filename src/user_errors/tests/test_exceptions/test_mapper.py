import json
import logging
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError

from user_errors.exceptions.base import UserError
from user_errors.exceptions.mapper import UserErrorListener, import_exception_type
from user_errors.tests.test_fixtures.error_fixtures import FakeDriverError, make_dbapi_error
from user_errors.translation import CatalogTranslator


def test_user_error_is_translated(listener):
    exc = make_dbapi_error('app-exception: order.out_of_stock|product:"Chair ""Deluxe"""|available:3')

    user_error = listener.convert(exc)

    assert isinstance(user_error, UserError)
    assert user_error.message == 'Only 3 items of Chair "Deluxe" left.'
    assert user_error.key == "order.out_of_stock"
    assert user_error.parameters == {"%product%": 'Chair "Deluxe"', "%available%": "3"}
    assert user_error.__cause__ is exc


def test_unknown_key_is_used_as_message(listener):
    user_error = listener.convert(make_dbapi_error("app-exception: Stock for %sku% is gone|sku:A-1"))
    assert user_error.message == "Stock for A-1 is gone"


def test_message_without_prefix_is_ignored(listener):
    assert listener.convert(make_dbapi_error("division by zero")) is None


def test_other_sqlstate_is_ignored(listener):
    exc = make_dbapi_error("app-exception: order.out_of_stock", sqlstate="23505", exc_cls=IntegrityError)
    assert listener.convert(exc) is None


def test_sqlstate_comparison_is_case_insensitive(translator):
    listener = UserErrorListener(translator, sqlstates=["p0001"])
    assert listener.convert(make_dbapi_error("app-exception: generic.denied")) is not None


def test_unwatched_exception_type_is_ignored(listener):
    assert listener.convert(ValueError("app-exception: generic.denied")) is None


def test_exception_without_sqlstate_only_needs_the_prefix(translator):
    listener = UserErrorListener(translator, exception_types=(FakeDriverError,))
    user_error = listener.convert(FakeDriverError("app-exception: generic.denied"))
    assert user_error.message == "Not allowed."


def test_custom_prefix(translator):
    listener = UserErrorListener(translator, prefix="USER: ")
    assert listener.convert(make_dbapi_error("app-exception: generic.denied")) is None
    assert listener.convert(make_dbapi_error("USER: generic.denied")).message == "Not allowed."


def test_extract_message_strips_prefix(listener):
    assert listener.extract_message(make_dbapi_error("app-exception: k|x:1")) == "k|x:1"


def test_malformed_user_error_keeps_whole_text_as_key(listener):
    user_error = listener.convert(make_dbapi_error("app-exception: k|1bad:val"))
    assert user_error.key == "k|1bad:val"
    assert user_error.parameters == {}


def test_raise_for_chains_original(listener):
    exc = make_dbapi_error("app-exception: invoice.locked|number:2024-17")
    with pytest.raises(UserError) as info:
        listener.raise_for(exc)
    assert info.value.message == "Invoice 2024-17 is already booked."
    assert info.value.__cause__ is exc


def test_raise_for_returns_for_other_errors(listener):
    assert listener.raise_for(make_dbapi_error("deadlock detected", sqlstate="40P01")) is None


def test_translation_is_logged(listener, caplog):
    caplog.set_level(logging.INFO, logger="user_errors.exceptions.mapper")
    listener.convert(make_dbapi_error("app-exception: invoice.locked|number:7"))

    records = [r for r in caplog.records if r.getMessage() == "user_error.translated"]
    assert len(records) == 1
    assert records[0].key == "invoice.locked"
    assert records[0].parameter_names == ["%number%"]


# ----------------------------------------------------------------------------------------
# Construction from settings
# ----------------------------------------------------------------------------------------

def make_settings(**overrides):
    values = {
        "USER_ERROR_PREFIX": "app-exception: ",
        "USER_ERROR_SQLSTATES": ["P0001"],
        "USER_ERROR_EXCEPTIONS": ["sqlalchemy.exc.DBAPIError"],
        "USER_ERROR_CATALOG": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_from_settings_loads_catalog(tmp_path):
    catalog = tmp_path / "messages.json"
    catalog.write_text(json.dumps({"order": {"closed": "Order %id% is closed."}}), encoding="utf-8")

    listener = UserErrorListener.from_settings(make_settings(USER_ERROR_CATALOG=catalog))

    assert listener.exception_types == (DBAPIError,)
    assert listener.sqlstates == frozenset({"P0001"})
    assert listener.convert(make_dbapi_error("app-exception: order.closed|id:5")).message == "Order 5 is closed."


def test_from_settings_without_catalog_uses_keys():
    listener = UserErrorListener.from_settings(make_settings(USER_ERROR_PREFIX="E: "))
    assert isinstance(listener.translator, CatalogTranslator)
    assert listener.convert(make_dbapi_error("E: plain text")).message == "plain text"


def test_from_settings_prefers_explicit_translator(translator):
    listener = UserErrorListener.from_settings(make_settings(USER_ERROR_CATALOG="/does/not/exist.json"), translator)
    assert listener.translator is translator


def test_import_exception_type():
    assert import_exception_type("sqlalchemy.exc.IntegrityError") is IntegrityError


@pytest.mark.parametrize("path", ["DBAPIError", "builtins.len", "sqlalchemy.exc.NoSuchThing"])
def test_import_exception_type_rejects_non_exceptions(path):
    with pytest.raises(ValueError):
        import_exception_type(path)

from user_errors.exceptions.base import AppError, CatalogError, DatabaseError, UserError


def test_user_error_payload_uses_plain_parameter_names():
    exc = UserError("Only 3 left.", key="order.out_of_stock", parameters={"%available%": "3"})
    assert exc.http_status() == 422
    assert exc.to_payload() == {
        "detail": "Only 3 left.",
        "code": "user_error",
        "key": "order.out_of_stock",
        "parameters": {"available": "3"},
    }


def test_user_error_payload_without_parameters():
    payload = UserError("Not allowed.", key="generic.denied").to_payload()
    assert "parameters" not in payload


def test_status_codes():
    assert CatalogError("bad catalog").http_status() == 500
    assert DatabaseError().http_status() == 500
    assert AppError("plain").http_status() == 400
    assert AppError("odd", error_code="something_else").http_status() == 400


def test_str_includes_code():
    assert str(AppError("plain")) == "plain"
    assert str(DatabaseError("Failed")) == "Failed (code: database_error)"

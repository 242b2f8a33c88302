from shiftplan.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    StoreError,
    ValidationError,
    status_code_for,
)


def test_status_codes_prefer_most_specific_class():
    assert status_code_for(PermissionDeniedError("x")) == 403
    assert status_code_for(ConflictError("x")) == 409
    assert status_code_for(NotFoundError("x")) == 404
    assert status_code_for(ValidationError("x")) == 400
    assert status_code_for(StoreError("x")) == 503
    assert status_code_for(RuntimeError("x")) == 500


def test_validation_error_is_value_error():
    assert isinstance(ValidationError("x"), ValueError)

"""Tests for structured errors and their wire representation."""

import pytest

from crudcore.errors import (
    DeleteError,
    ErrorDefinitionError,
    NotFoundError,
    StoreError,
    StructuredError,
    UpdateError,
    ValidationError,
)


def test_error_kinds_carry_status_code_and_title():
    cases = [
        (ValidationError("bad"), "400", "10001", "Data validation"),
        (NotFoundError.item_by_id(7), "404", "10002", "Item not found"),
        (NotFoundError.item_by_attributes({"email": "x@y.com"}), "404", "10003", "Item not found"),
        (NotFoundError.items("boom"), "404", "10004", "Items not found"),
        (StoreError("bad"), "400", "10005", "Item cannot be stored"),
        (UpdateError("bad"), "400", "10006", "Item cannot be updated"),
        (DeleteError("bad"), "500", "10003", "Item cannot be deleted"),
    ]
    for error, status, code, title in cases:
        assert error.status == status
        assert error.code == code
        assert error.title == title


def test_not_found_details():
    assert NotFoundError.item_by_id(7).details == "Item with id 7 does not exist."
    assert NotFoundError.item_by_attributes({"email": "x@y.com"}).details == (
        'Item with attributes {"email": "x@y.com"} does not exist.'
    )


def test_to_dict_omits_unset_fields():
    error = ValidationError.from_messages(["The email field is required.", "The name field is required."])

    assert error.to_dict() == {
        "status": "400",
        "code": "10001",
        "title": "Data validation",
        "details": "The email field is required., The name field is required.",
    }


def test_fluent_setters_and_getters():
    error = (
        StructuredError()
        .set_status(409)
        .set_internal_code("20001")
        .set_title("Conflict")
        .set_details("Email already taken.")
        .set_path("/data/attributes/email")
        .set_meta({"retry": False})
    )

    assert error.get_status() == "409"
    assert error.status_code == 409
    assert error.get_internal_code() == "20001"
    assert error.get_path() == "/data/attributes/email"
    assert error.to_dict()["meta"] == {"retry": False}
    assert "href" not in error.to_dict()


def test_to_dict_requires_code_title_and_details():
    with pytest.raises(ErrorDefinitionError, match="code"):
        StructuredError("details", title="Title").to_dict()
    with pytest.raises(ErrorDefinitionError, match="title"):
        StructuredError("details", code="1").to_dict()
    with pytest.raises(ErrorDefinitionError, match="details"):
        StructuredError(code="1", title="Title").to_dict()


def test_detailed_kinds_require_details():
    with pytest.raises(ErrorDefinitionError):
        StoreError(None)


def test_status_code_falls_back_to_500():
    assert StructuredError().status_code == 500
    assert StructuredError(status="teapot").status_code == 500


def test_str_combines_title_and_details():
    assert str(UpdateError("Email already taken.")) == "Item cannot be updated: Email already taken."

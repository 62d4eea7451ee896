"""Tests for backend error body normalization."""

import pytest

from public_forms.services.server_validation import (
    extract_server_field_errors,
    get_first_server_field_error,
    get_server_error_message,
)


@pytest.mark.parametrize(
    "payload",
    [
        {"errors": {"email": "Email already registered"}},
        {"data": {"errors": {"email": "Email already registered"}}},
        {"details": {"errors": {"email": ["Email already registered"]}}},
        {"errors": {"values.email": {"message": "Email already registered"}}},
    ],
)
def test_extract_field_errors_from_known_shapes(payload):
    assert extract_server_field_errors(payload) == {"email": "Email already registered"}


def test_nested_errors_become_dotted_keys():
    payload = {"errors": {"guardian": {"phone": ["Required", "Must be E.164"]}}}
    assert extract_server_field_errors(payload) == {"guardian.phone": "Required, Must be E.164"}


def test_blank_messages_are_dropped():
    assert extract_server_field_errors({"errors": {"email": "  ", "name": []}}) == {}
    assert extract_server_field_errors({"message": "nope"}) == {}
    assert extract_server_field_errors(None) == {}


def test_server_error_message():
    assert get_server_error_message({"message": "Form closed"}) == "Form closed"
    assert get_server_error_message({"error": "Bad slug"}) == "Bad slug"
    assert get_server_error_message({"message": ""}, "Failed") == "Failed"
    assert get_server_error_message("oops", "Failed") == "Failed"


def test_first_field_error():
    assert get_first_server_field_error({"a": "first", "b": "second"}) == "first"
    assert get_first_server_field_error({}) is None

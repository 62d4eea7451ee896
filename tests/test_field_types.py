"""Tests for field type classification."""

import pytest

from public_forms.schemas.forms import FormField
from public_forms.services.field_types import (
    FieldCategory,
    classify,
    classify_field,
    is_phone_like,
    is_phone_type,
)


@pytest.mark.parametrize(
    "raw_type,expected",
    [
        ("dropdown", FieldCategory.SELECT),
        ("Select", FieldCategory.SELECT),
        ("radio_button", FieldCategory.RADIO),
        ("radio_buttons", FieldCategory.RADIO),
        ("multi_select", FieldCategory.CHECKBOX_GROUP),
        ("checkboxes", FieldCategory.CHECKBOX_GROUP),
        ("upload", FieldCategory.IMAGE),
        ("FILE", FieldCategory.IMAGE),
        ("multiline", FieldCategory.TEXTAREA),
        ("text_area", FieldCategory.TEXTAREA),
        ("email", FieldCategory.EMAIL),
        ("number", FieldCategory.NUMBER),
        ("date", FieldCategory.DATE),
        ("  Email  ", FieldCategory.EMAIL),
    ],
)
def test_classify_aliases(raw_type, expected):
    assert classify(raw_type) == expected


@pytest.mark.parametrize("raw_type", ["tel", "phone", "Phone Number", "contact_number", "mobile-number"])
def test_classify_phone_type_aliases(raw_type):
    assert is_phone_type(raw_type)
    assert classify(raw_type) == FieldCategory.PHONE


def test_unknown_or_empty_type_defaults_to_text():
    assert classify("") == FieldCategory.TEXT
    assert classify(None) == FieldCategory.TEXT
    assert classify("signature") == FieldCategory.TEXT


def test_phone_inferred_from_key_or_label_for_plain_types():
    assert classify("text", "whatsapp", "Mobile") == FieldCategory.PHONE
    assert classify("", "contact-number", "") == FieldCategory.PHONE
    assert classify("text", "guardian_telephone", "Guardian") == FieldCategory.PHONE


def test_explicit_categories_beat_phone_heuristic():
    assert classify("textarea", "phone_notes", "Phone notes") == FieldCategory.TEXTAREA
    assert classify("dropdown", "phone_type", "Phone type") == FieldCategory.SELECT
    assert classify("radio", "mobile_carrier", "Mobile carrier") == FieldCategory.RADIO
    assert classify("upload", "phone_photo", "Phone photo") == FieldCategory.IMAGE
    assert classify("email", "contact_email", "Contact number or email") == FieldCategory.EMAIL


def test_checkbox_shape_follows_options():
    assert classify("checkbox", has_options=True) == FieldCategory.CHECKBOX_GROUP
    assert classify("checkboxes", has_options=False) == FieldCategory.CHECKBOX_SINGLE
    assert classify("checkbox") == FieldCategory.CHECKBOX_SINGLE


def test_classify_field_uses_options():
    field = FormField(key="agree", label="I agree", type="checkbox")
    assert classify_field(field) == FieldCategory.CHECKBOX_SINGLE

    field = FormField(key="days", label="Days", type="checkbox", options=["Sat", "Sun"])
    assert classify_field(field) == FieldCategory.CHECKBOX_GROUP


def test_classify_is_idempotent():
    inputs = [("Phone Number", "x", "y"), ("text", "mobile", ""), ("dropdown", "", ""), ("", "", "")]
    for args in inputs:
        assert classify(*args) == classify(*args)


def test_is_phone_like_ignores_unrelated_text():
    assert not is_phone_like("first_name", "First name")
    assert is_phone_like("", "Telephone")

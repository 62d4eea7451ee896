"""Value store and client-side validation for public forms."""

import math
import re
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Iterable, Union

from fastapi import UploadFile

from public_forms.core.config import settings
from public_forms.schemas.forms import FormField
from public_forms.services.field_types import FieldCategory, classify_field
from public_forms.utils.datetime_parsing import is_valid_date
from public_forms.utils.file_upload import file_extension, get_upload_file_size
from public_forms.utils.normalization import compose_phone, is_e164


FieldValue = Union[str, bool, list[str], UploadFile, None]
Values = dict[str, FieldValue]

ACCEPTED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
ACCEPTED_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NUMBER_RE = re.compile(r"^[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?$")

NOTHING_FILLED_ERROR = "Please enter at least one field before submitting."


class ClientValidationError(Exception):
    """The form failed client-side validation and must not be submitted."""

    def __init__(self, errors: dict[str, str], form_error: str | None = None):
        self.errors = errors
        self.form_error = form_error
        super().__init__(form_error or "Please complete the required fields.")


@dataclass
class FormValidationResult:
    errors: dict[str, str]
    any_filled: bool

    @property
    def is_valid(self) -> bool:
        return self.any_filled and not self.errors


def initial_value(field: FormField) -> FieldValue:
    category = classify_field(field)
    if category == FieldCategory.IMAGE:
        return None
    if category == FieldCategory.CHECKBOX_GROUP:
        return []
    if category == FieldCategory.CHECKBOX_SINGLE:
        return False
    return ""


def build_initial_values(fields: Iterable[FormField]) -> Values:
    return {f.key: initial_value(f) for f in fields}


def _scalar_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def validate_image_file(file: UploadFile, max_bytes: int | None = None) -> str | None:
    max_bytes = max_bytes if max_bytes is not None else settings.MAX_IMAGE_BYTES
    content_type = (file.content_type or "").lower()
    if content_type not in ACCEPTED_IMAGE_TYPES:
        if file_extension(file.filename) not in ACCEPTED_IMAGE_EXTENSIONS:
            return "Unsupported file type. Use JPEG, PNG, or WebP."
    if get_upload_file_size(file) > max_bytes:
        max_mb = max_bytes / (1024 * 1024)
        return f"Image must be {max_mb:g}MB or smaller."
    return None


def validate_field(field: FormField, value: FieldValue, *, max_image_bytes: int | None = None) -> str | None:
    """Return the error message for one field, or None when the value is acceptable."""
    category = classify_field(field)
    label = field.label or "This field"
    required_error = f"{label} is required."

    if category == FieldCategory.IMAGE:
        if isinstance(value, UploadFile):
            return validate_image_file(value, max_image_bytes)
        return required_error if field.required else None

    if category == FieldCategory.CHECKBOX_GROUP:
        selected = value if isinstance(value, list) else []
        if field.required and not selected:
            return required_error
        return None

    if category == FieldCategory.CHECKBOX_SINGLE:
        if field.required and value is not True:
            return required_error
        return None

    raw = _scalar_text(value)
    if not raw:
        return required_error if field.required else None

    if category == FieldCategory.EMAIL and not EMAIL_RE.match(raw):
        return "Please enter a valid email address."
    if category == FieldCategory.PHONE and not is_e164(raw):
        return "Please enter a valid phone number (include country code), e.g. +2348012345678."
    if category == FieldCategory.NUMBER:
        if not NUMBER_RE.match(raw) or not math.isfinite(float(raw)):
            return "Please enter a valid number."
    if category == FieldCategory.DATE and not is_valid_date(raw):
        return "Please enter a valid date."
    return None


def is_filled(field: FormField, value: FieldValue) -> bool:
    """Category-aware emptiness, ignoring the required flag."""
    category = classify_field(field)
    if category == FieldCategory.IMAGE:
        return isinstance(value, UploadFile)
    if category == FieldCategory.CHECKBOX_GROUP:
        return isinstance(value, list) and len(value) > 0
    if category == FieldCategory.CHECKBOX_SINGLE:
        return value is True
    return bool(_scalar_text(value))


def validate_form(
    fields: Iterable[FormField], values: Values, *, max_image_bytes: int | None = None
) -> FormValidationResult:
    errors: dict[str, str] = {}
    any_filled = False
    for f in fields:
        value = values.get(f.key)
        if is_filled(f, value):
            any_filled = True
        error = validate_field(f, value, max_image_bytes=max_image_bytes)
        if error:
            errors[f.key] = error
    return FormValidationResult(errors=errors, any_filled=any_filled)


@dataclass
class FormState:
    """Values plus touched/error bookkeeping for one rendered form."""

    values: Values = dataclass_field(default_factory=dict)
    touched: dict[str, bool] = dataclass_field(default_factory=dict)
    errors: dict[str, str] = dataclass_field(default_factory=dict)
    form_error: str | None = None
    max_image_bytes: int | None = None

    @classmethod
    def from_fields(cls, fields: Iterable[FormField], **kwargs: Any) -> "FormState":
        return cls(values=build_initial_values(fields), **kwargs)

    def reset(self, fields: Iterable[FormField]) -> None:
        self.values = build_initial_values(fields)
        self.touched = {}
        self.errors = {}
        self.form_error = None

    def set_value(self, key: str, next_value: FieldValue) -> None:
        self.values[key] = next_value
        self.form_error = None
        self.touched[key] = True

    def update_field(self, field: FormField, next_value: FieldValue) -> str | None:
        """Store an edit and re-validate the field. Returns the field's error, if any."""
        self.touched[field.key] = True

        if classify_field(field) == FieldCategory.IMAGE and isinstance(next_value, UploadFile):
            image_error = validate_image_file(next_value, self.max_image_bytes)
            if image_error:
                self.values[field.key] = None
                self.errors[field.key] = image_error
                return image_error

        error = validate_field(field, next_value, max_image_bytes=self.max_image_bytes)
        if error:
            self.errors[field.key] = error
        else:
            self.errors.pop(field.key, None)
        self.set_value(field.key, next_value)
        return error

    def toggle_option(self, field: FormField, option_value: str, checked: bool) -> str | None:
        current = self.values.get(field.key)
        selected = list(current) if isinstance(current, list) else []
        if checked and option_value not in selected:
            selected.append(option_value)
        elif not checked:
            selected = [item for item in selected if item != option_value]
        return self.update_field(field, selected)

    def set_phone(self, field: FormField, dial_code: str, raw_national: str) -> str | None:
        return self.update_field(field, compose_phone(dial_code, raw_national))

    def validate_all(self, fields: list[FormField]) -> bool:
        """Validate for a submit attempt; every field becomes touched."""
        result = validate_form(fields, self.values, max_image_bytes=self.max_image_bytes)
        for f in fields:
            self.touched[f.key] = True
        self.errors = result.errors

        if not result.any_filled:
            self.form_error = NOTHING_FILLED_ERROR
            return False
        self.form_error = None
        return not result.errors

    def apply_server_errors(self, server_errors: dict[str, str]) -> None:
        """Server messages replace client errors for the same keys and show immediately."""
        self.errors = {**self.errors, **server_errors}
        for key in server_errors:
            self.touched[key] = True

    def visible_error(self, key: str) -> str | None:
        if not self.touched.get(key):
            return None
        return self.errors.get(key)

"""Field type classification for public form fields.

Administrators author field types as free text, so the same behavior shows up
under many spellings ("dropdown", "radio_buttons", "Phone Number", ...). Every
raw type is mapped to exactly one ``FieldCategory`` here; no other module
should look at ``FormField.type`` directly.
"""

import re
from enum import Enum

from public_forms.schemas.forms import FormField


class FieldCategory(str, Enum):
    """Canonical field behaviors."""

    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX_GROUP = "checkbox-group"
    CHECKBOX_SINGLE = "checkbox-single"
    IMAGE = "image"


_ALIASES: dict[str, FieldCategory] = {
    "textarea": FieldCategory.TEXTAREA,
    "text_area": FieldCategory.TEXTAREA,
    "multiline": FieldCategory.TEXTAREA,
    "select": FieldCategory.SELECT,
    "dropdown": FieldCategory.SELECT,
    "radio": FieldCategory.RADIO,
    "radio_group": FieldCategory.RADIO,
    "radio_button": FieldCategory.RADIO,
    "radio_buttons": FieldCategory.RADIO,
    "checkboxes": FieldCategory.CHECKBOX_GROUP,
    "multi_select": FieldCategory.CHECKBOX_GROUP,
    "multiselect": FieldCategory.CHECKBOX_GROUP,
    "checkbox_group": FieldCategory.CHECKBOX_GROUP,
    "checkbox": FieldCategory.CHECKBOX_SINGLE,
    "check_box": FieldCategory.CHECKBOX_SINGLE,
    "image": FieldCategory.IMAGE,
    "file": FieldCategory.IMAGE,
    "upload": FieldCategory.IMAGE,
    "email": FieldCategory.EMAIL,
    "number": FieldCategory.NUMBER,
    "date": FieldCategory.DATE,
}

_PHONE_TYPES = {"tel", "phone", "mobile", "contact"}
_PHONE_TYPE_TOKENS = {
    "tel",
    "phone",
    "mobile",
    "contact",
    "phonenumber",
    "contactnumber",
    "mobilenumber",
    "telephonenumber",
    "telnumber",
    "telephone",
}
_PHONE_LIKE_RE = re.compile(r"(phone|mobile|tel|telephone|contact[-_\s]?number)")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")

CHECKBOX_CATEGORIES = frozenset({FieldCategory.CHECKBOX_GROUP, FieldCategory.CHECKBOX_SINGLE})


def normalize_field_type(value: str | None) -> str:
    return (value or "").strip().lower()


def is_phone_type(raw_type: str | None) -> bool:
    normalized = normalize_field_type(raw_type)
    if not normalized:
        return False
    if normalized in _PHONE_TYPES:
        return True
    return _NON_ALNUM_RE.sub("", normalized) in _PHONE_TYPE_TOKENS


def is_phone_like(key: str, label: str) -> bool:
    return _PHONE_LIKE_RE.search(f"{key} {label}".lower()) is not None


def classify(
    raw_type: str | None,
    key: str = "",
    label: str = "",
    *,
    has_options: bool | None = None,
) -> FieldCategory:
    """Map a raw field type to its canonical category.

    ``has_options`` settles the checkbox shape: a checkbox alias with options
    collects a list, one without options is a single boolean. When it is not
    given, the alias alone decides.
    """
    normalized = normalize_field_type(raw_type)
    category = _ALIASES.get(normalized)

    if category in CHECKBOX_CATEGORIES and has_options is not None:
        return FieldCategory.CHECKBOX_GROUP if has_options else FieldCategory.CHECKBOX_SINGLE
    if category is not None and category not in (
        FieldCategory.EMAIL,
        FieldCategory.NUMBER,
        FieldCategory.DATE,
    ):
        return category

    if is_phone_type(normalized):
        return FieldCategory.PHONE
    if category is not None:
        return category
    if is_phone_like(key or "", label or ""):
        return FieldCategory.PHONE
    return FieldCategory.TEXT


def classify_field(field: FormField) -> FieldCategory:
    return classify(field.type, field.key, field.label, has_options=field.has_options)

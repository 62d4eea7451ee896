"""Confirmation content after a successful submission.

Identity tokens (name, email, phone) are found heuristically: the first field,
in schema order, whose key or label mentions a keyword and whose submitted
value is non-empty wins. Two fields that both mention "name" resolve to the
earlier one.
"""

import re
from dataclasses import dataclass
from typing import Iterable

from fastapi import UploadFile

from public_forms.schemas.forms import EventSummary, FormField, FormSchema, FormSettings
from public_forms.services.field_types import is_phone_type
from public_forms.services.form_validation_service import FieldValue, Values
from public_forms.utils.datetime_parsing import format_date
from public_forms.utils.normalization import collapse_whitespace, format_pretty_phone

# Shared token pattern: {{ token }} (whitespace allowed, dots and dashes in names)
TOKEN_PATTERN = re.compile(r"{{\s*([\w.-]+)\s*}}")

NAME_KEYWORDS = ("full name", "name")
EMAIL_KEYWORDS = ("email",)
PHONE_KEYWORDS = ("phone", "mobile", "tel", "contact", "contactnumber")
PHONE_DETAIL_KEYWORDS = ("phone", "mobile", "tel", "contact")
PREFERRED_DETAIL_KEYWORDS = (
    "full name",
    "name",
    "email",
    "phone",
    "mobile",
    "tel",
    "contact",
    "address",
)
MAX_SUCCESS_DETAILS = 8

DEFAULT_SUCCESS_TITLE = "Thank you for registering"
DEFAULT_SUCCESS_SUBTITLE = "for {{formTitle}}"
DEFAULT_SUCCESS_MESSAGE = "We would love to see you."


@dataclass(frozen=True)
class SuccessDetail:
    label: str
    value: str


@dataclass(frozen=True)
class SuccessMessage:
    title: str
    subtitle: str
    description: str


def value_to_text(value: FieldValue) -> str:
    if isinstance(value, bool):
        return "Yes" if value else ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    if isinstance(value, UploadFile):
        return value.filename or ""
    return ""


def field_matches(field: FormField, keywords: Iterable[str]) -> bool:
    haystack = f"{field.key} {field.label}".lower()
    return any(keyword in haystack for keyword in keywords)


def find_value_by_keywords(fields: Iterable[FormField], keywords: Iterable[str], values: Values) -> str:
    keywords = tuple(keywords)
    for f in fields:
        if not field_matches(f, keywords):
            continue
        text = value_to_text(values.get(f.key))
        if text:
            return text
    return ""


def resolve_success_tokens(
    schema: FormSchema, event: EventSummary | None, values: Values
) -> dict[str, str]:
    form_title = schema.title or ""
    event = event or EventSummary()
    phone_raw = find_value_by_keywords(schema.fields, PHONE_KEYWORDS, values)

    return {
        "formTitle": form_title,
        "eventTitle": event.title if event.title is not None else form_title,
        "eventDate": format_date(event.date, schema.settings.date_format),
        "eventTime": event.time or "",
        "eventLocation": event.location or "",
        "name": find_value_by_keywords(schema.fields, NAME_KEYWORDS, values),
        "email": find_value_by_keywords(schema.fields, EMAIL_KEYWORDS, values),
        "phone": format_pretty_phone(phone_raw) if phone_raw else "",
    }


def build_success_details(
    schema: FormSchema,
    event: EventSummary | None,
    values: Values,
    *,
    limit: int = MAX_SUCCESS_DETAILS,
) -> list[SuccessDetail]:
    """Contact-like answers first, then event metadata, then everything else."""
    preferred: list[SuccessDetail] = []
    event_details: list[SuccessDetail] = []
    others: list[SuccessDetail] = []

    if event is not None:
        if event.date:
            formatted = format_date(event.date, schema.settings.date_format)
            if formatted:
                event_details.append(SuccessDetail("Event Date", formatted))
        if event.time:
            event_details.append(SuccessDetail("Event Time", event.time))
        if event.location:
            event_details.append(SuccessDetail("Location", event.location))

    for f in schema.ordered_fields():
        text = value_to_text(values.get(f.key))
        if not text:
            continue
        if is_phone_type(f.type) or field_matches(f, PHONE_DETAIL_KEYWORDS):
            text = format_pretty_phone(text)

        detail = SuccessDetail(f.label or f.key, text)
        if field_matches(f, PREFERRED_DETAIL_KEYWORDS):
            preferred.append(detail)
        else:
            others.append(detail)

    return [*preferred, *event_details, *others][:limit]


def render_template(template: str, tokens: dict[str, str]) -> str:
    rendered = TOKEN_PATTERN.sub(lambda match: tokens.get(match.group(1)) or "", template or "")
    return collapse_whitespace(rendered)


def render_success_message(settings: FormSettings, tokens: dict[str, str]) -> SuccessMessage:
    return SuccessMessage(
        title=render_template(settings.success_title or DEFAULT_SUCCESS_TITLE, tokens),
        subtitle=render_template(settings.success_subtitle or DEFAULT_SUCCESS_SUBTITLE, tokens),
        description=render_template(settings.success_message or DEFAULT_SUCCESS_MESSAGE, tokens),
    )

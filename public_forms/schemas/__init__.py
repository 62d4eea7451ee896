"""Pydantic schemas."""

from public_forms.schemas.forms import (
    EventSummary,
    FormDesign,
    FormField,
    FormFieldOption,
    FormSchema,
    FormSettings,
    PublicFormPayload,
    SubmissionResult,
)

__all__ = [
    "EventSummary",
    "FormDesign",
    "FormField",
    "FormFieldOption",
    "FormSchema",
    "FormSettings",
    "PublicFormPayload",
    "SubmissionResult",
]

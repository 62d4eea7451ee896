"""Schemas for public forms, linked events, and submissions."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _PayloadModel(BaseModel):
    """Backend payloads are camelCase; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class FormFieldOption(_PayloadModel):
    label: str
    value: str


class FormField(_PayloadModel):
    key: str = Field(..., min_length=1)
    label: str = ""
    type: str = ""
    required: bool = False
    options: list[FormFieldOption] | None = None
    order: int = 0

    @field_validator("type", mode="before")
    @classmethod
    def _type_or_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_plain_options(cls, value: Any) -> Any:
        # Some older schemas store options as bare strings.
        if not isinstance(value, list):
            return value
        return [
            {"label": item, "value": item} if isinstance(item, str) else item for item in value
        ]

    @property
    def has_options(self) -> bool:
        return bool(self.options)


class FormDesign(_PayloadModel):
    cover_image_url: str | None = None
    cta_button_label: str | None = None
    privacy_copy: str | None = None
    footer_note: str | None = None


class FormSettings(_PayloadModel):
    form_type: str | None = None
    date_format: str | None = None
    success_title: str | None = None
    success_subtitle: str | None = None
    success_message: str | None = None
    submit_button_text: str | None = None
    submit_button_icon: str | None = None
    closes_at: str | None = None
    expires_at: str | None = None
    intro_bullets: list[str] | None = None
    intro_bullet_subtexts: list[str] | None = None
    footer_text: str | None = None
    design: FormDesign | None = None


class FormSchema(_PayloadModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""
    fields: list[FormField] = Field(default_factory=list)
    settings: FormSettings = Field(default_factory=FormSettings)

    @field_validator("fields", mode="before")
    @classmethod
    def _fields_or_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("settings", mode="before")
    @classmethod
    def _settings_or_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("fields")
    @classmethod
    def _unique_keys(cls, value: list[FormField]) -> list[FormField]:
        seen: set[str] = set()
        for field in value:
            if field.key in seen:
                raise ValueError(f"Duplicate field key: {field.key}")
            seen.add(field.key)
        return value

    def ordered_fields(self) -> list[FormField]:
        """Fields by `order`; ties keep their array position."""
        return sorted(self.fields, key=lambda field: field.order)


class EventSummary(_PayloadModel):
    title: str | None = None
    date: str | None = None
    time: str | None = None
    location: str | None = None
    image: str | None = None
    banner_image: str | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_or_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class PublicFormPayload(_PayloadModel):
    form: FormSchema
    event: EventSummary | None = None


class SubmissionResult(_PayloadModel):
    message: str | None = None
    data: Any = None

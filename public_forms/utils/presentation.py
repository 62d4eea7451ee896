"""Presentation helpers for the public form page chrome.

These pick administrator-configured copy when present and fall back to the
portal defaults otherwise.
"""

from __future__ import annotations

from public_forms.core.clock import Clock
from public_forms.schemas.forms import EventSummary, FormSchema, FormSettings
from public_forms.utils.datetime_parsing import as_aware, parse_datetime_value


FORM_TYPE_LABELS = {
    "registration": "REGISTRATION",
    "event": "EVENT",
    "membership": "MEMBERSHIP",
    "workforce": "WORKFORCE",
    "leadership": "LEADERSHIP",
    "application": "APPLICATION",
    "contact": "CONTACT",
    "general": "FORM",
}
DEFAULT_FORM_TYPE = "registration"
DEFAULT_SUBMIT_LABEL = "Submit Registration"
DEFAULT_FOOTER_TEXT = "Powered by Wisdom Church"
DEFAULT_PRIVACY_COPY = "By submitting, you confirm your details are accurate."
DEFAULT_INTRO_BULLETS = (
    "Smooth check-in",
    "Engaging sessions",
    "Friendly community",
    "Practical takeaways",
)
MAX_EVENT_TAG_BULLETS = 5

SUBMIT_ICON_GLYPHS = {
    "check": "✓",
    "send": "➤",
    "calendar": "📅",
    "cursor": "➚",
}

LOADING_MESSAGE = "Loading form…"
RETRYING_MESSAGE = "Connecting… retrying automatically"


def _first_text(*candidates: str | None) -> str:
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return ""


def form_type_label(settings: FormSettings) -> str:
    normalized = (settings.form_type or DEFAULT_FORM_TYPE).strip().lower()
    return FORM_TYPE_LABELS.get(normalized, "FORM")


def page_header_title(schema: FormSchema) -> str:
    """E.g. "REGISTRATION - Youth Summit"."""
    title = _first_text(schema.title) or "Form"
    return f"{form_type_label(schema.settings)} - {title}"


def submit_button_label(settings: FormSettings) -> str:
    design = settings.design
    return (
        _first_text(settings.submit_button_text, design.cta_button_label if design else None)
        or DEFAULT_SUBMIT_LABEL
    )


def submit_button_icon(settings: FormSettings) -> str | None:
    """Glyph for the configured submit icon; unknown names and "none" get no icon."""
    return SUBMIT_ICON_GLYPHS.get((settings.submit_button_icon or "").strip().lower())


def footer_text(settings: FormSettings) -> str:
    design = settings.design
    return _first_text(settings.footer_text, design.footer_note if design else None) or DEFAULT_FOOTER_TEXT


def privacy_copy(settings: FormSettings) -> str:
    if settings.design and settings.design.privacy_copy is not None:
        return settings.design.privacy_copy
    return DEFAULT_PRIVACY_COPY


def intro_bullets(settings: FormSettings, event: EventSummary | None) -> list[str]:
    if settings.intro_bullets is not None:
        return [item.strip() for item in settings.intro_bullets if item.strip()]
    if event is not None and event.tags:
        return event.tags[:MAX_EVENT_TAG_BULLETS]
    return list(DEFAULT_INTRO_BULLETS)


def intro_bullet_subtexts(settings: FormSettings) -> list[str]:
    """Subtexts pair with intro bullets by position; missing entries mean no subtext."""
    if settings.intro_bullet_subtexts is None:
        return []
    return [item.strip() for item in settings.intro_bullet_subtexts]


def banner_url(settings: FormSettings, event: EventSummary | None) -> str | None:
    design_cover = settings.design.cover_image_url if settings.design else None
    if design_cover:
        return design_cover
    if event is not None:
        return event.banner_image or event.image or None
    return None


def is_form_closed(settings: FormSettings, clock: Clock) -> bool:
    """Closed once either closesAt or expiresAt has passed."""
    now = as_aware(clock.now())
    for raw in (settings.closes_at, settings.expires_at):
        parsed = parse_datetime_value(raw)
        if parsed is not None and now > as_aware(parsed):
            return True
    return False


def load_status_message(load_error: str | None, retrying: bool) -> str:
    if load_error:
        return load_error
    return RETRYING_MESSAGE if retrying else LOADING_MESSAGE

"""CLI tools for inspecting and submitting public forms."""

import anyio
import click
import httpx
from fastapi import UploadFile

from public_forms.core.async_utils import run_async
from public_forms.core.config import settings
from public_forms.services.field_types import FieldCategory, classify_field
from public_forms.services.form_validation_service import ClientValidationError, FieldValue
from public_forms.services.public_form_session import PublicFormSession
from public_forms.services.submission_service import ServerValidationError, SubmissionError
from public_forms.utils.file_upload import open_upload
from public_forms.utils.presentation import (
    banner_url,
    footer_text,
    intro_bullet_subtexts,
    intro_bullets,
    page_header_title,
    privacy_copy,
    submit_button_icon,
    submit_button_label,
)

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def _split_assignment(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise click.BadParameter(f"Expected key=value, got '{raw}'")
    return key.strip(), value


def _coerce_value(category: FieldCategory, raw: str) -> FieldValue:
    """Turn command-line text into the value shape the field expects."""
    if category == FieldCategory.CHECKBOX_GROUP:
        return [part.strip() for part in raw.split(",") if part.strip()]
    if category == FieldCategory.CHECKBOX_SINGLE:
        return raw.strip().lower() in _TRUE_VALUES
    return raw


async def _load(session: PublicFormSession) -> None:
    try:
        await session.load()
    finally:
        session.unmount()


def build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.SUBMIT_TIMEOUT_SECONDS)


def _make_session(slug: str, client: httpx.AsyncClient, origins: list[str]) -> PublicFormSession:
    return PublicFormSession(slug, client=client, origins=origins)


@click.group()
@click.option(
    "--origin",
    "origins",
    multiple=True,
    help="API origin to try (repeatable). Defaults to the configured origins.",
)
@click.option("--timeout", default=60.0, show_default=True, help="Seconds to keep retrying the form load")
@click.pass_context
def cli(ctx: click.Context, origins: tuple[str, ...], timeout: float):
    """Public form tools."""
    ctx.ensure_object(dict)
    ctx.obj["origins"] = list(origins) or settings.fetch_origins
    ctx.obj["timeout"] = timeout


@cli.command()
@click.argument("slug")
@click.pass_context
def show(ctx: click.Context, slug: str):
    """
    Print a form's fields and how each one is rendered.

    Example:
        public-forms show youth-camp-2026
    """

    async def _show() -> PublicFormSession:
        async with build_client() as client:
            session = _make_session(slug, client, ctx.obj["origins"])
            await _load(session)
            return session

    try:
        session = run_async(_show(), timeout=ctx.obj["timeout"])
    except TimeoutError:
        click.echo(f"❌ Could not load form '{slug}' before the timeout")
        ctx.exit(1)

    schema = session.payload.form
    form_settings = schema.settings
    event = session.payload.event
    click.echo(page_header_title(schema))
    banner = banner_url(form_settings, event)
    if banner:
        click.echo(f"  Banner: {banner}")
    subtexts = intro_bullet_subtexts(form_settings)
    for index, bullet in enumerate(intro_bullets(form_settings, event)):
        sub = subtexts[index] if index < len(subtexts) else ""
        click.echo(f"  • {bullet}" + (f" ({sub})" if sub else ""))
    for f in schema.ordered_fields():
        marker = "*" if f.required else " "
        click.echo(f" {marker} {f.key:<24} {classify_field(f).value:<16} {f.label}")
        for option in f.options or []:
            click.echo(f"     - {option.value} ({option.label})")
    if session.is_closed:
        click.echo("⚠ This registration is closed.")
    icon = submit_button_icon(form_settings)
    click.echo(f"→ {submit_button_label(form_settings)}" + (f" {icon}" if icon else ""))
    copy = privacy_copy(form_settings)
    if copy:
        click.echo(copy)
    click.echo(footer_text(form_settings))


@cli.command()
@click.argument("slug")
@click.option("-v", "--value", "values", multiple=True, help="Field value as key=value (repeatable)")
@click.option("-f", "--file", "files", multiple=True, help="Image upload as key=path (repeatable)")
@click.pass_context
def submit(ctx: click.Context, slug: str, values: tuple[str, ...], files: tuple[str, ...]):
    """
    Fill in and submit a public form.

    Checkbox groups take comma separated option values.

    Example:
        public-forms submit youth-camp-2026 -v full_name="Jane Doe" -v email=jane@example.com
    """
    assignments = [_split_assignment(raw) for raw in values]
    uploads = [_split_assignment(raw) for raw in files]

    async def _submit():
        opened: list[UploadFile] = []
        try:
            async with build_client() as client:
                session = _make_session(slug, client, ctx.obj["origins"])
                with anyio.fail_after(ctx.obj["timeout"]):
                    await _load(session)

                for key, raw in assignments:
                    field = session.get_field(key)
                    session.update(key, _coerce_value(classify_field(field), raw))
                for key, path in uploads:
                    upload = open_upload(path)
                    opened.append(upload)
                    session.update(key, upload)

                return await session.submit()
        finally:
            for upload in opened:
                await upload.close()

    try:
        success = run_async(_submit())
    except KeyError as e:
        click.echo(f"❌ Unknown field: {e.args[0]}")
        ctx.exit(1)
    except TimeoutError:
        click.echo(f"❌ Could not load form '{slug}' before the timeout")
        ctx.exit(1)
    except ClientValidationError as e:
        if e.form_error:
            click.echo(f"❌ {e.form_error}")
        for key, message in e.errors.items():
            click.echo(f"❌ {key}: {message}")
        ctx.exit(1)
    except ServerValidationError as e:
        for key, message in e.field_errors.items():
            click.echo(f"❌ {key}: {message}")
        ctx.exit(1)
    except SubmissionError as e:
        click.echo(f"❌ {e}")
        ctx.exit(1)

    message = success.message
    click.echo(f"✓ {message.title}")
    if message.subtitle:
        click.echo(f"  {message.subtitle}")
    if message.description:
        click.echo(f"  {message.description}")
    for detail in success.details:
        click.echo(f"  {detail.label}: {detail.value}")


if __name__ == "__main__":
    cli()

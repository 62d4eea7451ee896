"""Service layer modules."""

from public_forms.services.field_types import FieldCategory, classify, classify_field
from public_forms.services.form_validation_service import (
    ClientValidationError,
    FormState,
    validate_field,
    validate_form,
)
from public_forms.services.schema_fetch_service import (
    ScheduledFetch,
    SchemaFetchError,
    fetch_public_form,
)
from public_forms.services.submission_service import (
    ServerValidationError,
    SubmissionError,
    compose_submission,
    submit_public_form,
)
from public_forms.services.success_service import (
    build_success_details,
    render_success_message,
    resolve_success_tokens,
)

__all__ = [
    # Field types
    "FieldCategory",
    "classify",
    "classify_field",
    # Validation
    "ClientValidationError",
    "FormState",
    "validate_field",
    "validate_form",
    # Fetching
    "ScheduledFetch",
    "SchemaFetchError",
    "fetch_public_form",
    # Submission
    "ServerValidationError",
    "SubmissionError",
    "compose_submission",
    "submit_public_form",
    # Confirmation
    "build_success_details",
    "render_success_message",
    "resolve_success_tokens",
]

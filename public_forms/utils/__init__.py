"""Utility modules."""

from public_forms.utils.datetime_parsing import (
    format_date,
    is_valid_date,
    parse_datetime_value,
)
from public_forms.utils.normalization import (
    compose_phone,
    decompose_phone,
    editable_phone_parts,
    format_pretty_phone,
    is_e164,
)

__all__ = [
    # Dates
    "format_date",
    "is_valid_date",
    "parse_datetime_value",
    # Phone numbers
    "compose_phone",
    "decompose_phone",
    "editable_phone_parts",
    "format_pretty_phone",
    "is_e164",
]

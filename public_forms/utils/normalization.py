"""Phone number normalization and small text helpers."""

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CountryDialCode:
    iso: str
    name: str
    dial: str


# Offered to users in this order; the first entry is the default.
COUNTRY_PHONE_CODES: tuple[CountryDialCode, ...] = (
    CountryDialCode("NG", "Nigeria", "+234"),
    CountryDialCode("GH", "Ghana", "+233"),
    CountryDialCode("KE", "Kenya", "+254"),
    CountryDialCode("ZA", "South Africa", "+27"),
    CountryDialCode("US", "United States", "+1"),
    CountryDialCode("CA", "Canada", "+1"),
    CountryDialCode("GB", "United Kingdom", "+44"),
    CountryDialCode("FR", "France", "+33"),
    CountryDialCode("DE", "Germany", "+49"),
    CountryDialCode("ES", "Spain", "+34"),
)

DEFAULT_DIAL_CODE = COUNTRY_PHONE_CODES[0].dial

# Longest first so "+234" wins over "+2" style prefixes.
_DIAL_CODES_LONGEST_FIRST: tuple[str, ...] = tuple(
    sorted({code.dial for code in COUNTRY_PHONE_CODES}, key=len, reverse=True)
)

E164_RE = re.compile(r"^\+[1-9]\d{7,14}$")
_NON_DIGIT_RE = re.compile(r"\D")
_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")


@dataclass(frozen=True)
class PhoneParts:
    dial_code: str
    national_digits: str


def only_digits(value: str) -> str:
    return _NON_DIGIT_RE.sub("", value or "")


def decompose_phone(e164: Optional[str]) -> Optional[PhoneParts]:
    """
    Split a stored E.164 number into its dial code and national digits.

    Returns None when the value does not start with "+" or no known dial
    code matches.
    """
    if not e164 or not isinstance(e164, str):
        return None
    trimmed = e164.strip()
    if not trimmed.startswith("+"):
        return None

    for dial in _DIAL_CODES_LONGEST_FIRST:
        if trimmed.startswith(dial):
            return PhoneParts(dial_code=dial, national_digits=only_digits(trimmed[len(dial) :]))
    return None


def compose_phone(dial_code: str, raw_national: str) -> str:
    """Join a dial code with the digits of a national number."""
    return f"{dial_code}{only_digits(raw_national)}"


def format_pretty_phone(e164: Optional[str]) -> str:
    """
    Display form of an E.164 number: dial code, then digits in groups of 3.

    Display only; never store or validate the result.
    """
    if not e164 or not isinstance(e164, str):
        return ""
    trimmed = e164.strip()
    parts = decompose_phone(trimmed)
    if parts is None:
        return trimmed

    return f"{parts.dial_code} {' '.join(group_digits(parts.national_digits))}".strip()


def group_digits(digits: str, size: int = 3) -> list[str]:
    """Split into groups of ``size``; a lone trailing digit joins the previous group."""
    groups = [digits[i : i + size] for i in range(0, len(digits), size)]
    if len(groups) > 1 and len(groups[-1]) == 1:
        groups[-2] += groups.pop()
    return groups


def editable_phone_parts(value: Optional[str]) -> PhoneParts:
    """Dial code and national digits to pre-fill an input from a stored value."""
    parts = decompose_phone(value)
    if parts is not None:
        return parts
    return PhoneParts(dial_code=DEFAULT_DIAL_CODE, national_digits=only_digits(value or ""))


def is_e164(value: str) -> bool:
    return E164_RE.match(value) is not None


def collapse_whitespace(value: str) -> str:
    """Collapse runs of 2+ whitespace characters into one space and trim."""
    return _WHITESPACE_RUN_RE.sub(" ", value).strip()

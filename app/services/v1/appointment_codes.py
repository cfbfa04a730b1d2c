# app/services/v1/appointment_codes.py
import re

APPOINTMENT_CODE_PREFIX = "SC-"
_CODE_PATTERN = re.compile(r"^SC-(\d{3,})$")


def format_appointment_code(sequence_number: int) -> str:
    """
    Zero-padded to three digits; wider numbers keep all their digits.

    >>> format_appointment_code(7)
    'SC-007'
    >>> format_appointment_code(1234)
    'SC-1234'
    """
    if sequence_number < 1:
        raise ValueError(f"sequence_number must be positive, got {sequence_number}")
    return f"{APPOINTMENT_CODE_PREFIX}{sequence_number:03d}"


def parse_appointment_code(code: str) -> int:
    """Inverse of format_appointment_code. Raises ValueError for malformed codes."""
    match = _CODE_PATTERN.match(code)
    if not match:
        raise ValueError(f"Not an appointment code: {code!r}")
    return int(match.group(1))


__all__ = [
    "APPOINTMENT_CODE_PREFIX",
    "format_appointment_code",
    "parse_appointment_code",
]

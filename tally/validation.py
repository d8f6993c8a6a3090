"""Input validation for values entering the tally store."""

import re
from typing import Any

from exceptions import ValidationError

# C0/C1 control characters, including newlines and tabs
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def clean_value(value: Any, field: str, max_length: int) -> str:
    """Normalize an opaque id or vote value, raise ValidationError if unusable.

    Strings are stripped; ints and floats are accepted and stringified.
    Anything else (None, bools, containers) is rejected.
    """
    if value is None:
        raise ValidationError(f"{field} is required", field=field)

    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValidationError(
            f"{field} must be a string or number, got {type(value).__name__}",
            field=field,
            value=value,
        )

    try:
        cleaned = str(value).strip()
    except ValueError:
        # int -> str conversion refuses integers past sys.get_int_max_str_digits()
        raise ValidationError(f"{field} too long (max {max_length} characters)", field=field)

    if not cleaned:
        raise ValidationError(f"{field} cannot be empty", field=field)

    if len(cleaned) > max_length:
        raise ValidationError(
            f"{field} too long (max {max_length} characters)",
            field=field,
            value=cleaned[:max_length],
        )

    if _CONTROL_CHARS.search(cleaned):
        raise ValidationError(f"{field} contains control characters", field=field, value=cleaned)

    return cleaned

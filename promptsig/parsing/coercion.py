"""
Fail-soft coercion of raw field text into typed values.

- bool:  True iff the text equals "true" ignoring case; anything else is False
- int:   decimal integer in ASCII digits, or the raw text unchanged when it
         does not parse
- float: floating point number, or the raw text unchanged
- str:   unchanged

Numeric fields fall back to the raw text while boolean fields fall back to
False. Keep that asymmetry; callers rely on seeing the literal text of a
numeric field the model got wrong.
"""

import re
from typing import Any, Optional, Tuple

from ..core.fields import FieldType

_INT_RE = re.compile(r"[+-]?[0-9]+")


def coerce_value(raw: Optional[str], field_type: FieldType) -> Tuple[Any, bool]:
    """
    Coerce raw text to a field type.

    Returns:
        (value, fell_back) where fell_back is True when a numeric field kept
        its raw text because it could not be parsed
    """
    if raw is None:
        return None, False

    if field_type == FieldType.BOOL:
        return raw.lower() == "true", False

    if field_type == FieldType.INT:
        if _INT_RE.fullmatch(raw):
            return int(raw), False
        return raw, True

    if field_type == FieldType.FLOAT:
        # Python accepts "1_000.5" and non-ASCII digits; treat both as unparseable
        if "_" in raw or not raw.isascii():
            return raw, True
        try:
            return float(raw), False
        except ValueError:
            return raw, True

    return raw, False

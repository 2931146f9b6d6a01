"""
promptsig Parsing
Delimited reply parsing and fail-soft value coercion
"""

from .coercion import coerce_value
from .delimited_parser import (
    MarkerScanner,
    ParseOutcome,
    ParsedField,
    parse_fields,
    parse_output,
)

__all__ = [
    "coerce_value",
    "MarkerScanner",
    "ParseOutcome",
    "ParsedField",
    "parse_fields",
    "parse_output",
]

"""
promptsig error types

Only validation failures and unusable configuration are errors. Coercion
fallbacks and missing output fields are ordinary parse outcomes (see
promptsig.parsing.delimited_parser.ParseOutcome) and never raise.
"""

from typing import Any, Dict, List, Optional


class PromptsigError(Exception):
    """Base class for promptsig errors"""
    pass


class ConfigurationError(PromptsigError):
    """Raised when configuration or options cannot be used as given"""
    pass


class ValidationError(PromptsigError):
    """
    Raised when an input or output map fails its declared schema.

    Attributes:
        side: "input" or "output"
        value: the offending value map
        errors: diagnostics from the schema engine's explain(), one dict per
                problem with at least "loc" and "msg" keys
        schema: the schema that rejected the value
        field: set when a single field's spec failed rather than the schema
    """

    def __init__(
        self,
        side: str,
        value: Any,
        errors: List[Dict[str, Any]],
        schema: Any = None,
        field: Optional[str] = None,
    ):
        self.side = side
        self.value = value
        self.errors = errors
        self.schema = schema
        self.field = field

        target = f"field {field!r}" if field else "map"
        summary = "; ".join(_describe(e) for e in errors[:5]) or "value rejected"
        super().__init__(f"Validation failed for {side} {target}: {summary}")


def _describe(error: Dict[str, Any]) -> str:
    loc = error.get("loc") or ()
    path = ".".join(str(p) for p in loc)
    msg = error.get("msg", "invalid")
    return f"{path}: {msg}" if path else msg

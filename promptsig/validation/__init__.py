"""
promptsig Validation
Schema and field-spec checks for input and output maps
"""

from .adapter import validate_against, validate_inputs, validate_outputs

__all__ = [
    "validate_against",
    "validate_inputs",
    "validate_outputs",
]

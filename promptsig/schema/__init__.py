"""
promptsig Schema Support
Structural schema engines and module normalization
"""

from .engines import (
    SchemaProperty,
    SchemaEngine,
    PydanticSchemaEngine,
    JsonSchemaEngine,
    FieldMapSchemaEngine,
    engine_for,
)
from .normalizer import normalize_module, schema_to_fields, property_to_field

__all__ = [
    "SchemaProperty",
    "SchemaEngine",
    "PydanticSchemaEngine",
    "JsonSchemaEngine",
    "FieldMapSchemaEngine",
    "engine_for",
    "normalize_module",
    "schema_to_fields",
    "property_to_field",
]

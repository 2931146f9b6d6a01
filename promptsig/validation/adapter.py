"""
Validation Adapter

Checks input and output maps against a module's structural schemas (and
per-field specs) through the schema engines, turning engine diagnostics
into a single ValidationError.

Entries whose value is None are treated as absent, so an optional property
the model never produced does not fail a schema that types it.
"""

import logging
from typing import Any, Dict, Mapping

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ValidationError
from ..core.fields import NormalizedModule
from ..schema.engines import engine_for
from ..schema.normalizer import normalize_module

logger = logging.getLogger(__name__)


def _present(value: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in value.items() if v is not None}


def validate_against(schema: Any, value: Mapping[str, Any], side: str = "output") -> Mapping[str, Any]:
    """
    Validate a value map against a structural schema.

    Args:
        schema: pydantic model, JSON Schema object or field map; None skips
        value: Input or output map
        side: "input" or "output", carried on the error

    Returns:
        The value, unchanged

    Raises:
        ValidationError: if the schema rejects the value
    """
    if schema is None:
        return value

    engine = engine_for(schema)
    candidate = _present(value)
    if engine.validate(schema, candidate):
        return value

    errors = engine.explain(schema, candidate)
    logger.debug(f"{side} map rejected by {engine.name} schema: {len(errors)} errors")
    raise ValidationError(side=side, value=dict(value), errors=errors, schema=schema)


def _check_field_specs(fields, value: Mapping[str, Any], side: str) -> None:
    for f in fields:
        if f.spec is None or value.get(f.name) is None:
            continue
        try:
            TypeAdapter(f.spec).validate_python(value[f.name], strict=True)
        except PydanticValidationError as e:
            errors = [
                {
                    "loc": (f.name,) + tuple(err.get("loc", ())),
                    "msg": err.get("msg", ""),
                    "type": err.get("type", ""),
                }
                for err in e.errors()
            ]
            raise ValidationError(
                side=side, value=dict(value), errors=errors, schema=f.spec, field=f.name
            ) from e


def validate_inputs(module, inputs: Mapping[str, Any]) -> Mapping[str, Any]:
    """Validate an input map against the module's input schema and field specs"""
    normalized: NormalizedModule = normalize_module(module)
    validate_against(normalized.input_schema, inputs, side="input")
    _check_field_specs(normalized.inputs, inputs, "input")
    return inputs


def validate_outputs(module, outputs: Mapping[str, Any]) -> Mapping[str, Any]:
    """Validate an output map against the module's output schema and field specs"""
    normalized: NormalizedModule = normalize_module(module)
    validate_against(normalized.output_schema, outputs, side="output")
    _check_field_specs(normalized.outputs, outputs, "output")
    return outputs

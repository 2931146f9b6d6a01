"""
Schema Normalizer

Reduces a module to canonical field tuples. Explicit field lists are used
verbatim; a side declared only through a structural schema has its
properties walked in declaration order and turned into Fields.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from ..core.fields import Field, Module, NormalizedModule, field_type_for
from .engines import SchemaProperty, engine_for

logger = logging.getLogger(__name__)


def property_to_field(prop: SchemaProperty) -> Field:
    """Derive a Field from one schema property"""
    return Field(
        name=prop.name,
        type=field_type_for(prop.tag),
        description=prop.description or f"Field {prop.name}",
        required=prop.required,
    )


def schema_to_fields(schema: Any) -> Optional[List[Field]]:
    """Convert a structural schema to a field list; None for no schema"""
    if schema is None:
        return None
    engine = engine_for(schema)
    return [property_to_field(prop) for prop in engine.properties(schema)]


def _resolve_side(side: str, explicit: Optional[List[Field]], schema: Any):
    if explicit is not None:
        if schema is not None:
            logger.warning(
                f"Module declares both {side} fields and an {side} schema; "
                f"using the explicit fields and ignoring the schema"
            )
        return tuple(explicit), None
    if schema is not None:
        return tuple(schema_to_fields(schema)), schema
    return (), None


def normalize_module(
    module: Union[Module, NormalizedModule, Mapping[str, Any]]
) -> NormalizedModule:
    """
    Normalize a module to canonical input/output fields.

    Idempotent: a NormalizedModule is returned unchanged. Plain mappings are
    accepted and read through Module.from_dict().
    """
    if isinstance(module, NormalizedModule):
        return module
    if isinstance(module, Mapping):
        module = Module.from_dict(module)

    inputs, input_schema = _resolve_side("input", module.inputs, module.input_schema)
    outputs, output_schema = _resolve_side("output", module.outputs, module.output_schema)

    return NormalizedModule(
        inputs=inputs,
        outputs=outputs,
        instructions=module.instructions,
        input_schema=input_schema,
        output_schema=output_schema,
    )

"""
Structural schema engines

A structural schema describes a map of named properties, each a primitive
type plus optional metadata (description, optionality). promptsig does not
implement a schema language; it delegates to one of these engines, each of
which exposes the same three capabilities:

- properties(schema): declared properties, in declaration order
- validate(schema, value): does the value satisfy the schema?
- explain(schema, value): diagnostics for a value that does not

Supported schema shapes:
- pydantic BaseModel subclasses
- JSON Schema objects ({"type": "object", "properties": {...}})
- field maps ({"name": tag} or {"name": (tag, {"description": ...})}),
  compiled to a pydantic model on the fly
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

import jsonschema
from pydantic import BaseModel, create_model
from pydantic import Field as PydanticField
from pydantic import ValidationError as PydanticValidationError

from ..core.fields import FieldType, TAG_NAMES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaProperty:
    """One declared property of a structural schema: a type tag plus metadata"""
    name: str
    tag: Any
    description: Optional[str] = None
    required: bool = True
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)


class SchemaEngine(ABC):
    """Interface every structural schema engine implements"""

    name: str = "abstract"

    @abstractmethod
    def accepts(self, schema: Any) -> bool:
        """Return True if this engine understands the schema's shape"""
        pass

    @abstractmethod
    def properties(self, schema: Any) -> List[SchemaProperty]:
        pass

    @abstractmethod
    def validate(self, schema: Any, value: Any) -> bool:
        pass

    @abstractmethod
    def explain(self, schema: Any, value: Any) -> List[Dict[str, Any]]:
        """
        Explain why a value fails the schema.

        Returns one dict per problem with "loc" (tuple path), "msg" and
        "type" keys; an empty list when the value is valid.
        """
        pass


# =============================================================================
# Pydantic models
# =============================================================================

class PydanticSchemaEngine(SchemaEngine):
    """Schemas declared as pydantic models; validation runs in strict mode"""

    name = "pydantic"

    def accepts(self, schema: Any) -> bool:
        return isinstance(schema, type) and issubclass(schema, BaseModel)

    def properties(self, schema: Type[BaseModel]) -> List[SchemaProperty]:
        return [
            SchemaProperty(
                name=name,
                tag=info.annotation,
                description=info.description,
                required=info.is_required(),
            )
            for name, info in schema.model_fields.items()
        ]

    def validate(self, schema: Type[BaseModel], value: Any) -> bool:
        try:
            schema.model_validate(value, strict=True)
        except PydanticValidationError:
            return False
        return True

    def explain(self, schema: Type[BaseModel], value: Any) -> List[Dict[str, Any]]:
        try:
            schema.model_validate(value, strict=True)
        except PydanticValidationError as e:
            return [
                {
                    "loc": tuple(err.get("loc", ())),
                    "msg": err.get("msg", ""),
                    "type": err.get("type", ""),
                }
                for err in e.errors()
            ]
        return []


# =============================================================================
# JSON Schema
# =============================================================================

class JsonSchemaEngine(SchemaEngine):
    """Schemas declared as JSON Schema objects, checked with jsonschema"""

    name = "jsonschema"

    def accepts(self, schema: Any) -> bool:
        return isinstance(schema, Mapping) and (
            "properties" in schema or schema.get("type") == "object"
        )

    def properties(self, schema: Mapping[str, Any]) -> List[SchemaProperty]:
        required = set(schema.get("required", []))
        result = []
        for name, prop in (schema.get("properties") or {}).items():
            prop = prop if isinstance(prop, Mapping) else {}
            tag = prop.get("type")
            if isinstance(tag, list):
                # ["string", "null"] -> "string"
                non_null = [t for t in tag if t != "null"]
                tag = non_null[0] if non_null else None
            result.append(SchemaProperty(
                name=name,
                tag=tag,
                description=prop.get("description"),
                required=name in required,
                metadata={k: v for k, v in prop.items() if k not in ("type", "description")},
            ))
        return result

    def _validator(self, schema: Mapping[str, Any]):
        cls = jsonschema.validators.validator_for(schema)
        return cls(schema)

    def validate(self, schema: Mapping[str, Any], value: Any) -> bool:
        return self._validator(schema).is_valid(value)

    def explain(self, schema: Mapping[str, Any], value: Any) -> List[Dict[str, Any]]:
        return [
            {
                "loc": tuple(err.absolute_path),
                "msg": err.message,
                "type": err.validator,
            }
            for err in self._validator(schema).iter_errors(value)
        ]


# =============================================================================
# Field maps
# =============================================================================

_PYTHON_TYPES = {
    FieldType.STR: str,
    FieldType.INT: int,
    FieldType.FLOAT: float,
    FieldType.BOOL: bool,
}


def _split_tag(spec: Any) -> Tuple[Any, Dict[str, Any]]:
    """Split a (tag, metadata) pair; bare tags get empty metadata"""
    if isinstance(spec, (list, tuple)) and spec:
        meta = spec[1] if len(spec) > 1 and isinstance(spec[1], Mapping) else {}
        return spec[0], dict(meta)
    return spec, {}


def _python_type(tag: Any) -> Any:
    if isinstance(tag, str):
        name = tag.strip().lstrip(":").rstrip("?").lower()
        known = TAG_NAMES.get(name)
        return _PYTHON_TYPES[known] if known is not None else Any
    if tag is None:
        return Any
    # Python types and typing annotations validate as themselves
    return tag


class FieldMapSchemaEngine(SchemaEngine):
    """
    Schemas declared as a plain mapping of property name to type tag.

    Each value is a tag (Python type, annotation or tag name) or a
    (tag, metadata) pair where metadata may carry "description" and
    "optional". Validation goes through a pydantic model built with
    create_model().
    """

    name = "field-map"

    def accepts(self, schema: Any) -> bool:
        return isinstance(schema, Mapping)

    def properties(self, schema: Mapping[str, Any]) -> List[SchemaProperty]:
        result = []
        for name, spec in schema.items():
            tag, meta = _split_tag(spec)
            result.append(SchemaProperty(
                name=name,
                tag=tag,
                description=meta.get("description"),
                required=not meta.get("optional", False),
                metadata=meta,
            ))
        return result

    def to_model(self, schema: Mapping[str, Any]) -> Type[BaseModel]:
        definitions = {}
        for prop in self.properties(schema):
            py_type = _python_type(prop.tag)
            if prop.required:
                definitions[prop.name] = (py_type, PydanticField(..., description=prop.description))
            else:
                definitions[prop.name] = (
                    Optional[py_type],
                    PydanticField(default=None, description=prop.description),
                )
        return create_model("FieldMapSchema", **definitions)

    def validate(self, schema: Mapping[str, Any], value: Any) -> bool:
        return _PYDANTIC.validate(self.to_model(schema), value)

    def explain(self, schema: Mapping[str, Any], value: Any) -> List[Dict[str, Any]]:
        return _PYDANTIC.explain(self.to_model(schema), value)


_PYDANTIC = PydanticSchemaEngine()

# Dispatch order matters: JSON Schema objects are also mappings
ENGINES: List[SchemaEngine] = [
    _PYDANTIC,
    JsonSchemaEngine(),
    FieldMapSchemaEngine(),
]


def engine_for(schema: Any) -> SchemaEngine:
    """Pick the engine for a schema's shape"""
    for engine in ENGINES:
        if engine.accepts(schema):
            return engine
    raise TypeError(
        f"Unsupported schema of type {type(schema).__name__}; expected a pydantic "
        f"model, a JSON Schema object or a field map"
    )

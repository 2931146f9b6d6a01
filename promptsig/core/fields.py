"""
promptsig Field Model

Canonical representation of a module's input/output fields, and the mapping
from the many shapes a schema type tag can take onto the four primitive
field types the compiler and parser understand.

Tag shapes accepted by field_type_for():
- Python types:            str, int, float, bool
- Bare / keyword names:    "string", ":int", "double", "boolean"
- Predicate names:         "string?", "int?", "float?", "boolean?"
- JSON Schema names:       "integer", "number"
- Annotations:             Optional[int], Annotated[float, ...], int | None
- Tag with metadata:       ("int", {"description": "..."})
"""

import logging
import types
import typing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class FieldType(str, Enum):
    """Primitive field types (value doubles as the prompt annotation)"""
    STR = "str"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


_PYTHON_TYPES = {
    str: FieldType.STR,
    int: FieldType.INT,
    float: FieldType.FLOAT,
    bool: FieldType.BOOL,
}

TAG_NAMES = {
    "str": FieldType.STR,
    "string": FieldType.STR,
    "int": FieldType.INT,
    "integer": FieldType.INT,
    "long": FieldType.INT,
    "float": FieldType.FLOAT,
    "double": FieldType.FLOAT,
    "number": FieldType.FLOAT,
    "bool": FieldType.BOOL,
    "boolean": FieldType.BOOL,
}


def field_type_for(tag: Any) -> FieldType:
    """
    Map a schema type tag of any supported shape to a FieldType.

    Unknown tags fall back to FieldType.STR; this never raises.
    """
    if isinstance(tag, FieldType):
        return tag

    if isinstance(tag, type):
        return _PYTHON_TYPES.get(tag, FieldType.STR)

    if isinstance(tag, str):
        name = tag.strip().lstrip(":").rstrip("?").lower()
        return TAG_NAMES.get(name, FieldType.STR)

    if isinstance(tag, (list, tuple)):
        return field_type_for(tag[0]) if tag else FieldType.STR

    origin = typing.get_origin(tag)
    if origin is typing.Annotated:
        return field_type_for(typing.get_args(tag)[0])
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(tag) if arg is not type(None)]
        return field_type_for(members[0]) if members else FieldType.STR

    return FieldType.STR


@dataclass(frozen=True)
class Field:
    """
    One named, typed field of a module.

    `type` may be given as a FieldType or any tag accepted by
    field_type_for(). When it is omitted and `spec` is set, the type is
    derived from `spec`, which is an optional Python type/annotation the
    field's value is validated against when validation is enabled.
    """
    name: str
    type: Any = None
    description: str = ""
    required: bool = True
    spec: Optional[Any] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"Field name must be a non-empty string, got {self.name!r}")

        if self.type is not None:
            resolved = field_type_for(self.type)
        elif self.spec is not None:
            resolved = field_type_for(self.spec)
        else:
            resolved = FieldType.STR
        object.__setattr__(self, "type", resolved)

        if self.description is None:
            object.__setattr__(self, "description", "")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Field":
        """Build a Field from a plain mapping"""
        return cls(
            name=data["name"],
            type=data.get("type"),
            description=data.get("description", ""),
            required=data.get("required", True),
            spec=data.get("spec"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "description": self.description,
            "required": self.required,
        }


def _coerce_fields(items: Optional[Iterable[Any]], side: str) -> Optional[List[Field]]:
    if items is None:
        return None

    result = []
    seen = set()
    for item in items:
        if isinstance(item, Field):
            f = item
        elif isinstance(item, dict):
            f = Field.from_dict(item)
        else:
            raise TypeError(f"{side} entries must be Field or dict, got {type(item).__name__}")

        if f.name in seen:
            raise ValueError(f"Duplicate field name in {side}: {f.name!r}")
        seen.add(f.name)
        result.append(f)
    return result


@dataclass
class Module:
    """
    A typed text-generation contract.

    Declare each side either with explicit field lists (`inputs`/`outputs`)
    or with a structural schema (`input_schema`/`output_schema`). When both
    are present for one side the explicit list wins.
    """
    inputs: Optional[List[Field]] = None
    outputs: Optional[List[Field]] = None
    instructions: Optional[str] = None
    input_schema: Optional[Any] = None
    output_schema: Optional[Any] = None

    def __post_init__(self):
        self.inputs = _coerce_fields(self.inputs, "inputs")
        self.outputs = _coerce_fields(self.outputs, "outputs")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Module":
        """Build a Module from a plain mapping (unknown keys are ignored)"""
        return cls(
            inputs=data.get("inputs"),
            outputs=data.get("outputs"),
            instructions=data.get("instructions"),
            input_schema=data.get("input_schema"),
            output_schema=data.get("output_schema"),
        )


@dataclass(frozen=True)
class NormalizedModule:
    """A module reduced to canonical field tuples, ready to compile or parse"""
    inputs: Tuple[Field, ...] = ()
    outputs: Tuple[Field, ...] = ()
    instructions: Optional[str] = None
    input_schema: Optional[Any] = field(default=None, compare=False)
    output_schema: Optional[Any] = field(default=None, compare=False)

    @property
    def input_names(self) -> List[str]:
        return [f.name for f in self.inputs]

    @property
    def output_names(self) -> List[str]:
        return [f.name for f in self.outputs]

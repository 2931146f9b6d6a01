"""
promptsig Unit Tests: Validation Adapter
========================================

Tests:
- Passthrough without a schema
- Schema failures raising ValidationError with diagnostics
- None entries treated as absent
- Per-field spec checks
"""

import pytest
import sys
import os
from typing import Annotated, Optional

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from pydantic import BaseModel, Field as SchemaField

from promptsig.core.errors import PromptsigError, ValidationError
from promptsig.core.fields import Field, Module
from promptsig.validation.adapter import (
    validate_against,
    validate_inputs,
    validate_outputs,
)


class Scored(BaseModel):
    label: str
    score: float
    note: Optional[str] = None


@pytest.mark.unit
class TestValidateAgainst:
    """Tests for schema validation"""

    def test_no_schema_passthrough(self):
        """Test a missing schema returns the value unchanged"""
        value = {"anything": object()}
        assert validate_against(None, value) is value

    def test_valid_value_returned(self):
        """Test a valid map is returned as is"""
        value = {"label": "spam", "score": 0.9}
        assert validate_against(Scored, value) is value

    def test_invalid_value_raises(self):
        """Test the error carries side, value, schema and diagnostics"""
        value = {"label": "spam", "score": "high"}

        with pytest.raises(ValidationError) as exc_info:
            validate_against(Scored, value, side="output")

        err = exc_info.value
        assert isinstance(err, PromptsigError)
        assert err.side == "output"
        assert err.value == value
        assert err.schema is Scored
        assert err.errors[0]["loc"] == ("score",)
        assert "Validation failed for output map" in str(err)

    def test_none_entries_are_absent(self):
        """Test None values do not fail an optional typed property"""
        assert validate_against(Scored, {"label": "ham", "score": 0.1, "note": None})

    def test_missing_required_still_fails(self):
        """Test a None required field is reported as missing"""
        with pytest.raises(ValidationError) as exc_info:
            validate_against(Scored, {"label": "ham", "score": None})
        assert exc_info.value.errors[0]["type"] == "missing"

    def test_json_schema(self):
        """Test JSON Schema objects are validated through jsonschema"""
        schema = {
            "type": "object",
            "properties": {"count": {"type": "integer", "minimum": 0}},
            "required": ["count"],
        }
        assert validate_against(schema, {"count": 3}) == {"count": 3}

        with pytest.raises(ValidationError) as exc_info:
            validate_against(schema, {"count": -1}, side="input")
        assert exc_info.value.side == "input"
        assert exc_info.value.errors[0]["type"] == "minimum"


@pytest.mark.unit
class TestModuleValidation:
    """Tests for validating a module's input and output maps"""

    def test_schema_module_inputs(self, schema_module):
        """Test input maps are checked against the input schema"""
        assert validate_inputs(schema_module, {"country": "France"})

        with pytest.raises(ValidationError) as exc_info:
            validate_inputs(schema_module, {"country": 7})
        assert exc_info.value.side == "input"

    def test_schema_module_outputs(self, schema_module):
        """Test fail-soft text in a numeric field is caught by validation"""
        with pytest.raises(ValidationError):
            validate_outputs(schema_module, {"city": "Paris", "population": "lots"})

        outputs = {"city": "Paris", "population": 2_100_000}
        assert validate_outputs(schema_module, outputs) is outputs

    def test_explicit_fields_skip_ignored_schema(self):
        """Test a schema overridden by explicit fields is not enforced"""
        module = Module(outputs=[Field("label")], output_schema=Scored)
        assert validate_outputs(module, {"label": "spam"}) == {"label": "spam"}

    def test_field_spec(self):
        """Test per-field specs are checked with the field name attached"""
        positive = Annotated[int, SchemaField(gt=0)]
        module = Module(outputs=[Field("count", spec=positive)])

        assert validate_outputs(module, {"count": 2})
        assert validate_outputs(module, {"count": None})

        with pytest.raises(ValidationError) as exc_info:
            validate_outputs(module, {"count": 0})
        assert exc_info.value.field == "count"
        assert exc_info.value.errors[0]["loc"] == ("count",)
        assert "field 'count'" in str(exc_info.value)

    def test_field_spec_is_strict(self):
        """Test specs do not coerce raw text"""
        module = Module(outputs=[Field("count", spec=int)])
        with pytest.raises(ValidationError):
            validate_outputs(module, {"count": "2"})

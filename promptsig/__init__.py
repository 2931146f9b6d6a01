"""
promptsig - Typed Prompt Signatures

Declare a module's input and output fields (or structural schemas), render
them into a delimited prompt, and parse the model's delimited reply back
into a typed map, in one shot or progressively from a stream.

Usage:
    from promptsig import Field, Module, predict

    qa = Module(
        inputs=[Field("question", "str", "The question to answer")],
        outputs=[Field("answer", "str", "A short answer")],
    )
    result = await predict(qa, {"question": "2+2?"}, {"model": "gpt-4o-mini"})
"""

__version__ = "0.3.0"

from .core.fields import Field, FieldType, Module, NormalizedModule
from .core.errors import PromptsigError, ConfigurationError, ValidationError
from .core.config import PromptsigConfig, PredictOptions, get_config, set_config
from .core.predictor import predict, predict_stream, predict_sync
from .schema.normalizer import normalize_module
from .prompting.compiler import compile_prompt, render_prompt
from .parsing.delimited_parser import parse_fields, parse_output
from .validation.adapter import validate_against, validate_inputs, validate_outputs

__all__ = [
    "__version__",
    # Model
    "Field",
    "FieldType",
    "Module",
    "NormalizedModule",
    # Errors
    "PromptsigError",
    "ConfigurationError",
    "ValidationError",
    # Configuration
    "PromptsigConfig",
    "PredictOptions",
    "get_config",
    "set_config",
    # Operations
    "normalize_module",
    "compile_prompt",
    "render_prompt",
    "parse_fields",
    "parse_output",
    "predict",
    "predict_stream",
    "predict_sync",
    "validate_against",
    "validate_inputs",
    "validate_outputs",
]

"""
promptsig Core Components
"""

from .fields import (
    Field,
    FieldType,
    Module,
    NormalizedModule,
    field_type_for,
)
from .errors import PromptsigError, ConfigurationError, ValidationError
from .config import (
    LLMProvider,
    LLMConfig,
    StreamingConfig,
    PromptsigConfig,
    PredictOptions,
    get_config,
    set_config,
)

__all__ = [
    "Field",
    "FieldType",
    "Module",
    "NormalizedModule",
    "field_type_for",
    "PromptsigError",
    "ConfigurationError",
    "ValidationError",
    "LLMProvider",
    "LLMConfig",
    "StreamingConfig",
    "PromptsigConfig",
    "PredictOptions",
    "get_config",
    "set_config",
]

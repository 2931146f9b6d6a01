"""
Prompt Compiler

Renders a module into the delimited prompt format:

    Your input fields are:
    1. `question` (str): The question to answer
    Your output fields are:
    1. `answer` (str): The answer
    All interactions will be structured in the following way, with the appropriate values filled in.

    [[ ## question ## ]]
    {question}

    [[ ## answer ## ]]
    {answer}
    [[ ## completed ## ]]
    In adhering to this structure, your instructions are: ...

Section order is fixed; the model is expected to mirror it when answering.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from ..core.fields import Field, FieldType, NormalizedModule
from ..schema.normalizer import normalize_module

logger = logging.getLogger(__name__)

INPUT_HEADER = "Your input fields are:"
OUTPUT_HEADER = "Your output fields are:"
INTERACTION_PREAMBLE = (
    "All interactions will be structured in the following way, "
    "with the appropriate values filled in."
)
COMPLETED_MARKER = "[[ ## completed ## ]]"
INSTRUCTIONS_PREFIX = "In adhering to this structure, your instructions are: "
BOOL_NOTE = "        # note: the value you produce must be True or False"


def field_marker(name: str) -> str:
    """The delimiter line for a field, exactly one space around each ##"""
    return f"[[ ## {name} ## ]]"


def field_placeholder(name: str) -> str:
    return "{" + name + "}"


def format_value(value: Any) -> str:
    """Text form of an input value; None renders as an empty string"""
    if value is None:
        return ""
    return str(value)


def _field_list(header: str, fields: Iterable[Field]) -> str:
    lines = [header]
    for idx, f in enumerate(fields, start=1):
        lines.append(f"{idx}. `{f.name}` ({f.type.value}): {f.description}")
    return "\n".join(lines)


def _interaction_format(
    module: NormalizedModule,
    input_values: Optional[Mapping[str, Any]] = None,
) -> str:
    blocks = []
    for f in module.inputs:
        if input_values is None:
            body = field_placeholder(f.name)
        else:
            body = format_value(input_values.get(f.name))
        blocks.append(f"{field_marker(f.name)}\n{body}")

    for f in module.outputs:
        body = field_placeholder(f.name)
        if f.type == FieldType.BOOL:
            body += BOOL_NOTE
        blocks.append(f"{field_marker(f.name)}\n{body}")

    return INTERACTION_PREAMBLE + "\n\n" + "\n\n".join(blocks)


def _compile(module: NormalizedModule, input_values: Optional[Mapping[str, Any]] = None) -> str:
    sections: List[str] = []

    if module.inputs:
        sections.append(_field_list(INPUT_HEADER, module.inputs))
    if module.outputs:
        sections.append(_field_list(OUTPUT_HEADER, module.outputs))
    if module.inputs or module.outputs:
        sections.append(_interaction_format(module, input_values))
    if module.instructions is not None:
        sections.append(f"{COMPLETED_MARKER}\n{INSTRUCTIONS_PREFIX}{module.instructions}")

    return "\n".join(sections)


def compile_prompt(module) -> str:
    """
    Compile a module into its prompt template.

    Args:
        module: Module, NormalizedModule or module mapping

    Returns:
        Prompt text with {placeholders} for every field
    """
    return _compile(normalize_module(module))


def render_input_blocks(module, input_values: Mapping[str, Any]) -> str:
    """One delimited block per input field carrying the real value"""
    normalized = normalize_module(module)
    return "\n\n".join(
        f"{field_marker(f.name)}\n{format_value(input_values.get(f.name))}"
        for f in normalized.inputs
    )


def render_prompt(module, input_values: Optional[Mapping[str, Any]] = None) -> str:
    """
    Render the full prompt sent to the model.

    Input placeholders in the template are replaced with the caller's values
    (output placeholders are left for the model to fill), then the input
    blocks are appended after a blank line.

    Args:
        module: Module, NormalizedModule or module mapping
        input_values: Map of input field name to value

    Returns:
        Complete prompt text
    """
    normalized = normalize_module(module)
    input_values = input_values or {}

    prompt = _compile(normalized, input_values) + "\n\n" + render_input_blocks(normalized, input_values)
    logger.debug(
        f"Rendered prompt: {len(normalized.inputs)} inputs, "
        f"{len(normalized.outputs)} outputs, {len(prompt)} chars"
    )
    return prompt

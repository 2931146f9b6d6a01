#!/usr/bin/env python3
"""
promptsig - Basic Usage
=======================

Walks through one module end to end:
1. Declare a module with explicit fields
2. Show the compiled prompt template
3. Run predict() against the configured model
4. Declare the same contract with a pydantic schema and validate it

Needs OPENAI_API_KEY (or PROMPTSIG_MODEL pointing at a provider you have a
key for).
"""

import sys
import os
import asyncio

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydantic import BaseModel, Field as SchemaField
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from promptsig import (
    Field,
    Module,
    ValidationError,
    compile_prompt,
    normalize_module,
    predict,
)

console = Console()


QA = Module(
    inputs=[Field("question", "str", "The question to answer")],
    outputs=[
        Field("answer", "str", "A short answer"),
        Field("confidence", "float", "Confidence between 0 and 1"),
        Field("needs_citation", "bool", "Whether the answer should be sourced"),
    ],
    instructions="Answer concisely.",
)


class Capital(BaseModel):
    city: str = SchemaField(description="The capital city")
    population: int = SchemaField(description="Approximate population")


class Country(BaseModel):
    country: str = SchemaField(description="A country name")


CAPITALS = Module(
    input_schema=Country,
    output_schema=Capital,
    instructions="Name the capital city and its population.",
)


def show_fields(module: Module, title: str) -> None:
    normalized = normalize_module(module)
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Side")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Description")
    for side, fields in (("input", normalized.inputs), ("output", normalized.outputs)):
        for f in fields:
            table.add_row(side, f.name, f.type.value, f.description)
    console.print(table)


async def main():
    console.print(Panel.fit("[bold]promptsig basic usage[/bold]", border_style="blue"))

    show_fields(QA, "Question answering")
    console.print(Panel(compile_prompt(QA), title="Compiled template", border_style="dim"))

    result = await predict(QA, {"question": "What is 2+2?"})
    console.print(Panel(str(result), title="predict()", border_style="green"))

    show_fields(CAPITALS, "Capitals (from pydantic schemas)")
    try:
        capital = await predict(CAPITALS, {"country": "France"})
        console.print(Panel(str(capital), title="Validated output", border_style="green"))
    except ValidationError as e:
        console.print(Panel(str(e), title="Validation failed", border_style="red"))


if __name__ == "__main__":
    asyncio.run(main())

#!/usr/bin/env python3
"""
promptsig - Streaming Demo
==========================

Streams a markdown article about whales and re-renders it as each debounced
update arrives. Pass a model name as the first argument to override
PROMPTSIG_MODEL.
"""

import sys
import os
import asyncio

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel

from promptsig import Field, Module, predict_stream

console = Console()


ARTICLE = Module(
    inputs=[Field("topic", "str", "What the article is about")],
    outputs=[
        Field("title", "str", "Article title"),
        Field("body", "str", "Article body in markdown"),
        Field("word_count", "int", "Approximate number of words in the body"),
    ],
    instructions="Write a short, friendly article for a general audience.",
)


def render(update) -> Panel:
    title = update.get("title") or "..."
    body = update.get("body") or ""
    footer = f"~{update['word_count']} words" if update.get("word_count") is not None else ""
    return Panel(Markdown(f"# {title}\n\n{body}"), subtitle=footer, border_style="blue")


async def main(model=None):
    options = {"debounce_ms": 150}
    if model:
        options["model"] = model

    updates = 0
    with Live(render({}), console=console, refresh_per_second=10) as live:
        async for update in predict_stream(ARTICLE, {"topic": "whales"}, options):
            updates += 1
            live.update(render(update))

    console.print(f"[dim]{updates} updates rendered[/dim]")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))

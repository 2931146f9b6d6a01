from .compiler import compile_prompt, render_prompt, render_input_blocks, field_marker

__all__ = ["compile_prompt", "render_prompt", "render_input_blocks", "field_marker"]

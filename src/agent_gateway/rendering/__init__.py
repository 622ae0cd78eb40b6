"""Output renderers."""

from agent_gateway.rendering.markdown import render_error_block, render_failed_section, render_markdown

__all__ = ["render_markdown", "render_error_block", "render_failed_section"]

"""Report renderers."""
from .markdown import DocumentRenderer, MarkdownRenderer, render_markdown

__all__ = ["DocumentRenderer", "MarkdownRenderer", "render_markdown"]

"""Human-readable renderings of proposals."""

from .markdown import render_markdown

__all__ = ["render_markdown"]

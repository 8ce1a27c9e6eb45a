"""Rendering of content documents into final and preview text."""

from promptblocks.render.snapshot import render, render_preview

__all__ = ["render", "render_preview"]

"""Data models for promptblocks.

Content elements are plain dataclasses (the in-memory form of storage text);
records crossing a boundary (commands, reports, config, library entries) are
pydantic models.
"""

from promptblocks.models.content import BlockElement, Element, TextElement
from promptblocks.models.document import ContentDocument

__all__ = ["BlockElement", "ContentDocument", "Element", "TextElement"]

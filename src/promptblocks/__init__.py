"""promptblocks - compose prompts from reusable blocks.

Prompts are ordered lists of text and block elements stored as tagged text::

    <text>Hello {{name}}</text>

    <block id="7" />

Example:
    >>> from promptblocks import ContentDocument, render
    >>> doc = ContentDocument.from_text('<text>Hello {{name}}</text>\\n\\n<block id="7" />')
    >>> render(doc, {"name": "World", "x": "42"}, {7: "Block body {{x}}"})
    'Hello World\\n\\nBlock body 42'
"""

from promptblocks.format.serializer import decode, encode
from promptblocks.format.validation import validate_text_format
from promptblocks.models.content import BlockElement, TextElement
from promptblocks.models.document import ContentDocument
from promptblocks.render.snapshot import render, render_preview
from promptblocks.variables import extract_variables, replace_variables, validate_variables

__version__ = "0.1.0"

__all__ = [
    "BlockElement",
    "ContentDocument",
    "TextElement",
    "decode",
    "encode",
    "extract_variables",
    "render",
    "render_preview",
    "replace_variables",
    "validate_text_format",
    "validate_variables",
]

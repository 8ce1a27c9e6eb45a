"""Storage text encoder and decoder.

Storage text is a flat sequence of tags separated by blank lines::

    <text>ESCAPED_TEXT</text>

    <block id="123" />

    <block id="456">ESCAPED_OVERRIDE_TEXT</block>

Only ``&``, ``<`` and ``>`` are escaped. Decoding never fails: anything
between recognized tags that is not blank comes back as a text element.
"""

import re

from promptblocks.models.content import BlockElement, Element, TextElement, sort_elements
from promptblocks.utils.logging import get_logger


logger = get_logger(__name__)


SEPARATOR = "\n\n"

TAG_PATTERN = re.compile(
    r'<text>([\s\S]*?)</text>'
    r'|<block\s+id="?(\d+)"?\s*/>'
    r'|<block\s+id="?(\d+)"?\s*>([\s\S]*?)</block>'
)

BLOCK_REFERENCE_PATTERN = re.compile(r'<block\s+id="?(\d+)"?\s*/?>')


def escape_text(text: str) -> str:
    """Escape tag characters. ``&`` goes first so its entity is not re-escaped."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def unescape_text(text: str) -> str:
    """Inverse of escape_text. ``&amp;`` goes last so ``&amp;lt;`` stays ``&lt;``."""
    return text.replace("&gt;", ">").replace("&lt;", "<").replace("&amp;", "&")


def encode_element(element: Element) -> str | None:
    """Encode a single element, or return None if it produces no output.

    Blank text elements produce nothing. An overridden block with an empty
    or absent body is written self-closing, so it decodes as not overridden.
    """
    if element is None:
        raise TypeError("Cannot encode None element")

    if isinstance(element, TextElement):
        if element.is_blank():
            return None
        return f"<text>{escape_text(element.content)}</text>"

    if element.has_stale_override():
        logger.warning(
            "encode_stale_override",
            element_id=element.id,
            block_id=element.block_id,
        )

    override = element.effective_override
    if override:
        return f'<block id="{element.block_id}">{escape_text(override)}</block>'

    if element.is_overridden:
        logger.warning(
            "encode_override_fallback",
            element_id=element.id,
            block_id=element.block_id,
        )
    return f'<block id="{element.block_id}" />'


def encode(elements: list[Element]) -> str:
    """Encode elements as storage text in ascending order.

    Args:
        elements: Text and block elements (any order)

    Returns:
        Fragments joined by a blank line; empty string if nothing to write

    Raises:
        TypeError: If elements is None
    """
    if elements is None:
        raise TypeError("Cannot encode None document")

    fragments = []
    for element in sort_elements(list(elements)):
        fragment = encode_element(element)
        if fragment is not None:
            fragments.append(fragment)

    return SEPARATOR.join(fragments)


def _recovered_text(span: str, order: int) -> TextElement | None:
    content = span.strip()
    if not content:
        return None
    logger.warning("decode_orphaned_text", length=len(content), order=order)
    return TextElement(content=content, order=order, recovered=True)


def decode(text: str) -> list[Element]:
    """Decode storage text into elements with orders 0, 1, 2, ...

    Recognized tags become elements in the order they appear. Non-blank text
    before, between or after tags is recovered (trimmed) as text elements
    rather than dropped, so malformed markup may come back as literal text.

    Args:
        text: Storage text

    Returns:
        Decoded elements; empty list for blank input
    """
    if not text or not text.strip():
        return []

    elements: list[Element] = []
    last_index = 0

    for match in TAG_PATTERN.finditer(text):
        if match.start() > last_index:
            recovered = _recovered_text(text[last_index:match.start()], len(elements))
            if recovered is not None:
                elements.append(recovered)

        text_body, self_closing_id, override_id, override_body = match.groups()
        order = len(elements)

        if text_body is not None:
            elements.append(TextElement(content=unescape_text(text_body), order=order))
        elif self_closing_id is not None:
            elements.append(BlockElement(block_id=int(self_closing_id), order=order))
        else:
            elements.append(
                BlockElement(
                    block_id=int(override_id),
                    is_overridden=True,
                    override_content=unescape_text(override_body),
                    order=order,
                )
            )

        last_index = match.end()

    if last_index < len(text):
        recovered = _recovered_text(text[last_index:], len(elements))
        if recovered is not None:
            elements.append(recovered)

    logger.debug("decode_complete", count=len(elements))
    return elements


def referenced_block_ids(text: str) -> list[int]:
    """Block ids referenced by block tags, in order of appearance (with repeats)."""
    return [int(block_id) for block_id in BLOCK_REFERENCE_PATTERN.findall(text)]

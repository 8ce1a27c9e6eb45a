"""Pre-flight diagnostics and maintenance helpers for storage text.

Validation is advisory: decode() accepts anything. The nested-tag checks
are a regex heuristic (an open tag followed by another open tag of the same
kind before any close), not a nesting parser.
"""

import re

from promptblocks.format.serializer import decode, encode
from promptblocks.models.content import TextElement
from promptblocks.models.reports import FormatReport, FormatStats
from promptblocks.utils.logging import get_logger
from promptblocks.variables import extract_variables


logger = get_logger(__name__)


BLOCK_OPEN_PATTERN = re.compile(r'<block\s+id="?\d+"?\s*>')
BLOCK_CLOSE_PATTERN = re.compile(r'</block>')
TEXT_OPEN_PATTERN = re.compile(r'<text>')
TEXT_CLOSE_PATTERN = re.compile(r'</text>')
ID_ATTRIBUTE_PATTERN = re.compile(r'id="?([^"\s/>]*)"?')
BLOCK_MISSING_ID_PATTERN = re.compile(r'<block(?![^>]*id=)[^>]*>')
NESTED_BLOCK_PATTERN = re.compile(r'<block\b[^>]*(?<!/)>(?:(?!</block>)[\s\S])*?<block')
NESTED_TEXT_PATTERN = re.compile(r'<text>(?:(?!</text>)[\s\S])*?<text>')
BLOCK_TAG_PATTERN = re.compile(r'<block\b[^>]*>')

SELF_CLOSING_BLOCK_PATTERN = re.compile(r'<block\s+id="?\d+"?\s*/>')
OVERRIDE_BLOCK_PATTERN = re.compile(r'<block\s+id="?\d+"?\s*>[\s\S]*?</block>')
TEXT_SECTION_PATTERN = re.compile(r'<text>[\s\S]*?</text>')

STRAY_TAG_PATTERNS = [
    re.compile(r'<text>'),
    re.compile(r'</text>'),
    re.compile(r'<block[^>]*>'),
    re.compile(r'</block>'),
]


def validate_text_format(text: str) -> FormatReport:
    """Check storage text for structural problems.

    Reports unbalanced block/text tags, block tags without an id, non-numeric
    ids and nested tags of either kind. Blank text is valid.

    Args:
        text: Storage text

    Returns:
        FormatReport listing every problem found
    """
    errors: list[str] = []

    if not text or not text.strip():
        return FormatReport(is_valid=True, errors=[])

    if len(BLOCK_OPEN_PATTERN.findall(text)) != len(BLOCK_CLOSE_PATTERN.findall(text)):
        errors.append("Mismatched block tags - some blocks are not properly closed")

    if len(TEXT_OPEN_PATTERN.findall(text)) != len(TEXT_CLOSE_PATTERN.findall(text)):
        errors.append("Mismatched text tags - some text blocks are not properly closed")

    for tag in BLOCK_TAG_PATTERN.findall(text):
        id_match = ID_ATTRIBUTE_PATTERN.search(tag)
        if id_match is None:
            continue
        if not id_match.group(1).isdigit():
            errors.append(f"Invalid block ID: {id_match.group(0)}")

    for tag in BLOCK_MISSING_ID_PATTERN.findall(text):
        errors.append(f"Block tag missing ID: {tag}")

    if NESTED_BLOCK_PATTERN.search(text):
        errors.append("Nested block tags detected - blocks cannot be nested")

    if NESTED_TEXT_PATTERN.search(text):
        errors.append("Nested text tags detected - text blocks cannot be nested")

    if errors:
        logger.debug("format_validation_failed", error_count=len(errors))

    return FormatReport(is_valid=not errors, errors=errors)


def clean_text_format(text: str) -> str:
    """Normalize line endings, collapse 3+ newlines to a blank line, and strip."""
    text = text.replace("\r\n", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _strip_stray_tags(content: str) -> str:
    for pattern in STRAY_TAG_PATTERNS:
        content = pattern.sub("", content)
    return content.strip()


def fix_malformed_tags(text: str) -> str:
    """Remove stray tags that decoding recovered as literal text.

    Decodes the text, strips leftover ``<text>``, ``</text>``, ``<block ...>``
    and ``</block>`` markup from recovered text elements, and re-encodes.
    Content inside well-formed ``<text>`` tags is never touched. Text with
    nothing to fix is returned unchanged.
    """
    elements = decode(text)
    needs_fix = False

    for element in elements:
        if not isinstance(element, TextElement) or not element.recovered:
            continue
        if any(pattern.search(element.content) for pattern in STRAY_TAG_PATTERNS):
            element.content = _strip_stray_tags(element.content)
            needs_fix = True

    if not needs_fix:
        return text

    logger.info("malformed_tags_fixed", element_count=len(elements))
    return encode(elements)


def get_text_format_stats(text: str) -> FormatStats:
    """Count tags, variables, characters and words in storage text."""
    self_closing = SELF_CLOSING_BLOCK_PATTERN.findall(text)
    overridden = OVERRIDE_BLOCK_PATTERN.findall(text)

    return FormatStats(
        total_blocks=len(self_closing) + len(overridden),
        overridden_blocks=len(overridden),
        text_sections=len(TEXT_SECTION_PATTERN.findall(text)),
        variables=extract_variables(text),
        characters=len(text),
        words=len(text.split()),
    )

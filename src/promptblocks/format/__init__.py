"""Storage text format: encoding, decoding and diagnostics."""

from promptblocks.format.serializer import (
    decode,
    encode,
    escape_text,
    referenced_block_ids,
    unescape_text,
)
from promptblocks.format.validation import (
    clean_text_format,
    fix_malformed_tags,
    get_text_format_stats,
    validate_text_format,
)

__all__ = [
    "clean_text_format",
    "decode",
    "encode",
    "escape_text",
    "fix_malformed_tags",
    "get_text_format_stats",
    "referenced_block_ids",
    "unescape_text",
    "validate_text_format",
]

"""Synthetic element id generation.

Element ids only correlate elements with UI state; they are never written
to storage text.
"""

import uuid
from typing import Literal


def generate_element_id(kind: Literal["text", "block"]) -> str:
    """
    Generate a unique element id prefixed with the element kind.

    Args:
        kind: "text" or "block"

    Returns:
        Id string such as "text-3f2b9c1e8d7a4b6f"

    Example:
        >>> generate_element_id("block")
        "block-0c9e5d1a2b3f4e6d"
    """
    return f"{kind}-{uuid.uuid4().hex[:16]}"

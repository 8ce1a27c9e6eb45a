"""Content elements: the in-memory form of a composed prompt.

A composed prompt is an ordered sequence of elements, each either literal
text or a reference to a stored block. Elements are ordered by their
``order`` key, which is a sort key and not necessarily contiguous.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, Union

from promptblocks.utils.ids import generate_element_id


BlockType = Literal["preset", "one-off"]

ORIGINAL_TEXT_PLACEHOLDER = "{{originalText}}"


@dataclass
class TextElement:
    """Literal text typed into the composition.

    Attributes:
        content: Raw, unescaped text (may be empty)
        order: Sort key within the document
        id: Synthetic id for UI correlation (not serialized)
        recovered: True when decoding rebuilt this element from text found
                   outside any tag (not serialized)
    """

    content: str = ""
    order: float = 0
    id: str = field(default_factory=lambda: generate_element_id("text"))
    recovered: bool = False

    @property
    def kind(self) -> str:
        return "text"

    def is_blank(self) -> bool:
        """True when the content is empty or whitespace only."""
        return not self.content.strip()


@dataclass
class BlockElement:
    """Reference to a stored block, optionally overridden for this composition.

    The block's canonical text is never copied into the element; it is
    looked up by ``block_id`` when rendering.

    Attributes:
        block_id: Id of the referenced block in the block store
        block_type: Block type (always "preset" when decoded from storage text)
        is_overridden: Whether this composition replaces the block body
        override_content: Replacement body; only meaningful when is_overridden
        order: Sort key within the document
        id: Synthetic id for UI correlation (not serialized)
    """

    block_id: int
    block_type: BlockType = "preset"
    is_overridden: bool = False
    override_content: Optional[str] = None
    order: float = 0
    id: str = field(default_factory=lambda: generate_element_id("block"))

    @property
    def kind(self) -> str:
        return "block"

    @property
    def effective_override(self) -> Optional[str]:
        """Override body, or None whenever the element is not overridden.

        A stale ``override_content`` on a non-overridden element is ignored.
        """
        if not self.is_overridden:
            return None
        return self.override_content

    def has_stale_override(self) -> bool:
        """True when override_content is set although is_overridden is False."""
        return not self.is_overridden and self.override_content is not None

    def set_override(self, content: str) -> None:
        """Enable the override with the given body."""
        self.is_overridden = True
        self.override_content = content

    def clear_override(self) -> None:
        """Disable the override. Always drops the stored body."""
        self.is_overridden = False
        self.override_content = None


Element = Union[TextElement, BlockElement]


def sort_elements(elements: list[Element]) -> list[Element]:
    """Return elements in ascending order; ties keep their list position."""
    return sorted(elements, key=lambda element: element.order)

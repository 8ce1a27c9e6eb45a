"""ContentDocument: the ordered element list a user composes.

Insertion between two elements uses the midpoint of their order keys, so an
insert never renumbers the rest of the document. Repeated inserts into the
same gap eventually exhaust float precision; when the midpoint collides with
a neighbour the document is renormalized to 0, 1, 2, ... first.
"""

from typing import Iterator, Literal, Optional

from promptblocks.models.commands import (
    ClearOverride,
    DeleteElement,
    InsertBlock,
    InsertText,
    Reorder,
    SetBlockOverride,
    SetTextContent,
    UpdateCommand,
)
from promptblocks.models.content import (
    ORIGINAL_TEXT_PLACEHOLDER,
    BlockElement,
    BlockType,
    Element,
    TextElement,
    sort_elements,
)
from promptblocks.services.exceptions import ElementNotFoundError
from promptblocks.utils.logging import get_logger


logger = get_logger(__name__)


class ContentDocument:
    """Ordered collection of text and block elements.

    Attributes:
        elements: Elements kept sorted by order (ties in insertion order)

    Example:
        >>> doc = ContentDocument()
        >>> intro = doc.append_text("Hello {{name}}")
        >>> doc.append_block(7)
        >>> doc.to_text()
        '<text>Hello {{name}}</text>\\n\\n<block id="7" />'
    """

    def __init__(self, elements: Optional[list[Element]] = None):
        self.elements: list[Element] = sort_elements(list(elements or []))

    @classmethod
    def from_text(cls, text: str) -> "ContentDocument":
        """Decode storage text into a new document."""
        from promptblocks.format.serializer import decode

        return cls(decode(text))

    def to_text(self) -> str:
        """Encode the document as storage text."""
        from promptblocks.format.serializer import encode

        return encode(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.sorted_elements())

    def sorted_elements(self) -> list[Element]:
        """Elements in ascending order."""
        return sort_elements(self.elements)

    def get(self, element_id: str) -> Element:
        """Look up an element by id.

        Raises:
            ElementNotFoundError: If no element has this id
        """
        for element in self.elements:
            if element.id == element_id:
                return element
        raise ElementNotFoundError(element_id)

    def _index_of(self, sorted_elements: list[Element], element_id: str) -> int:
        for index, element in enumerate(sorted_elements):
            if element.id == element_id:
                return index
        return -1

    def has_duplicate_orders(self) -> bool:
        """True when two elements share an order key (sort becomes position-dependent)."""
        orders = [element.order for element in self.elements]
        return len(orders) != len(set(orders))

    # Ordering

    def next_order(self) -> float:
        """Order key for an element appended at the end."""
        return max([0, *(element.order for element in self.elements)]) + 1

    def start_order(self) -> float:
        """Order key for an element inserted before every other element."""
        if not self.elements:
            return self.next_order()
        return min(element.order for element in self.elements) - 1

    def order_after(self, element_id: Optional[str]) -> float:
        """Order key for an element inserted right after ``element_id``.

        Falls back to the end of the document when ``element_id`` is None,
        unknown, or the last element.
        """
        if element_id is None:
            return self.next_order()

        ordered = self.sorted_elements()
        index = self._index_of(ordered, element_id)
        if index == -1 or index == len(ordered) - 1:
            return self.next_order()

        current = ordered[index].order
        following = ordered[index + 1].order
        midpoint = (current + following) / 2

        if not current < midpoint < following:
            logger.info(
                "order_precision_exhausted",
                after_id=element_id,
                current=current,
                following=following,
            )
            self.renormalize()
            current = ordered[index].order
            following = ordered[index + 1].order
            midpoint = (current + following) / 2

        return midpoint

    def renormalize(self) -> None:
        """Renumber orders to 0, 1, 2, ... keeping the current sequence."""
        ordered = self.sorted_elements()
        for position, element in enumerate(ordered):
            element.order = position
        self.elements = ordered
        logger.debug("document_renormalized", count=len(ordered))

    def _insert(self, element: Element) -> Element:
        self.elements = sort_elements([*self.elements, element])
        return element

    # Insertion

    def append_text(self, content: str = "") -> TextElement:
        """Add a text element at the end."""
        return self._insert(TextElement(content=content, order=self.next_order()))

    def append_block(self, block_id: int, block_type: BlockType = "preset") -> BlockElement:
        """Add a (non-overridden) block reference at the end."""
        return self._insert(
            BlockElement(block_id=block_id, block_type=block_type, order=self.next_order())
        )

    def insert_text_after(self, element_id: Optional[str], content: str = "") -> TextElement:
        """Insert a text element after ``element_id`` (None appends)."""
        return self._insert(TextElement(content=content, order=self.order_after(element_id)))

    def insert_block_after(
        self,
        element_id: Optional[str],
        block_id: int,
        block_type: BlockType = "preset",
    ) -> BlockElement:
        """Insert a block reference after ``element_id`` (None appends)."""
        return self._insert(
            BlockElement(
                block_id=block_id,
                block_type=block_type,
                order=self.order_after(element_id),
            )
        )

    def insert_text_at_start(self, content: str = "") -> TextElement:
        """Insert a text element before every other element."""
        return self._insert(TextElement(content=content, order=self.start_order()))

    def insert_block_at_start(self, block_id: int, block_type: BlockType = "preset") -> BlockElement:
        """Insert a block reference before every other element."""
        return self._insert(
            BlockElement(block_id=block_id, block_type=block_type, order=self.start_order())
        )

    # Mutation

    def delete(self, element_id: str) -> Element:
        """Remove and return an element.

        Raises:
            ElementNotFoundError: If no element has this id
        """
        element = self.get(element_id)
        self.elements = [e for e in self.elements if e is not element]
        return element

    def move(self, element_id: str, direction: Literal["up", "down"]) -> bool:
        """Swap an element's order with its neighbour in sorted order.

        Returns:
            True if the element moved; False at a boundary or for an unknown id
        """
        ordered = self.sorted_elements()
        index = self._index_of(ordered, element_id)
        if index == -1:
            return False

        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(ordered):
            return False

        current, neighbour = ordered[index], ordered[target]
        current.order, neighbour.order = neighbour.order, current.order
        if current.order == neighbour.order:
            # Equal keys cannot express the swap; fall back to list position
            ordered[index], ordered[target] = neighbour, current
            self.elements = ordered
            self.renormalize()
        else:
            self.elements = sort_elements(self.elements)
        return True

    def move_up(self, element_id: str) -> bool:
        return self.move(element_id, "up")

    def move_down(self, element_id: str) -> bool:
        return self.move(element_id, "down")

    def set_text_content(self, element_id: str, content: str) -> TextElement:
        element = self._get_typed(element_id, TextElement)
        element.content = content
        return element

    def set_override(self, element_id: str, content: str) -> BlockElement:
        element = self._get_typed(element_id, BlockElement)
        element.set_override(content)
        return element

    def clear_override(self, element_id: str) -> BlockElement:
        element = self._get_typed(element_id, BlockElement)
        element.clear_override()
        return element

    def toggle_override(self, element_id: str, content: Optional[str] = None) -> BlockElement:
        """Flip a block's override state.

        Turning the override on without content seeds ``{{originalText}}``, so
        the block renders exactly as before and still encodes with a body.
        Turning it off always drops the stored body.
        """
        element = self._get_typed(element_id, BlockElement)
        if element.is_overridden:
            element.clear_override()
        else:
            element.set_override(content if content else ORIGINAL_TEXT_PLACEHOLDER)
        return element

    def _get_typed(self, element_id: str, expected: type) -> Element:
        element = self.get(element_id)
        if not isinstance(element, expected):
            raise TypeError(
                f"Element {element_id} is a {element.kind} element, "
                f"expected {expected.__name__}"
            )
        return element

    def apply(self, command: UpdateCommand) -> Optional[Element]:
        """Apply a validated update command.

        Returns:
            The element created or modified (the removed one for deletes);
            None when a reorder hits a boundary

        Raises:
            ElementNotFoundError: If the command targets an unknown element
            TypeError: If the command targets the wrong kind of element
        """
        logger.debug("apply_command", kind=command.kind)

        if isinstance(command, SetTextContent):
            return self.set_text_content(command.element_id, command.content)
        if isinstance(command, SetBlockOverride):
            return self.set_override(command.element_id, command.content)
        if isinstance(command, ClearOverride):
            return self.clear_override(command.element_id)
        if isinstance(command, Reorder):
            element = self.get(command.element_id)
            return element if self.move(command.element_id, command.direction) else None
        if isinstance(command, InsertText):
            if command.after_id is not None:
                self.get(command.after_id)
            return self.insert_text_after(command.after_id, command.content)
        if isinstance(command, InsertBlock):
            if command.after_id is not None:
                self.get(command.after_id)
            return self.insert_block_after(command.after_id, command.block_id, command.block_type)
        if isinstance(command, DeleteElement):
            return self.delete(command.element_id)

        raise TypeError(f"Unsupported command: {command!r}")

    # Derived data

    def variables_in_use(self, resolve_block_content=None) -> list[str]:
        """Variables referenced anywhere in the document, first occurrence first.

        Block elements contribute their override body (with ``{{originalText}}``
        expanded) or their canonical body from ``resolve_block_content``.

        Args:
            resolve_block_content: Callable ``block_id -> str | None`` or a
                mapping of block ids to bodies; None skips canonical bodies
        """
        from promptblocks.render.snapshot import make_resolver, resolve_element_text
        from promptblocks.variables import get_all_variables

        resolver = make_resolver(resolve_block_content)
        return get_all_variables(
            resolve_element_text(element, resolver) for element in self.sorted_elements()
        )

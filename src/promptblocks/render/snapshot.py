"""Render a content document into final or preview text.

Block bodies come from a synchronous resolver supplied by the caller, so
rendering performs no I/O of its own. A block the resolver cannot supply
renders as empty text instead of aborting the render.
"""

from typing import Any, Callable, Mapping, Optional, Union

from promptblocks.models.content import (
    ORIGINAL_TEXT_PLACEHOLDER,
    Element,
    TextElement,
    sort_elements,
)
from promptblocks.utils.logging import get_logger
from promptblocks.variables import replace_variables


logger = get_logger(__name__)


SEPARATOR = "\n\n"

BlockResolver = Callable[[int], Optional[str]]
BlockSource = Union[BlockResolver, Mapping[int, str], None]


def make_resolver(source: Any) -> BlockResolver:
    """Normalize a block source into a ``block_id -> str | None`` callable.

    Accepts None (no canonical bodies), a mapping of ids to bodies, an object
    with a ``resolve_block_content`` method (e.g. BlockLibrary) or a callable.

    Raises:
        TypeError: If the source is none of the above
    """
    if source is None:
        return lambda block_id: None
    if isinstance(source, Mapping):
        return source.get
    if hasattr(source, "resolve_block_content"):
        return source.resolve_block_content
    if callable(source):
        return source
    raise TypeError(f"Unsupported block source: {type(source).__name__}")


def _resolve_original(resolver: BlockResolver, block_id: int) -> str:
    try:
        content = resolver(block_id)
    except Exception as e:
        logger.warning("block_resolve_failed", block_id=block_id, error=str(e))
        return ""

    if content is None:
        logger.warning("block_not_found", block_id=block_id)
        return ""
    return content


def resolve_element_text(element: Element, resolver: BlockResolver) -> str:
    """Text of an element before variable substitution.

    For an overridden block with a non-empty body, every ``{{originalText}}``
    in the body is replaced with the block's canonical text. Otherwise a
    block yields its canonical text.
    """
    if isinstance(element, TextElement):
        return element.content

    override = element.effective_override
    if override:
        if ORIGINAL_TEXT_PLACEHOLDER in override:
            original = _resolve_original(resolver, element.block_id)
            return override.replace(ORIGINAL_TEXT_PLACEHOLDER, original)
        return override

    return _resolve_original(resolver, element.block_id)


def _elements_of(document: Any) -> list[Element]:
    if document is None:
        raise TypeError("Cannot render None document")
    elements = getattr(document, "elements", document)
    return sort_elements(list(elements))


def render_fragments(
    document: Any,
    values: Optional[Mapping[str, str]] = None,
    resolve_block_content: BlockSource = None,
) -> list[str]:
    """Render each element (ascending order) with variables substituted."""
    resolver = make_resolver(resolve_block_content)
    values = values or {}

    fragments = []
    for element in _elements_of(document):
        text = resolve_element_text(element, resolver)
        fragments.append(replace_variables(text, values))
    return fragments


def render(
    document: Any,
    values: Optional[Mapping[str, str]] = None,
    resolve_block_content: BlockSource = None,
    *,
    filtered: bool = True,
) -> str:
    """Render a document into text.

    Args:
        document: ContentDocument or iterable of elements
        values: Variable value map; unknown placeholders are left in place
        resolve_block_content: Block body source (callable, mapping or library)
        filtered: Drop fragments that are blank after substitution (final
            output for copying or storage). Pass False for a live preview
            that keeps empty slots visible.

    Returns:
        Fragments joined by a blank line

    Raises:
        TypeError: If document is None
    """
    fragments = render_fragments(document, values, resolve_block_content)
    if filtered:
        fragments = [fragment for fragment in fragments if fragment.strip()]
    return SEPARATOR.join(fragments)


def render_preview(
    document: Any,
    values: Optional[Mapping[str, str]] = None,
    resolve_block_content: BlockSource = None,
) -> str:
    """Unfiltered render for live preview."""
    return render(document, values, resolve_block_content, filtered=False)


"""YAML-backed block library.

Stands in for the block store the engine treats as an external
collaborator. The file looks like::

    blocks:
      - id: 1
        title: Greeting
        content: "Hello {{name}}"
        tags: [intro]

The library exposes ``resolve_block_content`` so it can be passed straight
to ``render()``.
"""

import os
from pathlib import Path
from typing import Iterator, Optional

import yaml
from pydantic import ValidationError

from promptblocks.models.content import BlockElement
from promptblocks.models.library import BlockRecord
from promptblocks.services.exceptions import BlockLibraryError, BlockNotFoundError
from promptblocks.utils.logging import get_logger


logger = get_logger(__name__)


class BlockLibrary:
    """In-memory block collection with optional YAML persistence.

    Example:
        >>> library = BlockLibrary.load(Path("blocks.yaml"))
        >>> library.resolve_block_content(1)
        'Hello {{name}}'
    """

    def __init__(self, blocks: Optional[list[BlockRecord]] = None, path: Optional[Path] = None):
        self.path = path
        self._blocks: dict[int, BlockRecord] = {}
        for block in blocks or []:
            if block.id in self._blocks:
                raise BlockLibraryError(str(path), f"Duplicate block id {block.id}")
            self._blocks[block.id] = block

    @classmethod
    def load(cls, path: Path) -> "BlockLibrary":
        """
        Load a library from a YAML file.

        A missing file yields an empty library bound to ``path``.

        Raises:
            BlockLibraryError: If the file is not valid YAML or has invalid entries
        """
        path = Path(path).expanduser()

        if not path.exists():
            logger.info("block_library_missing", path=str(path))
            return cls(path=path)

        try:
            with path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("block_library_yaml_error", path=str(path), error=str(e))
            raise BlockLibraryError(str(path), f"Invalid YAML ({e})") from e

        if not isinstance(data, dict) or not isinstance(data.get("blocks", []), list):
            raise BlockLibraryError(str(path), "Expected a mapping with a 'blocks' list")

        try:
            blocks = [BlockRecord(**entry) for entry in data.get("blocks", [])]
        except (TypeError, ValidationError) as e:
            logger.error("block_library_validation_error", path=str(path), error=str(e))
            raise BlockLibraryError(str(path), f"Invalid block entry ({e})") from e

        library = cls(blocks, path=path)
        logger.info("block_library_loaded", path=str(path), count=len(library))
        return library

    def save(self, path: Optional[Path] = None) -> None:
        """
        Write the library to YAML using a temp-file-and-rename.

        Raises:
            BlockLibraryError: If no path is known
            OSError: On file I/O errors
        """
        if path is None and self.path is None:
            raise BlockLibraryError("<unset>", "No path to save block library")
        target = Path(path if path is not None else self.path).expanduser()

        data = {
            "blocks": [
                block.model_dump(exclude={"variables"})
                for block in sorted(self._blocks.values(), key=lambda b: b.id)
            ]
        }

        target.parent.mkdir(parents=True, exist_ok=True)
        temp_path = target.parent / f".{target.name}.tmp.{os.getpid()}"
        try:
            temp_path.write_text(
                yaml.safe_dump(data, sort_keys=False, allow_unicode=True),
                encoding="utf-8",
            )
            temp_path.replace(target)
        except Exception as e:
            if temp_path.exists():
                temp_path.unlink()
            logger.error("block_library_save_failed", path=str(target), error=str(e))
            raise

        self.path = target
        logger.info("block_library_saved", path=str(target), count=len(self))

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[BlockRecord]:
        return iter(sorted(self._blocks.values(), key=lambda b: b.id))

    def __contains__(self, block_id: int) -> bool:
        return block_id in self._blocks

    def get(self, block_id: int) -> Optional[BlockRecord]:
        return self._blocks.get(block_id)

    def require(self, block_id: int) -> BlockRecord:
        """Get a block or raise BlockNotFoundError."""
        block = self._blocks.get(block_id)
        if block is None:
            raise BlockNotFoundError(block_id)
        return block

    def resolve_block_content(self, block_id: int) -> Optional[str]:
        """Canonical text of a block, or None if it is not in the library."""
        block = self._blocks.get(block_id)
        return block.content if block is not None else None

    def add(
        self,
        title: str,
        content: str,
        block_type: str = "preset",
        tags: Optional[list[str]] = None,
        categories: Optional[list[str]] = None,
    ) -> BlockRecord:
        """Create a block with the next free id."""
        next_id = max(self._blocks, default=0) + 1
        block = BlockRecord(
            id=next_id,
            title=title,
            content=content,
            type=block_type,
            tags=tags or [],
            categories=categories or [],
        )
        self._blocks[next_id] = block
        logger.info("block_added", block_id=next_id, title=block.title)
        return block

    def update_content(self, block_id: int, content: str) -> BlockRecord:
        """Replace a block's canonical text."""
        block = self.require(block_id)
        block.content = content
        logger.info("block_content_updated", block_id=block_id)
        return block

    def apply_override(self, element: BlockElement) -> BlockRecord:
        """Make an element's override the block's new canonical text.

        ``{{originalText}}`` in the override is expanded against the current
        canonical text first. The element's override is cleared afterwards.

        Raises:
            ValueError: If the element has no override body
            BlockNotFoundError: If the referenced block does not exist
        """
        from promptblocks.render.snapshot import resolve_element_text

        if not element.effective_override:
            raise ValueError(f"Element {element.id} has no override to apply")

        new_content = resolve_element_text(element, self.resolve_block_content)
        block = self.update_content(element.block_id, new_content)
        element.clear_override()
        return block

    def create_from_override(self, element: BlockElement, title: Optional[str] = None) -> BlockRecord:
        """Save an element's override as a new preset block.

        Raises:
            ValueError: If the element has no non-blank override body
        """
        from promptblocks.render.snapshot import resolve_element_text

        override = element.effective_override
        if not override or not override.strip():
            raise ValueError(f"Element {element.id} has no override to save")

        source = self.get(element.block_id)
        if title is None:
            title = f"{source.title if source else 'Block'} (Override)"

        content = resolve_element_text(element, self.resolve_block_content)
        return self.add(title=title, content=content)

    def increment_usage(self, block_ids: list[int]) -> None:
        """Bump usage counters; unknown ids are skipped."""
        for block_id in block_ids:
            block = self._blocks.get(block_id)
            if block is None:
                logger.warning("usage_unknown_block", block_id=block_id)
                continue
            block.usage_count += 1

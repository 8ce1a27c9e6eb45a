"""Shared test fixtures for all test modules."""

import pytest

from promptblocks.models.library import BlockRecord
from promptblocks.services.block_library import BlockLibrary


@pytest.fixture
def library():
    """Block library with a few blocks, including one with variables."""
    return BlockLibrary(
        [
            BlockRecord(id=1, title="Greeting", content="Hello {{name}}"),
            BlockRecord(id=7, title="Body", content="Block body {{x}}"),
            BlockRecord(id=9, title="Original", content="ORIGINAL"),
        ]
    )


@pytest.fixture
def library_file(tmp_path):
    """Block library YAML on disk."""
    path = tmp_path / "blocks.yaml"
    path.write_text(
        """
blocks:
  - id: 7
    title: Body
    content: "Block body {{x}}"
  - id: 9
    title: Original
    content: ORIGINAL
    tags: [sample]
"""
    )
    return path

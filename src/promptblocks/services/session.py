"""Editing sessions: open documents with their variable value maps.

Each open document is an independent (ContentDocument, variable map) pair.
The controller only keys them; every engine call stays per-document.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from promptblocks.format.serializer import referenced_block_ids
from promptblocks.models.commands import UpdateCommand, parse_command
from promptblocks.models.content import Element
from promptblocks.models.document import ContentDocument
from promptblocks.models.library import SavedPrompt
from promptblocks.models.reports import VariableReport
from promptblocks.render.snapshot import (
    BlockSource,
    make_resolver,
    render,
    render_preview,
    resolve_element_text,
)
from promptblocks.services.exceptions import SessionNotFoundError
from promptblocks.utils.logging import get_logger
from promptblocks.variables import validate_variables


logger = get_logger(__name__)


@dataclass
class EditingSession:
    """One open document.

    Attributes:
        key: Session key within the controller
        title: Prompt title used when saving
        document: The composed content
        variables: Variable value map (never derived from storage text)
    """

    key: str
    title: str = "Untitled"
    document: ContentDocument = field(default_factory=ContentDocument)
    variables: dict[str, str] = field(default_factory=dict)

    def apply(self, command: Union[UpdateCommand, dict[str, Any]]) -> Optional[Element]:
        """Apply an update command, validating raw payloads first."""
        if isinstance(command, dict):
            command = parse_command(command)
        return self.document.apply(command)

    def set_variable(self, name: str, value: str) -> None:
        self.variables[name.strip()] = value

    def remove_variable(self, name: str) -> None:
        self.variables.pop(name.strip(), None)

    def variables_in_use(self, blocks: BlockSource = None) -> list[str]:
        return self.document.variables_in_use(blocks)

    def variable_report(self, blocks: BlockSource = None) -> VariableReport:
        """Missing and unused variables across the whole document."""
        resolver = make_resolver(blocks)
        combined = "\n\n".join(
            resolve_element_text(element, resolver)
            for element in self.document.sorted_elements()
        )
        return validate_variables(combined, self.variables)

    def final_text(self, blocks: BlockSource = None) -> str:
        """Filtered render, for copying."""
        return render(self.document, self.variables, blocks)

    def preview(self, blocks: BlockSource = None) -> str:
        """Unfiltered render that keeps empty slots."""
        return render_preview(self.document, self.variables, blocks)

    def to_saved_prompt(self, blocks: BlockSource = None) -> SavedPrompt:
        """Build the persisted record for this document.

        The snapshot is rendered from the decoded storage text, so it shows
        exactly what reloading the saved prompt would produce.
        """
        content_text = self.document.to_text()
        reloaded = ContentDocument.from_text(content_text)
        snapshot = render(reloaded, self.variables, blocks).strip()

        return SavedPrompt(
            title=self.title,
            content_text=content_text,
            content_snapshot=snapshot,
            variables=dict(self.variables),
            block_ids=referenced_block_ids(content_text),
        )


class SessionController:
    """Keyed collection of independent editing sessions.

    Example:
        >>> controller = SessionController(blocks=library)
        >>> session = controller.open(text='<block id="7" />', variables={"x": "42"})
        >>> controller.save(session.key).content_snapshot
        'Block body 42'
    """

    def __init__(self, blocks: BlockSource = None):
        self.blocks = blocks
        self._sessions: dict[str, EditingSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, key: str) -> bool:
        return key in self._sessions

    def keys(self) -> list[str]:
        return list(self._sessions)

    def open(
        self,
        key: Optional[str] = None,
        text: str = "",
        variables: Optional[dict[str, str]] = None,
        title: str = "Untitled",
    ) -> EditingSession:
        """Open a session from storage text (empty text starts a new document).

        Opening an existing key replaces that session.
        """
        key = key or uuid.uuid4().hex
        session = EditingSession(
            key=key,
            title=title,
            document=ContentDocument.from_text(text),
            variables=dict(variables or {}),
        )
        self._sessions[key] = session
        logger.info("session_opened", key=key, element_count=len(session.document))
        return session

    def get(self, key: str) -> EditingSession:
        session = self._sessions.get(key)
        if session is None:
            raise SessionNotFoundError(key)
        return session

    def close(self, key: str) -> EditingSession:
        session = self.get(key)
        del self._sessions[key]
        logger.info("session_closed", key=key)
        return session

    def save(self, key: str) -> SavedPrompt:
        """Build the saved record and bump usage of referenced blocks.

        Usage counters are only touched when the controller's block source
        is a library with ``increment_usage``.
        """
        session = self.get(key)
        saved = session.to_saved_prompt(self.blocks)

        if hasattr(self.blocks, "increment_usage"):
            self.blocks.increment_usage(saved.block_ids)

        logger.info(
            "session_saved",
            key=key,
            block_count=len(saved.block_ids),
            snapshot_length=len(saved.content_snapshot),
        )
        return saved

"""Update commands accepted by ContentDocument.apply().

Editors send loosely-typed payloads; they are validated into one of these
models at the boundary (``parse_command``) before any element is touched.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class SetTextContent(BaseModel):
    """Replace the content of a text element."""

    kind: Literal["set_text_content"] = "set_text_content"
    element_id: str = Field(..., min_length=1)
    content: str = Field(..., description="New raw text (may be empty)")

    model_config = {"frozen": True}


class SetBlockOverride(BaseModel):
    """Enable or replace the override body of a block element."""

    kind: Literal["set_block_override"] = "set_block_override"
    element_id: str = Field(..., min_length=1)
    content: str = Field(
        ...,
        description="Override body; may reference {{originalText}}"
    )

    model_config = {"frozen": True}


class ClearOverride(BaseModel):
    """Reset a block element to its canonical body."""

    kind: Literal["clear_override"] = "clear_override"
    element_id: str = Field(..., min_length=1)

    model_config = {"frozen": True}


class Reorder(BaseModel):
    """Move an element one position up or down."""

    kind: Literal["reorder"] = "reorder"
    element_id: str = Field(..., min_length=1)
    direction: Literal["up", "down"]

    model_config = {"frozen": True}


class InsertText(BaseModel):
    """Insert a text element after another element (or at the end)."""

    kind: Literal["insert_text"] = "insert_text"
    after_id: Optional[str] = Field(
        default=None,
        description="Element to insert after; None appends to the end"
    )
    content: str = ""

    model_config = {"frozen": True}


class InsertBlock(BaseModel):
    """Insert a block reference after another element (or at the end)."""

    kind: Literal["insert_block"] = "insert_block"
    after_id: Optional[str] = None
    block_id: int = Field(..., ge=0)
    block_type: Literal["preset", "one-off"] = "preset"

    model_config = {"frozen": True}


class DeleteElement(BaseModel):
    """Remove an element from the document."""

    kind: Literal["delete_element"] = "delete_element"
    element_id: str = Field(..., min_length=1)

    model_config = {"frozen": True}


UpdateCommand = Annotated[
    Union[
        SetTextContent,
        SetBlockOverride,
        ClearOverride,
        Reorder,
        InsertText,
        InsertBlock,
        DeleteElement,
    ],
    Field(discriminator="kind"),
]

_command_adapter: TypeAdapter = TypeAdapter(UpdateCommand)


def parse_command(payload: dict[str, Any]) -> UpdateCommand:
    """Validate a raw payload into an update command.

    Args:
        payload: Dict with a "kind" key naming the command

    Returns:
        The matching command model

    Raises:
        pydantic.ValidationError: If the kind is unknown or fields are invalid

    Example:
        >>> parse_command({"kind": "reorder", "element_id": "text-1", "direction": "up"})
        Reorder(kind='reorder', element_id='text-1', direction='up')
    """
    return _command_adapter.validate_python(payload)

"""Block library records and saved prompt records."""

from pydantic import BaseModel, Field, computed_field, field_validator
from typing import Literal

from promptblocks.variables import extract_variables


class BlockRecord(BaseModel):
    """A reusable stored block."""

    id: int = Field(..., ge=0, description="Block id referenced by <block id=...> tags")

    title: str = Field(..., min_length=1, description="Display title")

    content: str = Field(
        default="",
        description="Canonical block text; may contain {{variables}}"
    )

    type: Literal["preset", "one-off"] = Field(
        default="preset",
        description="Preset blocks are reusable; one-off blocks belong to a single prompt"
    )

    tags: list[str] = Field(default_factory=list)

    categories: list[str] = Field(default_factory=list)

    usage_count: int = Field(
        default=0,
        ge=0,
        description="Number of saves that referenced this block"
    )

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        """Reject whitespace-only titles."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Block title cannot be blank")
        return stripped

    @computed_field
    @property
    def variables(self) -> list[str]:
        """Variables used in the block content."""
        return extract_variables(self.content)

    model_config = {"frozen": False}


class SavedPrompt(BaseModel):
    """The record persisted when a composed prompt is saved."""

    title: str = Field(..., description="Prompt title")

    content_text: str = Field(
        ...,
        description="Storage text of the content document"
    )

    content_snapshot: str = Field(
        ...,
        description="Filtered render of the document with the saved variable values"
    )

    variables: dict[str, str] = Field(
        default_factory=dict,
        description="Variable value map saved alongside the document"
    )

    block_ids: list[int] = Field(
        default_factory=list,
        description="Block ids referenced by the storage text, one entry per tag"
    )

    model_config = {"frozen": True}

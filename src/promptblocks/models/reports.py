"""Diagnostic result models returned by validation functions."""

from pydantic import BaseModel, Field


class VariableReport(BaseModel):
    """Result of checking a text's variables against a value map."""

    is_valid: bool = Field(
        ...,
        description="True when no extracted variable is missing a value"
    )

    missing_variables: list[str] = Field(
        default_factory=list,
        description="Variables used in the text that are absent or mapped to an empty string"
    )

    unused_variables: list[str] = Field(
        default_factory=list,
        description="Keys in the value map that the text never references"
    )

    model_config = {"frozen": True}


class FormatReport(BaseModel):
    """Result of a pre-flight storage text check (advisory only)."""

    is_valid: bool = Field(..., description="True when no errors were found")

    errors: list[str] = Field(
        default_factory=list,
        description="Human-readable descriptions of each problem found"
    )

    model_config = {"frozen": True}


class FormatStats(BaseModel):
    """Counts describing a storage text."""

    total_blocks: int = Field(..., ge=0, description="Self-closing plus overridden block tags")
    overridden_blocks: int = Field(..., ge=0, description="Block tags carrying an override body")
    text_sections: int = Field(..., ge=0, description="Complete <text> tags")
    variables: list[str] = Field(default_factory=list, description="Variables found anywhere in the text")
    characters: int = Field(..., ge=0, description="Length of the raw storage text")
    words: int = Field(..., ge=0, description="Whitespace-separated words in the raw storage text")

    model_config = {"frozen": True}

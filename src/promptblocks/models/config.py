"""Configuration models for promptblocks."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


DEFAULT_CONFIG_DIR = Path.home() / ".config" / "promptblocks"


class LibraryConfig(BaseModel):
    """Location of the block library file."""

    blocks_path: str = Field(
        default=str(DEFAULT_CONFIG_DIR / "blocks.yaml"),
        description="Path to the YAML block library"
    )

    @field_validator("blocks_path")
    @classmethod
    def validate_blocks_path(cls, v: str) -> str:
        """Expand ~ and reject directories."""
        path = Path(v).expanduser()
        if path.exists() and path.is_dir():
            raise ValueError(
                f"Block library path is a directory: {path}\n"
                f"Please point blocks_path at a YAML file"
            )
        return str(path)

    model_config = {"frozen": True}


class RenderConfig(BaseModel):
    """Rendering defaults for the CLI."""

    mode: Literal["final", "preview"] = Field(
        default="final",
        description="'final' drops blank fragments; 'preview' keeps empty slots"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for promptblocks."""

    library: LibraryConfig = Field(default_factory=LibraryConfig, description="Block library settings")
    render: RenderConfig = Field(default_factory=RenderConfig, description="Render settings")

    model_config = {"frozen": True}

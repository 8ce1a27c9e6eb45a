"""CLI entry point for promptblocks."""

from pathlib import Path
from typing import Optional

import click
import yaml
from rich.console import Console
from rich.table import Table

from promptblocks.config import load_config
from promptblocks.format.serializer import decode
from promptblocks.format.validation import (
    clean_text_format,
    fix_malformed_tags,
    get_text_format_stats,
    validate_text_format,
)
from promptblocks.models.config import Config
from promptblocks.models.content import TextElement
from promptblocks.models.document import ContentDocument
from promptblocks.render.snapshot import render
from promptblocks.services.block_library import BlockLibrary
from promptblocks.services.exceptions import BlockLibraryError
from promptblocks.services.session import EditingSession
from promptblocks.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)
console = Console()

PREVIEW_WIDTH = 60


def parse_assignment(assignment: str) -> tuple[str, str]:
    """
    Parse a NAME=VALUE command-line assignment.

    Raises:
        ValueError: If there is no '=' or the name is blank
    """
    if "=" not in assignment:
        raise ValueError(f"Invalid variable assignment: {assignment}. Expected: NAME=VALUE")

    name, value = assignment.split("=", 1)
    name = name.strip()
    if not name:
        raise ValueError(f"Invalid variable assignment: {assignment}. Variable name is empty")
    return name, value


def load_variables(vars_file: Optional[Path], assignments: tuple[str, ...]) -> dict[str, str]:
    """
    Build a variable value map from a YAML file plus NAME=VALUE overrides.

    Raises:
        click.ClickException: If the file is not a YAML mapping or an assignment is invalid
    """
    values: dict[str, str] = {}

    if vars_file is not None:
        try:
            data = yaml.safe_load(vars_file.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            logger.error("variables_yaml_error", path=str(vars_file), error=str(e))
            raise click.ClickException(f"Invalid YAML in {vars_file}: {e}")
        if not isinstance(data, dict):
            raise click.ClickException(f"Variables file must be a mapping: {vars_file}")
        values.update({str(k).strip(): "" if v is None else str(v) for k, v in data.items()})

    for assignment in assignments:
        try:
            name, value = parse_assignment(assignment)
        except ValueError as e:
            raise click.ClickException(str(e))
        values[name] = value

    return values


def read_storage_text(path: Path) -> str:
    logger.info("storage_text_loading", path=str(path))
    return path.read_text(encoding="utf-8")


def open_library(ctx: click.Context, library_path: Optional[Path]) -> BlockLibrary:
    """
    Load the block library from --library or the configured path.

    Raises:
        click.ClickException: If the library file is invalid
    """
    if library_path is None:
        config: Config = ctx.obj["config"]
        library_path = Path(config.library.blocks_path)

    try:
        return BlockLibrary.load(library_path)
    except BlockLibraryError as e:
        raise click.ClickException(str(e))


def _preview(text: str) -> str:
    single_line = " ".join(text.split())
    if len(single_line) > PREVIEW_WIDTH:
        return single_line[: PREVIEW_WIDTH - 3] + "..."
    return single_line


library_option = click.option(
    "--library",
    "library_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Block library YAML (default: from config)",
)


@click.group()
@click.version_option(version="0.1.0", prog_name="promptblocks")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.config/promptblocks/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]):
    """promptblocks: compose prompts from reusable blocks and variables."""
    configure_logging()

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(file: Path):
    """Check a storage text file for malformed tags."""
    report = validate_text_format(read_storage_text(file))

    if report.is_valid:
        click.echo(f"{file}: OK")
        return

    logger.info("validate_failed", path=str(file), error_count=len(report.errors))
    click.echo(f"{file}: {len(report.errors)} problem(s)")
    for error in report.errors:
        click.echo(f"  - {error}")
    raise SystemExit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect(file: Path):
    """Show the elements decoded from a storage text file."""
    elements = decode(read_storage_text(file))

    if not elements:
        click.echo("No elements.")
        return

    table = Table(title=str(file))
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Block")
    table.add_column("Override")
    table.add_column("Content")

    for element in elements:
        if isinstance(element, TextElement):
            kind = "text (recovered)" if element.recovered else "text"
            table.add_row(str(int(element.order)), kind, "", "", _preview(element.content))
        else:
            table.add_row(
                str(int(element.order)),
                "block",
                str(element.block_id),
                "yes" if element.is_overridden else "no",
                _preview(element.override_content or ""),
            )

    console.print(table)


@cli.command(name="render")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--vars",
    "vars_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML mapping of variable values",
)
@click.option("--set", "assignments", multiple=True, help="Set a variable: NAME=VALUE (repeatable)")
@click.option("--preview/--final", "preview", default=None, help="Keep empty fragments (default: from config)")
@library_option
@click.pass_context
def render_command(
    ctx: click.Context,
    file: Path,
    vars_file: Optional[Path],
    assignments: tuple[str, ...],
    preview: Optional[bool],
    library_path: Optional[Path],
):
    """
    Render a storage text file with block bodies and variable values.

    Examples:
        promptblocks render prompt.txt --set name=World
        promptblocks render prompt.txt --vars values.yaml --preview
    """
    values = load_variables(vars_file, assignments)
    library = open_library(ctx, library_path)

    if preview is None:
        preview = ctx.obj["config"].render.mode == "preview"

    document = ContentDocument.from_text(read_storage_text(file))
    output = render(document, values, library, filtered=not preview)

    logger.info("render_completed", path=str(file), preview=preview, length=len(output))
    click.echo(output)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--vars",
    "vars_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML mapping of variable values",
)
@click.option("--set", "assignments", multiple=True, help="Set a variable: NAME=VALUE (repeatable)")
@library_option
@click.pass_context
def variables(
    ctx: click.Context,
    file: Path,
    vars_file: Optional[Path],
    assignments: tuple[str, ...],
    library_path: Optional[Path],
):
    """List variables used by a prompt and report missing values."""
    values = load_variables(vars_file, assignments)
    library = open_library(ctx, library_path)

    session = EditingSession(
        key=str(file),
        document=ContentDocument.from_text(read_storage_text(file)),
        variables=values,
    )
    in_use = session.variables_in_use(library)
    report = session.variable_report(library)

    if not in_use:
        click.echo("No variables.")
    for name in in_use:
        marker = "missing" if name in report.missing_variables else "set"
        click.echo(f"{name}\t{marker}")

    if report.unused_variables:
        click.echo(f"Unused: {', '.join(report.unused_variables)}")

    if not report.is_valid:
        raise SystemExit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def stats(file: Path):
    """Show tag, variable and word counts for a storage text file."""
    result = get_text_format_stats(read_storage_text(file))

    click.echo(f"Blocks: {result.total_blocks} ({result.overridden_blocks} overridden)")
    click.echo(f"Text sections: {result.text_sections}")
    click.echo(f"Variables: {', '.join(result.variables) if result.variables else '-'}")
    click.echo(f"Characters: {result.characters}")
    click.echo(f"Words: {result.words}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--write", is_flag=True, help="Rewrite the file in place instead of printing")
def fix(file: Path, write: bool):
    """Normalize blank lines and strip stray tags from a storage text file."""
    original = read_storage_text(file)
    fixed = fix_malformed_tags(clean_text_format(original))

    if not write:
        click.echo(fixed)
        return

    if fixed == original:
        click.echo(f"{file}: already clean")
        return

    file.write_text(fixed, encoding="utf-8")
    logger.info("storage_text_fixed", path=str(file))
    click.echo(f"{file}: fixed")


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()

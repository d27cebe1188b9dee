"""CLI interface for schemapack using Typer framework."""

import json as jsonlib
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from schemapack import __description__, __version__
from schemapack.config import BuildOptions, SchemapackConfig, load_config
from schemapack.errors import SchemapackError, UnknownSchemaKeyError
from schemapack.loader import load_models
from schemapack.schemas import (
    BuildJsonSchemasResult,
    RefFormatter,
    build_json_schemas,
    check_schema_compliance,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="schemapack",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

# Status output goes to stderr so stdout stays valid JSON
console = Console(stderr=True)

LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"schemapack version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True, help="Show version and exit")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """schemapack - Combined JSON Schema documents from Pydantic models."""
    ctx.obj = {"verbose": verbose}


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def _setup_logging(config: SchemapackConfig, verbose: bool) -> None:
    """Route log records through Rich at the configured level."""
    level = logging.DEBUG if verbose else LOG_LEVELS[config.logging.level]
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _prepare(ctx: typer.Context, config_path: Path | None) -> SchemapackConfig:
    """Load configuration and set up logging for a command."""
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    _setup_logging(config, verbose)
    return config


def _resolve(
    config: SchemapackConfig, models_ref: str, overrides: dict[str, Any]
) -> tuple[BuildOptions, Mapping[str, Any]]:
    """Merge command-line options over the config file and load the referenced models."""
    # Command-line values left unset do not override the config file
    overrides = {key: value for key, value in overrides.items() if value is not None}

    try:
        options = config.build_options(overrides)
        models = load_models(models_ref, search_path=Path.cwd())
    except (SchemapackError, ValueError, TypeError) as e:
        logger.debug("Loading models failed", exc_info=True)
        _fail(str(e))
    return options, models


def _build(config: SchemapackConfig, models_ref: str, overrides: dict[str, Any]) -> BuildJsonSchemasResult:
    """Load the referenced models and build the combined document."""
    options, models = _resolve(config, models_ref, overrides)

    try:
        return build_json_schemas(models, options)
    except (SchemapackError, ValueError, TypeError) as e:
        logger.debug("Schema build failed", exc_info=True)
        _fail(str(e))


@app.command()
def build(
    ctx: typer.Context,
    models_ref: Annotated[
        str,
        typer.Argument(metavar="MODULE:ATTR", help="Mapping of names to models, e.g. 'myapp.schemas:MODELS'")
    ],
    schema_id: Annotated[
        Optional[str],
        typer.Option("--id", help="$id of the document (default: Schema)")
    ] = None,
    target: Annotated[
        Optional[str],
        typer.Option("--target", "-t", help="Output dialect: jsonSchema7, jsonSchema2019-09, jsonSchema2020-12, openApi3")
    ] = None,
    ref_strategy: Annotated[
        Optional[str],
        typer.Option("--ref-strategy", help="Reference strategy: none, root, seen")
    ] = None,
    definition_path: Annotated[
        Optional[str],
        typer.Option("--definition-path", help="Key holding named definitions (default: definitions)")
    ] = None,
    name: Annotated[
        Optional[str],
        typer.Option("--name", help="Name of the root schema")
    ] = None,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Write the document to a file instead of stdout")
    ] = None,
    indent: Annotated[
        int,
        typer.Option("--indent", help="JSON indentation")
    ] = 2,
    check: Annotated[
        bool,
        typer.Option("--check", help="Validate the document against its meta-schema")
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to .schemapack.json (default: search upwards)")
    ] = None,
) -> None:
    """Build the combined JSON Schema document for a mapping of models."""
    cfg = _prepare(ctx, config)

    result = _build(cfg, models_ref, {
        "$id": schema_id,
        "target": target,
        "$refStrategy": ref_strategy,
        "definitionPath": definition_path,
        "name": name,
    })
    document = result.schemas[0]

    if check:
        errors = check_schema_compliance(document)
        if errors:
            console.print("[red]Schema compliance errors:[/red]")
            for error in errors:
                console.print(f"  • {escape(error)}")
            raise typer.Exit(1)

    text = jsonlib.dumps(result.schemas, indent=indent, ensure_ascii=False)

    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text + "\n", encoding="utf-8")
        console.print(f"[green]Wrote schema[/green] {escape(document['$id'])} to {escape(str(out))}")
    else:
        print(text)


@app.command("ref")
def ref_command(
    ctx: typer.Context,
    models_ref: Annotated[
        str,
        typer.Argument(metavar="MODULE:ATTR", help="Mapping of names to models, e.g. 'myapp.schemas:MODELS'")
    ],
    key: Annotated[
        str,
        typer.Argument(help="Model key to reference")
    ],
    schema_id: Annotated[
        Optional[str],
        typer.Option("--id", help="$id of the document (default: Schema)")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to .schemapack.json (default: search upwards)")
    ] = None,
) -> None:
    """Print the $ref record pointing at one model of the combined document."""
    cfg = _prepare(ctx, config)
    # The record depends only on $id and the keys
    options, models = _resolve(cfg, models_ref, {"$id": schema_id})
    formatter = RefFormatter(options.effective_id, models.keys())

    try:
        record = formatter(key)
    except UnknownSchemaKeyError as e:
        _fail(str(e))

    print(jsonlib.dumps(record))

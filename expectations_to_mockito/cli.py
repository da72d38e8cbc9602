"""Command-line interface for the expectations-to-mockito migration tool.

This module defines the public CLI commands. It uses ``typer`` to expose
the program entrypoint while delegating the heavy lifting to the
programmatic API in :mod:`expectations_to_mockito.main` so the same logic
can be used from Python code or the CLI.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

import difflib
import logging
from pathlib import Path

import typer
import yaml

from . import __version__
from . import main as main_module
from .context import MigrationConfig
from .exceptions import ConfigurationError

app = typer.Typer(
    name="expectations-to-mockito",
    help="Rewrite Expectations blocks in test code into when/verify statements",
    add_completion=False,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def setup_logging_with_level(log_level: str) -> None:
    """Set up logging with a specific level."""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def load_config_file(config_file: str) -> MigrationConfig:
    """Load a ``MigrationConfig`` from a YAML file.

    Raises:
        ConfigurationError: If the file cannot be read or holds invalid values.
    """
    try:
        with open(config_file, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot load configuration file {config_file}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file {config_file} must contain a mapping")
    try:
        return MigrationConfig.from_dict(raw)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration file {config_file}: {e}") from e


def collect_source_files(paths: list[str], pattern: str = "*.py") -> list[str]:
    """Expand directories into the Python files they contain, recursively."""
    files: list[str] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            files.extend(str(p) for p in sorted(path.rglob(pattern)) if p.is_file())
        elif path.is_file():
            files.append(str(path))
        else:
            logger.warning(f"Skipping missing path: {raw}")
    return files


@app.command("migrate")
def migrate(
    source_files: list[str] = typer.Argument(..., help="Source files or directories to migrate"),
    pattern: str = typer.Option("*.py", "--pattern", "-p", help="Glob pattern used when searching directories"),
    types_file: str | None = typer.Option(None, "--types", help="YAML file mapping expressions to resolved types"),
    config_file: str | None = typer.Option(None, "--config", "-c", help="YAML configuration file"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show converted code without writing files", is_flag=True),
    diff: bool = typer.Option(False, "--diff", help="With --dry-run, show unified diffs instead of code", is_flag=True),
    format_output: bool = typer.Option(False, "--format", help="Format output code with isort and black", is_flag=True),
    no_format_output: bool = typer.Option(False, "--no-format", help="Disable output code formatting", is_flag=True),
    line_length: int | None = typer.Option(None, "--line-length", help="Maximum line length for formatting"),
    suffix: str | None = typer.Option(None, "--suffix", help="Suffix appended to target filename stem"),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Stop on first error", is_flag=True),
    log_level: str | None = typer.Option(None, "--log-level", help="Set logging level (DEBUG, INFO, WARNING, ERROR)"),
) -> None:
    """Rewrite Expectations blocks in the given files."""
    try:
        config = load_config_file(config_file) if config_file else MigrationConfig()
        overrides: dict[str, object] = {}
        if types_file is not None:
            overrides["types_file"] = types_file
        if dry_run:
            overrides["dry_run"] = True
        if format_output and no_format_output:
            typer.echo("Error: --format and --no-format cannot be used together.")
            raise typer.Exit(code=2)
        if format_output or no_format_output:
            overrides["format_output"] = format_output
        if line_length is not None:
            overrides["line_length"] = line_length
        if suffix is not None:
            overrides["target_suffix"] = suffix
        if fail_fast:
            overrides["fail_fast"] = True
        if log_level is not None:
            overrides["log_level"] = log_level
        config = config.with_override(**overrides)
        config.validate()
    except ConfigurationError as e:
        typer.echo(f"Error loading configuration: {e}")
        raise typer.Exit(code=1) from None

    setup_logging_with_level(config.log_level)

    files = collect_source_files(source_files, pattern)
    if not files:
        typer.echo("No source files found.")
        raise typer.Exit(code=1)
    logger.info(f"Found {len(files)} Python files to process")

    result = main_module.migrate(files, config=config)
    if result.is_error():
        logger.error(f"Migration failed: {result.error}")
        raise typer.Exit(code=1)

    if config.dry_run:
        generated = result.get_metadata("generated_code", {})
        for src in files:
            target = str(main_module.target_path(src, config))
            if target not in generated:
                continue
            code = generated[target]
            if diff:
                original = Path(src).read_text(encoding="utf-8")
                diff_lines = list(
                    difflib.unified_diff(
                        original.splitlines(keepends=True),
                        code.splitlines(keepends=True),
                        fromfile=f"orig:{src}",
                        tofile=f"new:{target}",
                    )
                )
                typer.echo(f"== DIFF: {target} ==")
                typer.echo("".join(diff_lines) if diff_lines else "<no differences detected>")
            else:
                typer.echo(f"== MIGRATED: {target} ==")
                typer.echo(code)

    migrated = result.data or []
    logger.info(f"Migrated: {len(migrated)} files")
    if result.is_warning():
        for warning in result.warnings or []:
            logger.error(f"Migration failed: {warning}")
        raise typer.Exit(code=1)


@app.command("init-config")
def init_config(
    output_file: str = typer.Argument("expectations-to-mockito.yaml", help="Output configuration file"),
) -> None:
    """Write a configuration file with every option set to its default."""
    try:
        with open(output_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(MigrationConfig().to_dict(), f, sort_keys=False)
    except OSError as e:
        logger.error(f"Failed to create configuration file: {e}")
        raise typer.Exit(code=1) from None
    typer.echo(f"Configuration file created: {output_file}")


@app.command("version")
def version() -> None:
    """Show the version."""
    typer.echo(f"expectations-to-mockito {__version__}")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

"""Programmatic API for expectations_to_mockito.

This module exposes the entry points used by the CLI and tests:
``migrate_code`` rewrites source text, ``migrate_file`` rewrites one file
and ``migrate`` processes several files. All of them return a
:class:`Result` instead of raising on migration errors.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import libcst as cst
import yaml
from libcst.codemod import CodemodContext

from .context import MigrationConfig
from .exceptions import ConfigurationError, MigrationError, ParseError
from .formatting import format_code
from .result import Result
from .static_types import TypeTable
from .transformers.expectations_transformer import ExpectationsToMockitoCommand

logger = logging.getLogger(__name__)


def load_type_table(path: str | Path) -> TypeTable:
    """Load a YAML type file into a :class:`TypeTable`.

    Raises:
        ConfigurationError: If the file cannot be read or is malformed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot load type file {path}: {e}", config_key="types_file") from e
    return TypeTable.from_mapping(raw)


def migrate_code(
    source: str,
    config: MigrationConfig | None = None,
    types: TypeTable | None = None,
    filename: str = "<string>",
) -> Result[str]:
    """Rewrite every expectation block in ``source``.

    Args:
        source: Python source text.
        config: Optional ``MigrationConfig``.
        types: Optional resolved types; module declarations fill in the rest.
        filename: Name used in error details.

    Returns:
        ``Result`` holding the migrated source. The metadata entry
        ``constructs_rewritten`` counts the rewritten blocks.
    """
    config = config or MigrationConfig()
    try:
        module = cst.parse_module(source)
    except cst.ParserSyntaxError as e:
        return Result.failure(ParseError(str(e), filename, e.raw_line, e.raw_column))

    context = CodemodContext(filename=filename)
    command = ExpectationsToMockitoCommand(
        context,
        types=types,
        expectations_module=config.expectations_module,
        stub_module=config.stub_module,
    )
    try:
        migrated = command.transform_module(module).code
    except MigrationError as e:
        logger.error(f"Failed to migrate {filename}: {e}")
        return Result.failure(e)

    metadata = {"constructs_rewritten": command.rewritten_constructs}
    if config.format_output and command.rewritten_constructs:
        formatted = format_code(migrated, config)
        if formatted.is_warning():
            return Result.warning(migrated, list(formatted.warnings or []), metadata=metadata)
        migrated = formatted.unwrap()
    return Result.success(migrated, metadata=metadata)


def target_path(source_file: str | Path, config: MigrationConfig) -> Path:
    source_path = Path(source_file)
    if not config.target_suffix:
        return source_path
    return source_path.with_name(f"{source_path.stem}{config.target_suffix}{source_path.suffix}")


def migrate_file(source_file: str, config: MigrationConfig | None = None, types: TypeTable | None = None) -> Result[str]:
    """Migrate one file and write the result unless running dry.

    Returns:
        ``Result`` holding the target path. The metadata carries the
        ``generated_code`` and ``constructs_rewritten``.
    """
    config = config or MigrationConfig()
    try:
        source = Path(source_file).read_text(encoding="utf-8")
    except OSError as e:
        return Result.failure(MigrationError(f"Cannot read {source_file}: {e}", {"source_file": source_file}))

    migrated = migrate_code(source, config, types, filename=source_file)
    if migrated.is_error():
        return Result.failure(migrated.error or MigrationError(f"Migration failed: {source_file}"))

    code = migrated.unwrap()
    target = target_path(source_file, config)
    metadata = dict(migrated.metadata or {})
    metadata["generated_code"] = code
    metadata["changed"] = code != source

    if config.dry_run:
        logger.info(f"Dry run: would write {target}")
    elif code != source or target != Path(source_file):
        target.write_text(code, encoding="utf-8")
        logger.info(f"Wrote {target}")

    if migrated.is_warning():
        return Result.warning(str(target), list(migrated.warnings or []), metadata=metadata)
    return Result.success(str(target), metadata=metadata)


def migrate(source_files: Iterable[str] | str, config: MigrationConfig | None = None) -> Result[list[str]]:
    """Migrate one or more source files programmatically.

    Args:
        source_files: Iterable of file paths (or single path string).
        config: Optional ``MigrationConfig`` to control migration behavior.

    Returns:
        ``Result`` containing the list of target paths. With ``fail_fast``
        the first failing file produces a failure result; otherwise failed
        files are reported as warnings and listed under the ``failed``
        metadata key.
    """
    files = [source_files] if isinstance(source_files, str) else list(source_files)
    config = config or MigrationConfig()

    try:
        config.validate()
        types = load_type_table(config.types_file) if config.types_file else TypeTable()
    except ConfigurationError as e:
        return Result.failure(e)

    written: list[str] = []
    generated: dict[str, str] = {}
    failed: dict[str, str] = {}
    for src in files:
        res = migrate_file(src, config, types)
        if res.is_error():
            if config.fail_fast:
                return Result.failure(res.error or MigrationError(f"Migration failed: {src}"))
            failed[src] = str(res.error)
            continue
        target = res.unwrap()
        written.append(target)
        generated[target] = res.get_metadata("generated_code", "")

    metadata = {"generated_code": generated, "failed": failed}
    if failed:
        return Result.warning(written, [f"{src}: {err}" for src, err in failed.items()], metadata=metadata)
    return Result.success(written, metadata=metadata)

"""Optional formatting of migrated source code.

Formatting uses the programmatic APIs of ``isort`` and ``black``. A
formatting failure never loses the migration: the unformatted code is
returned in a warning result.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

import logging

import black
import isort

from .context import MigrationConfig
from .result import Result

logger = logging.getLogger(__name__)


def _apply_isort(code: str, config: MigrationConfig) -> str:
    settings = isort.Config(
        profile="black",
        line_length=config.line_length or 120,
        known_third_party=[config.stub_module.split(".")[0]],
        multi_line_output=3,  # Vertical hanging indent
        include_trailing_comma=True,
        force_grid_wrap=0,
        use_parentheses=True,
        ensure_newline_before_comments=True,
    )
    return isort.code(code, config=settings)


def _apply_black(code: str, config: MigrationConfig) -> str:
    try:
        return black.format_str(code, mode=black.Mode(line_length=config.line_length or 120))
    except black.NothingChanged:
        return code


def format_code(code: str, config: MigrationConfig) -> Result[str]:
    """Sort imports and format ``code``.

    Returns:
        A success result with the formatted code, or a warning result
        carrying the original code when formatting fails.
    """
    try:
        formatted = _apply_black(_apply_isort(code, config), config)
        return Result.success(formatted, metadata={"isort_applied": True, "black_applied": True})
    except Exception as e:
        logger.warning(f"Code formatting failed: {e}")
        return Result.warning(code, [f"Code formatting failed: {e}"], metadata={"formatting_failed": True})

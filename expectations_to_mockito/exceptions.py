"""Custom exception classes for the expectations-to-mockito migration tool.

This module defines a small hierarchy of exceptions used by the
rewriter and its driver. Each exception carries an optional ``details``
mapping that contains structured context (for example the offending
node type or expression source) to help callers diagnose failures
programmatically.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

from typing import Any

import libcst as cst


class MigrationError(Exception):
    """Base exception for migration-related errors.

    Args:
        message: Human-readable error message.
        details: Optional mapping with structured diagnostic data.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ParseError(MigrationError):
    """Raised when parsing of source code fails.

    Args:
        message: Error message describing the parse failure.
        source_file: Path to the file being parsed.
        line: Optional line number where the error occurred.
        column: Optional column offset where the error occurred.
    """

    def __init__(self, message: str, source_file: str, line: int | None = None, column: int | None = None):
        details: dict[str, Any] = {"source_file": source_file}
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column
        super().__init__(message, details)


class TransformationError(MigrationError):
    """Raised when a transformation step cannot be applied.

    Args:
        message: Human-readable description of the failure.
        pattern_type: Optional transformation pattern identifier.
        node_type: Optional CST node type that caused the error.
    """

    def __init__(self, message: str, pattern_type: str | None = None, node_type: str | None = None):
        details: dict[str, Any] = {}
        if pattern_type:
            details["pattern_type"] = pattern_type
        if node_type:
            details["node_type"] = node_type
        super().__init__(message, details)


class StructuralViolation(TransformationError):
    """Raised when an expectation block does not follow the expected grammar.

    Covers unexpected statements or assignment targets, ordering problems
    between result and count configuration, result expressions whose type
    cannot be templated, and verifications without a usable receiver.

    Args:
        message: Description of the violation.
        node: The offending libcst node, when one is available.
    """

    def __init__(self, message: str, node: cst.CSTNode | None = None):
        super().__init__(
            message,
            pattern_type="expectations",
            node_type=type(node).__name__ if node is not None else None,
        )
        self.node = node
        # Body reached before the failure; set by the block rewriter.
        self.partial_body: cst.IndentedBlock | None = None


class MissingTypeInformation(StructuralViolation):
    """Raised when an expression has no resolved static type.

    Args:
        message: Description of the missing information.
        node: The expression whose type could not be resolved.
        expression: Source text of the expression.
    """

    def __init__(self, message: str, node: cst.CSTNode | None = None, expression: str | None = None):
        super().__init__(message, node)
        if expression is not None:
            self.details["expression"] = expression
        self.expression = expression


class ConfigurationError(MigrationError):
    """Raised when an application configuration is invalid.

    Args:
        message: Human readable description of the configuration problem.
        config_key: Optional configuration key that caused the error.
    """

    def __init__(self, message: str, config_key: str | None = None):
        details: dict[str, Any] = {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)

"""Transformer modules for CST-based code transformations.

Each module holds one stage of the expectation block rewrite, from
statement classification to splicing, plus the codemod command that
drives it over a module.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from .expectations_rewriter import ExpectationsBlockRewriter, is_expectations_construct
from .expectations_transformer import ExpectationsToMockitoCommand

__all__ = [
    "ExpectationsBlockRewriter",
    "ExpectationsToMockitoCommand",
    "is_expectations_construct",
]

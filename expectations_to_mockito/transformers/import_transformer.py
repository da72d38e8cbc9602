"""Import maintenance for rewritten expectation blocks.

The rewriter only declares which symbols it needs or no longer needs;
:class:`CodemodImportRegistry` schedules the matching changes on a
:class:`libcst.codemod.CodemodContext`. The codemod command applies them
with libcst's ``AddImportsVisitor`` and ``RemoveImportsVisitor`` once the
module has been transformed, so a marker import is only removed when
nothing references it any more.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import logging
from typing import Protocol

from libcst.codemod import CodemodContext
from libcst.codemod.visitors import AddImportsVisitor, RemoveImportsVisitor

logger = logging.getLogger(__name__)


class ImportRegistry(Protocol):
    """Receiver for import requirements raised during a rewrite.

    Symbols are dotted names such as ``"mockito.when"``.
    """

    def ensure_imported(self, symbol: str) -> None: ...

    def ensure_not_imported(self, symbol: str) -> None: ...


def split_symbol(symbol: str) -> tuple[str, str | None]:
    """Split ``"package.module.name"`` into ``("package.module", "name")``.

    A symbol without a dot is a bare module: ``("mockito", None)``.
    """
    module, _, name = symbol.rpartition(".")
    if not module:
        return name, None
    return module, name


class CodemodImportRegistry:
    """Schedule ``from module import name`` additions and removals on a codemod context."""

    def __init__(self, context: CodemodContext) -> None:
        self.context = context

    def ensure_imported(self, symbol: str) -> None:
        module, name = split_symbol(symbol)
        logger.debug(f"Scheduling import of {symbol}")
        AddImportsVisitor.add_needed_import(self.context, module, name)

    def ensure_not_imported(self, symbol: str) -> None:
        module, name = split_symbol(symbol)
        logger.debug(f"Scheduling removal of unused import {symbol}")
        RemoveImportsVisitor.remove_unused_import(self.context, module, name)

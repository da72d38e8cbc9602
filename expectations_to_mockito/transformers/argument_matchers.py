"""Normalize argument matchers inside an expectation block.

Expectation blocks use field-style matchers (``svc.find(anyString)``) and
``withX(...)`` helpers (``svc.save(withNotNull())``). Stub and verification
statements use call-style matchers imported from the stub module
(``anyString()``, ``notNull()``). :class:`ArgumentMatchersRewriter` performs
that translation on the arguments of every call in the block except
``returns(...)`` continuations, whose arguments are values rather than
matchers.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

from typing import Protocol

import libcst as cst

from .expectation_statements import CONTINUATION_NAME
from .import_transformer import ImportRegistry

FIELD_MATCHERS = frozenset(
    {
        "any",
        "anyString",
        "anyInt",
        "anyLong",
        "anyDouble",
        "anyFloat",
        "anyBoolean",
        "anyByte",
        "anyShort",
        "anyChar",
        "anyList",
        "anySet",
        "anyMap",
    }
)

# withX(...) helper -> call-style matcher taking the same arguments
WITH_MATCHERS = {
    "withAny": "any",
    "withEqual": "eq",
    "withNotNull": "notNull",
    "withNull": "isNull",
    "withSameInstance": "same",
}


class MatcherNormalizer(Protocol):
    def __call__(self, block: cst.IndentedBlock) -> cst.IndentedBlock: ...


class _MatcherTransformer(cst.CSTTransformer):
    def __init__(self, stub_module: str, imports: ImportRegistry | None) -> None:
        self.stub_module = stub_module
        self.imports = imports
        self._continuation_depth = 0

    def _register(self, name: str) -> None:
        if self.imports is not None:
            self.imports.ensure_imported(f"{self.stub_module}.{name}")

    def visit_Call(self, node: cst.Call) -> bool:
        if isinstance(node.func, cst.Name) and node.func.value == CONTINUATION_NAME:
            self._continuation_depth += 1
        return True

    def leave_Call(self, original_node: cst.Call, updated_node: cst.Call) -> cst.BaseExpression:
        if isinstance(original_node.func, cst.Name) and original_node.func.value == CONTINUATION_NAME:
            self._continuation_depth -= 1
            return updated_node
        if self._continuation_depth:
            return updated_node

        if isinstance(updated_node.func, cst.Name) and updated_node.func.value in WITH_MATCHERS:
            target = WITH_MATCHERS[updated_node.func.value]
            self._register(target)
            return updated_node.with_changes(func=cst.Name(target))

        new_args = []
        changed = False
        for arg in updated_node.args:
            if isinstance(arg.value, cst.Name) and arg.value.value in FIELD_MATCHERS:
                self._register(arg.value.value)
                new_args.append(arg.with_changes(value=cst.Call(func=cst.Name(arg.value.value))))
                changed = True
            else:
                new_args.append(arg)
        return updated_node.with_changes(args=new_args) if changed else updated_node


class ArgumentMatchersRewriter:
    """Default matcher normalizer used by the block rewriter.

    Args:
        stub_module: Module the call-style matchers are imported from.
        imports: Optional registry notified of each matcher used.
    """

    def __init__(self, stub_module: str = "mockito", imports: ImportRegistry | None = None) -> None:
        self.stub_module = stub_module
        self.imports = imports

    def __call__(self, block: cst.IndentedBlock) -> cst.IndentedBlock:
        rewritten = block.visit(_MatcherTransformer(self.stub_module, self.imports))
        if not isinstance(rewritten, cst.IndentedBlock):
            raise TypeError(f"Matcher normalization produced {type(rewritten).__name__}, expected IndentedBlock")
        return rewritten

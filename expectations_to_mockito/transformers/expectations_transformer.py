"""Codemod command that rewrites every expectation block in a module.

:class:`ExpectationsToMockitoCommand` walks a module, and for each function
body repeatedly locates the first remaining ``with Expectations():``
construct, recomputes its index and hands it to
:class:`ExpectationsBlockRewriter`. One construct is rewritten per call, so
indices are always taken from the current body.

Types for the rewrite come from a caller-supplied :class:`TypeTable`
completed with what the module declares: annotated function parameters,
annotated local assignments and class-level field annotations (looked up
as ``self.<field>``). Annotation names are qualified through the module's
imports. Supplied entries win for the same expression, and supertypes they
record are carried onto annotated classes of the same name.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import logging

import libcst as cst
from libcst.codemod import CodemodContext, VisitorBasedCodemodCommand

from ..static_types import StaticType, TypeTable, type_from_annotation
from .expectations_rewriter import ExpectationsBlockRewriter, is_expectations_construct
from .import_transformer import CodemodImportRegistry

logger = logging.getLogger(__name__)


def _dotted(node: cst.BaseExpression) -> str:
    if isinstance(node, cst.Name):
        return node.value
    if isinstance(node, cst.Attribute):
        return f"{_dotted(node.value)}.{node.attr.value}"
    return ""


def collect_module_imports(module: cst.Module) -> dict[str, str]:
    """Map each locally bound import name to its fully-qualified name."""
    imports: dict[str, str] = {}
    for statement in module.body:
        if not isinstance(statement, cst.SimpleStatementLine):
            continue
        for small in statement.body:
            if isinstance(small, cst.Import):
                for alias in small.names:
                    full = _dotted(alias.name)
                    if alias.asname is not None and isinstance(alias.asname.name, cst.Name):
                        imports[alias.asname.name.value] = full
                    else:
                        head = full.split(".")[0]
                        imports[head] = head
            elif isinstance(small, cst.ImportFrom) and not isinstance(small.names, cst.ImportStar):
                module_name = "." * len(small.relative) + (_dotted(small.module) if small.module else "")
                for alias in small.names:
                    name = _dotted(alias.name)
                    local = name
                    if alias.asname is not None and isinstance(alias.asname.name, cst.Name):
                        local = alias.asname.name.value
                    imports[local] = f"{module_name}.{name}" if module_name else name
    return imports


class ExpectationsToMockitoCommand(VisitorBasedCodemodCommand):
    """Rewrite ``with Expectations():`` blocks into ``when``/``verify`` statements.

    Args:
        context: Codemod context; import changes are scheduled on it.
        types: Resolved types supplied by the caller (for example from a
            type file). Declarations found in the module fill in the rest.
        expectations_module: Module the ``Expectations`` marker is imported from.
        stub_module: Module providing the stub and verification functions.
    """

    DESCRIPTION: str = "Rewrite Expectations blocks into when/thenReturn and verify statements."

    def __init__(
        self,
        context: CodemodContext,
        types: TypeTable | None = None,
        expectations_module: str = "mockit",
        stub_module: str = "mockito",
    ) -> None:
        super().__init__(context)
        self.types = types or TypeTable()
        self.expectations_module = expectations_module
        self.stub_module = stub_module
        self.imports = CodemodImportRegistry(context)
        self.rewritten_constructs = 0
        self._module_imports: dict[str, str] = {}
        self._field_types: list[dict[str, StaticType]] = []

    def visit_Module(self, node: cst.Module) -> bool:
        self._module_imports = collect_module_imports(node)
        return True

    def visit_ClassDef(self, node: cst.ClassDef) -> bool:
        fields: dict[str, StaticType] = {}
        if isinstance(node.body, cst.IndentedBlock):
            for statement in node.body.body:
                if not isinstance(statement, cst.SimpleStatementLine):
                    continue
                for small in statement.body:
                    if isinstance(small, cst.AnnAssign) and isinstance(small.target, cst.Name):
                        resolved = type_from_annotation(small.annotation.annotation, self._module_imports)
                        if resolved is not None:
                            fields[f"self.{small.target.value}"] = resolved
        self._field_types.append(fields)
        return True

    def leave_ClassDef(self, original_node: cst.ClassDef, updated_node: cst.ClassDef) -> cst.ClassDef:
        self._field_types.pop()
        return updated_node

    def _function_types(self, node: cst.FunctionDef) -> TypeTable:
        declared: dict[str, StaticType] = {}
        if self._field_types:
            declared.update(self._field_types[-1])

        params = node.params
        for param in (*params.posonly_params, *params.params, *params.kwonly_params):
            if param.annotation is not None:
                resolved = type_from_annotation(param.annotation.annotation, self._module_imports)
                if resolved is not None:
                    declared[param.name.value] = resolved

        if isinstance(node.body, cst.IndentedBlock):
            for statement in node.body.body:
                if not isinstance(statement, cst.SimpleStatementLine):
                    continue
                for small in statement.body:
                    if isinstance(small, cst.AnnAssign):
                        resolved = type_from_annotation(small.annotation.annotation, self._module_imports)
                        key = _dotted(small.target)
                        if resolved is not None and key:
                            declared[key] = resolved

        return self.types.with_declarations(declared)

    def leave_FunctionDef(self, original_node: cst.FunctionDef, updated_node: cst.FunctionDef) -> cst.FunctionDef:
        body = updated_node.body
        if not isinstance(body, cst.IndentedBlock):
            return updated_node
        if not any(is_expectations_construct(s) for s in body.body):
            return updated_node

        rewriter = ExpectationsBlockRewriter(
            self._function_types(updated_node),
            self.imports,
            expectations_module=self.expectations_module,
            stub_module=self.stub_module,
        )
        while True:
            index = next((i for i, s in enumerate(body.body) if is_expectations_construct(s)), None)
            if index is None:
                break
            construct = body.body[index]
            assert isinstance(construct, cst.With)
            body = rewriter.rewrite(body, construct, index)
            self.rewritten_constructs += 1

        logger.debug(f"Rewrote expectation blocks in {updated_node.name.value}()")
        return updated_node.with_changes(body=body)

"""Rewrite one ``with Expectations():`` block into stub and verify statements.

:class:`ExpectationsBlockRewriter` is the entry point of the core rewrite.
Given the enclosing method body, the expectation construct and its index
in that body, it:

1. asks the import registry to drop the marker import once unused,
2. normalizes argument matchers in the block,
3. classifies the block's statements and segments them into groups,
4. folds the groups through payload building, template selection and
   splicing, in source order.

Stubs replace the construct in place (and then follow each other); count
verifications are appended to the end of the body in group order. Any
structural problem aborts the whole block.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import logging

import libcst as cst

from ..exceptions import StructuralViolation
from ..static_types import TypeTable, node_source
from .argument_matchers import ArgumentMatchersRewriter, MatcherNormalizer
from .expectation_statements import ExpectationGroup, classify_block, segment_groups
from .import_transformer import ImportRegistry
from .record_builder import build_payload
from .splicer import ReplaceStatement, SpliceState, append_verification, remove_construct, splice_stub
from .template_selector import (
    TIMES_FUNCTION,
    VERIFY_FUNCTION,
    WHEN_FUNCTION,
    select_stub_template,
    select_verification_template,
)

logger = logging.getLogger(__name__)

EXPECTATIONS_CLASS = "Expectations"


def is_expectations_construct(statement: cst.CSTNode, class_name: str = EXPECTATIONS_CLASS) -> bool:
    """Return True for ``with Expectations():`` (or ``with x.Expectations():``).

    Both an indented body and a one-line body after the colon qualify.
    """
    if not isinstance(statement, cst.With) or len(statement.items) != 1:
        return False
    item = statement.items[0]
    if item.asname is not None or not isinstance(item.item, cst.Call):
        return False
    func = item.item.func
    if isinstance(func, cst.Name):
        return func.value == class_name
    if isinstance(func, cst.Attribute):
        return func.attr.value == class_name
    return False


def expectation_block(construct: cst.With) -> cst.IndentedBlock:
    """Return the construct's body as an indented block.

    ``with Expectations(): svc.getValue(); result = 1`` keeps its small
    statements on one line; they become a single line of the block.
    """
    body = construct.body
    if isinstance(body, cst.SimpleStatementSuite):
        return cst.IndentedBlock(body=[cst.SimpleStatementLine(body=body.body)])
    return body


class ExpectationsBlockRewriter:
    """Rewrite a single expectation construct within its method body.

    Args:
        types: Resolved static types for expressions in the method.
        imports: Registry notified of imports to add or drop.
        matchers: Matcher normalizer applied once to the block; defaults
            to :class:`ArgumentMatchersRewriter`.
        expectations_module: Module the ``Expectations`` marker comes from.
        stub_module: Module providing ``when``/``verify``/``times``.
    """

    def __init__(
        self,
        types: TypeTable,
        imports: ImportRegistry,
        matchers: MatcherNormalizer | None = None,
        expectations_module: str = "mockit",
        stub_module: str = "mockito",
    ) -> None:
        self.types = types
        self.imports = imports
        self.matchers = matchers or ArgumentMatchersRewriter(stub_module, imports)
        self.expectations_module = expectations_module
        self.stub_module = stub_module

    def rewrite(self, method_body: cst.IndentedBlock, construct: cst.With, construct_index: int) -> cst.IndentedBlock:
        """Return ``method_body`` with ``construct`` rewritten.

        Args:
            method_body: Body of the enclosing test function.
            construct: The ``with Expectations():`` statement.
            construct_index: Position of ``construct`` in ``method_body.body``.

        Returns:
            The rewritten body.

        Raises:
            StructuralViolation: If the block cannot be rewritten. The body
                reached before the failure is attached as ``partial_body``.
        """
        if not 0 <= construct_index < len(method_body.body) or method_body.body[construct_index] is not construct:
            raise StructuralViolation(f"Expectation construct is not at body index {construct_index}", construct)

        self.imports.ensure_not_imported(f"{self.expectations_module}.{EXPECTATIONS_CLASS}")

        block = self.matchers(expectation_block(construct))
        statements = classify_block(block)

        state = SpliceState.start(method_body, construct_index)
        try:
            for group in segment_groups(statements):
                state = self._rewrite_group(state, group)
            # No groups at all: the construct is still in place
            state = remove_construct(state)
        except StructuralViolation as e:
            e.partial_body = state.body
            raise

        body = state.body
        if not body.body:
            body = body.with_changes(body=[cst.SimpleStatementLine(body=[cst.Pass()])])
        return body

    def _rewrite_group(self, state: SpliceState, group: ExpectationGroup) -> SpliceState:
        invocation = group.invocation
        logger.debug(f"Rewriting expectation for {node_source(invocation.call)}")

        payload = build_payload(group.configuration)
        stub = select_stub_template(payload.results, self.types)
        verification = None
        if payload.invocation_count is not None:
            verification = select_verification_template(invocation, payload.invocation_count, self.types)

        if stub is not None:
            logger.debug(f"Stubbing {invocation.name}() with {stub.describe()}")
            self.imports.ensure_imported(f"{self.stub_module}.{WHEN_FUNCTION}")
            statement = stub.render(invocation.call)
            if isinstance(state.coordinate, ReplaceStatement):
                replaced = state.body.body[state.coordinate.index]
                statement = statement.with_changes(leading_lines=replaced.leading_lines)
            state = splice_stub(state, statement)
        else:
            state = remove_construct(state)

        if verification is not None:
            logger.debug(f"Appending {verification.describe()}")
            self.imports.ensure_imported(f"{self.stub_module}.{VERIFY_FUNCTION}")
            self.imports.ensure_imported(f"{self.stub_module}.{TIMES_FUNCTION}")
            state = append_verification(state, verification.render())

        return state

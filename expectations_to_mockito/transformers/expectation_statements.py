"""Classify and group the statements of an expectation block.

Every small statement inside ``with Expectations():`` is turned into one
tagged variant exactly once:

- :class:`MockedInvocation` - a call that opens a new expectation group
  (``svc.getValue()`` or a receiver-less ``helper()``),
- :class:`ResultContinuation` - a receiver-less ``returns(...)`` call that
  extends the current group with more results,
- :class:`ConfigAssignment` - ``name = value`` configuring the current group.

:func:`segment_groups` then splits the classified statements into
:class:`ExpectationGroup` records in source order.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Union

import libcst as cst

from ..exceptions import StructuralViolation

CONTINUATION_NAME = "returns"


@dataclass(frozen=True)
class MockedInvocation:
    """A mocked call that starts an expectation group."""

    call: cst.Call
    receiver: cst.BaseExpression | None
    name: str

    @property
    def arguments(self) -> Sequence[cst.Arg]:
        return self.call.args


@dataclass(frozen=True)
class ResultContinuation:
    """A ``returns(a, b, ...)`` call adding results to the current group."""

    call: cst.Call

    @property
    def arguments(self) -> Sequence[cst.Arg]:
        return self.call.args


@dataclass(frozen=True)
class ConfigAssignment:
    """An assignment such as ``result = 1`` or ``times = 2``."""

    target: str
    value: cst.BaseExpression
    node: cst.Assign


ExpectationStatement = Union[MockedInvocation, ResultContinuation, ConfigAssignment]
ConfigurationStatement = Union[ResultContinuation, ConfigAssignment]


@dataclass(frozen=True)
class ExpectationGroup:
    """One mocked invocation and the configuration statements that follow it."""

    invocation: MockedInvocation
    configuration: tuple[ConfigurationStatement, ...] = ()


def iter_small_statements(block: cst.IndentedBlock) -> Iterator[cst.BaseSmallStatement]:
    """Yield every small statement of an expectation block in source order.

    ``pass`` placeholders are skipped. Compound statements (``if``, ``for``,
    nested ``with``...) have no meaning inside an expectation block.

    Raises:
        StructuralViolation: If the block holds a compound statement.
    """
    for line in block.body:
        if not isinstance(line, cst.SimpleStatementLine):
            raise StructuralViolation(
                f"Unsupported compound statement in expectation block: {type(line).__name__}", line
            )
        for small in line.body:
            if isinstance(small, cst.Pass):
                continue
            yield small


def classify_statement(statement: cst.BaseSmallStatement) -> ExpectationStatement:
    """Return the tagged variant for one expectation statement.

    Raises:
        StructuralViolation: For any statement shape the grammar does not allow.
    """
    if isinstance(statement, cst.Expr):
        call = statement.value
        if not isinstance(call, cst.Call):
            raise StructuralViolation("Expectation statements must be calls or assignments", statement)
        func = call.func
        if isinstance(func, cst.Attribute):
            return MockedInvocation(call=call, receiver=func.value, name=func.attr.value)
        if isinstance(func, cst.Name):
            if func.value == CONTINUATION_NAME:
                return ResultContinuation(call=call)
            return MockedInvocation(call=call, receiver=None, name=func.value)
        raise StructuralViolation("Unsupported callee in expectation block", call)

    if isinstance(statement, cst.Assign):
        if len(statement.targets) != 1 or not isinstance(statement.targets[0].target, cst.Name):
            raise StructuralViolation("Unexpected assignment target in expectation block", statement)
        return ConfigAssignment(
            target=statement.targets[0].target.value,
            value=statement.value,
            node=statement,
        )

    raise StructuralViolation(f"Unsupported statement in expectation block: {type(statement).__name__}", statement)


def classify_block(block: cst.IndentedBlock) -> list[ExpectationStatement]:
    return [classify_statement(s) for s in iter_small_statements(block)]


def segment_groups(statements: Iterable[ExpectationStatement]) -> Iterator[ExpectationGroup]:
    """Split classified statements into expectation groups.

    A :class:`MockedInvocation` closes the pending group and opens a new one;
    every other statement is attached to the pending group. Groups are
    yielded lazily so a caller can rewrite each before the next is built.

    Raises:
        StructuralViolation: If a configuration statement appears before any
            mocked invocation.
    """
    pending: MockedInvocation | None = None
    configuration: list[ConfigurationStatement] = []
    for statement in statements:
        if isinstance(statement, MockedInvocation):
            if pending is not None:
                yield ExpectationGroup(pending, tuple(configuration))
            pending = statement
            configuration = []
            continue
        if pending is None:
            node = statement.node if isinstance(statement, ConfigAssignment) else statement.call
            raise StructuralViolation("Configuration statement without a preceding mocked invocation", node)
        configuration.append(statement)

    if pending is not None:
        yield ExpectationGroup(pending, tuple(configuration))

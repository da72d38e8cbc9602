"""Splice generated statements into a method body at a tracked position.

The splicer never mutates a body in place. Each operation takes a
:class:`SpliceState` (body, insertion coordinate and statement count delta)
and returns the next one, so a rewrite pass is a fold over its groups.

The statement count delta is the net number of statements added before or
at the cursor: a stub inserted after the cursor adds one, a stub replacing
the construct adds none and deleting the construct removes one. The most
recently written statement therefore always sits at
``construct_index + delta``. Verification statements are appended at the
end of the body, past the cursor, and leave the delta untouched.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Union

import libcst as cst

from ..exceptions import StructuralViolation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplaceStatement:
    """Replace the statement at ``index`` (the expectation construct)."""

    index: int


@dataclass(frozen=True)
class InsertAfter:
    """Insert after the statement at ``index``."""

    index: int


@dataclass(frozen=True)
class FirstStatement:
    """Insert before every existing statement of the body."""


InsertionCoordinate = Union[ReplaceStatement, InsertAfter, FirstStatement]


@dataclass(frozen=True)
class SpliceState:
    """Accumulator threaded through the rewrite of one expectation construct."""

    body: cst.IndentedBlock
    construct_index: int
    coordinate: InsertionCoordinate
    delta: int = 0

    @classmethod
    def start(cls, body: cst.IndentedBlock, construct_index: int) -> SpliceState:
        return cls(body=body, construct_index=construct_index, coordinate=ReplaceStatement(construct_index))

    def coordinate_after_written(self, delta: int) -> InsertionCoordinate:
        written = self.construct_index + delta
        return FirstStatement() if written < 0 else InsertAfter(written)


def _statements(body: cst.IndentedBlock) -> list[cst.BaseStatement]:
    return list(body.body)


def splice_stub(state: SpliceState, statement: cst.BaseStatement) -> SpliceState:
    """Write a stub statement at the current coordinate.

    Returns:
        The next state, whose coordinate points just after the stub.
    """
    statements = _statements(state.body)
    coordinate = state.coordinate
    delta = state.delta

    if isinstance(coordinate, ReplaceStatement):
        _check_index(statements, coordinate.index)
        statements[coordinate.index] = statement
    elif isinstance(coordinate, InsertAfter):
        _check_index(statements, coordinate.index)
        statements.insert(coordinate.index + 1, statement)
        delta += 1
    elif isinstance(coordinate, FirstStatement):
        statements.insert(0, statement)
        delta += 1
    else:
        raise StructuralViolation(f"Unknown insertion coordinate: {coordinate!r}")

    logger.debug(f"Stub written via {coordinate!r}; statement delta is now {delta}")
    return replace(
        state,
        body=state.body.with_changes(body=statements),
        coordinate=state.coordinate_after_written(delta),
        delta=delta,
    )


def remove_construct(state: SpliceState) -> SpliceState:
    """Delete the expectation construct when nothing replaced it.

    Only valid while the coordinate still targets the construct; otherwise
    the state is returned unchanged.
    """
    coordinate = state.coordinate
    if not isinstance(coordinate, ReplaceStatement):
        return state

    statements = _statements(state.body)
    _check_index(statements, coordinate.index)
    del statements[coordinate.index]
    delta = state.delta - 1

    logger.debug(f"Expectation construct at index {coordinate.index} removed")
    return replace(
        state,
        body=state.body.with_changes(body=statements),
        coordinate=state.coordinate_after_written(delta),
        delta=delta,
    )


def append_verification(state: SpliceState, statement: cst.BaseStatement) -> SpliceState:
    """Append a verification statement at the end of the body."""
    statements = _statements(state.body)
    statements.append(statement)
    return replace(state, body=state.body.with_changes(body=statements))


def _check_index(statements: list[cst.BaseStatement], index: int) -> None:
    if not 0 <= index < len(statements):
        raise StructuralViolation(f"Insertion coordinate {index} is outside the method body")

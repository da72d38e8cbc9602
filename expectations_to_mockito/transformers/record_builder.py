"""Accumulate the configured results and call count of one expectation group.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import libcst as cst

from ..exceptions import StructuralViolation
from .expectation_statements import ConfigAssignment, ConfigurationStatement, ResultContinuation

RESULT_VARIABLE = "result"
COUNT_VARIABLE = "times"


@dataclass(frozen=True)
class MockInvocationPayload:
    """Semantic payload of one group: values to return or throw, and a call count."""

    results: tuple[cst.BaseExpression, ...] = ()
    invocation_count: cst.BaseExpression | None = None


def build_payload(configuration: Iterable[ConfigurationStatement]) -> MockInvocationPayload:
    """Build the payload for a group's trailing configuration statements.

    ``returns(a, b)`` appends each argument to the results, ``result = x``
    appends ``x`` and ``times = n`` sets the invocation count. The count must
    come last and cannot be combined with more than one result.

    Raises:
        StructuralViolation: On an unknown assignment target or an ordering
            violation.
    """
    results: list[cst.BaseExpression] = []
    invocation_count: cst.BaseExpression | None = None

    for statement in configuration:
        if isinstance(statement, ResultContinuation):
            if invocation_count is not None:
                raise StructuralViolation("count configuration must be last", statement.call)
            for arg in statement.arguments:
                if arg.star:
                    raise StructuralViolation("Unpacked arguments are not supported in returns()", arg)
                results.append(arg.value)
            continue

        if not isinstance(statement, ConfigAssignment):
            raise StructuralViolation(f"Unexpected configuration statement: {statement!r}")

        if statement.target == RESULT_VARIABLE:
            if invocation_count is not None:
                raise StructuralViolation("count configuration must be last", statement.node)
            results.append(statement.value)
        elif statement.target == COUNT_VARIABLE:
            if len(results) > 1:
                raise StructuralViolation("multiple results incompatible with count configuration", statement.node)
            invocation_count = statement.value
        else:
            raise StructuralViolation(f"Unexpected variable in expectation block: {statement.target}", statement.node)

    return MockInvocationPayload(results=tuple(results), invocation_count=invocation_count)

"""Build stub and verification templates for an expectation group.

Templates are plain source text with ``{placeholder}`` parameters that are
instantiated with :func:`libcst.helpers.parse_template_statement`. The
parameter list of each template is deterministic: the stub template takes
``invocation`` followed by ``result_0 .. result_n``; the verification
template takes ``receiver``, ``count`` and ``arg_0 .. arg_n``.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import libcst as cst
from libcst.helpers import parse_template_statement

from ..exceptions import MissingTypeInformation, StructuralViolation
from ..static_types import ClassType, ParameterizedType, TypeTable, node_source
from .expectation_statements import MockedInvocation
from .expression_classifier import StubPrefix, TemplateSlot, classify_result

WHEN_FUNCTION = "when"
VERIFY_FUNCTION = "verify"
TIMES_FUNCTION = "times"

_LITERAL_NODES = (cst.Integer, cst.Float, cst.Imaginary, cst.SimpleString, cst.ConcatenatedString)


@dataclass(frozen=True)
class StubTemplate:
    """``when(<invocation>).thenReturn(...)`` or ``.thenThrow(...)``."""

    prefix: StubPrefix
    slots: tuple[TemplateSlot, ...]

    @property
    def source(self) -> str:
        params = ", ".join(f"{{result_{i}}}" for i in range(len(self.slots)))
        return f"{WHEN_FUNCTION}({{invocation}}).{self.prefix.value}({params})"

    def render(self, invocation: cst.Call) -> cst.BaseStatement:
        replacements: dict[str, cst.BaseExpression] = {"invocation": invocation}
        for i, slot in enumerate(self.slots):
            replacements[f"result_{i}"] = slot.expression
        return parse_template_statement(self.source, **replacements)

    def describe(self) -> str:
        """Summarize the template for logs, e.g. ``thenReturn(builtins.str, plain-value)``."""
        kinds = ", ".join(slot.type_name or slot.kind.value for slot in self.slots)
        return f"{self.prefix.value}({kinds})"


class ArgumentRendering(Enum):
    LITERAL = "literal"
    STRUCTURAL = "structural"


@dataclass(frozen=True)
class VerificationArgument:
    """One argument of the verified call.

    Literal arguments keep their exact source text; other arguments are
    reproduced as the original node.
    """

    rendering: ArgumentRendering
    value: cst.BaseExpression
    keyword: str | None = None
    star: str = ""
    value_source: str | None = None

    def to_expression(self) -> cst.BaseExpression:
        if self.rendering is ArgumentRendering.LITERAL and self.value_source is not None:
            return cst.parse_expression(self.value_source)
        return self.value


@dataclass(frozen=True)
class VerificationTemplate:
    """``verify(<receiver>, times(<count>)).<method>(<arguments>)``.

    ``receiver_type`` does not change the rendered statement; it names the
    verified class in :meth:`describe`.
    """

    receiver: cst.BaseExpression
    receiver_type: str
    count: cst.BaseExpression
    method: str
    arguments: tuple[VerificationArgument, ...] = ()

    @property
    def source(self) -> str:
        params = []
        for i, argument in enumerate(self.arguments):
            prefix = f"{argument.keyword}=" if argument.keyword else argument.star
            params.append(f"{prefix}{{arg_{i}}}")
        return (
            f"{VERIFY_FUNCTION}({{receiver}}, {TIMES_FUNCTION}({{count}}))"
            f".{self.method}({', '.join(params)})"
        )

    def render(self) -> cst.BaseStatement:
        replacements: dict[str, cst.BaseExpression] = {"receiver": self.receiver, "count": self.count}
        for i, argument in enumerate(self.arguments):
            replacements[f"arg_{i}"] = argument.to_expression()
        return parse_template_statement(self.source, **replacements)

    def describe(self) -> str:
        """Summarize the template for logs, e.g. ``verify app.Service.getValue() x 2``."""
        owner = self.receiver_type or node_source(self.receiver)
        return f"{VERIFY_FUNCTION} {owner}.{self.method}() x {node_source(self.count)}"


def select_stub_template(results: Sequence[cst.BaseExpression], types: TypeTable) -> StubTemplate | None:
    """Select the stub template for a group's results.

    Returns:
        ``None`` when there are no results, otherwise the template.

    Raises:
        StructuralViolation: If results mix returned and thrown values, or a
            result cannot be templated.
        MissingTypeInformation: If a result has no resolved type.
    """
    if not results:
        return None

    prefix: StubPrefix | None = None
    slots: list[TemplateSlot] = []
    for expression in results:
        result_prefix, slot = classify_result(expression, types)
        if prefix is not None and result_prefix is not prefix:
            raise StructuralViolation("Cannot mix returned and thrown results in one expectation", expression)
        prefix = result_prefix
        slots.append(slot)

    assert prefix is not None
    return StubTemplate(prefix=prefix, slots=tuple(slots))


def _verification_argument(arg: cst.Arg) -> VerificationArgument:
    keyword = arg.keyword.value if arg.keyword is not None else None
    if isinstance(arg.value, _LITERAL_NODES):
        return VerificationArgument(
            ArgumentRendering.LITERAL, arg.value, keyword, arg.star, value_source=node_source(arg.value)
        )
    return VerificationArgument(ArgumentRendering.STRUCTURAL, arg.value, keyword, arg.star)


def select_verification_template(
    invocation: MockedInvocation, count: cst.BaseExpression, types: TypeTable
) -> VerificationTemplate:
    """Build the verification template for a counted invocation.

    Raises:
        StructuralViolation: If the invocation has no receiver.
        MissingTypeInformation: If the receiver's type is not resolved.
    """
    receiver = invocation.receiver
    if receiver is None:
        raise StructuralViolation(
            f"Cannot verify {invocation.name}() without a receiver to qualify the call", invocation.call
        )
    receiver_type = types.resolve(receiver)
    if receiver_type is None:
        source = node_source(receiver)
        raise MissingTypeInformation(f"Missing type information for invocation receiver: {source}", receiver, source)

    if isinstance(receiver_type, ClassType):
        type_name = receiver_type.fully_qualified_name
    elif isinstance(receiver_type, ParameterizedType):
        type_name = receiver_type.raw.fully_qualified_name
    else:
        type_name = ""

    return VerificationTemplate(
        receiver=receiver,
        receiver_type=type_name,
        count=count,
        method=invocation.name,
        arguments=tuple(_verification_argument(arg) for arg in invocation.arguments),
    )

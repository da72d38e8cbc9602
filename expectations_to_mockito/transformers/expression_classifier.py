"""Decide how a configured result value is templated from its static type.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import libcst as cst

from ..exceptions import MissingTypeInformation, StructuralViolation
from ..static_types import (
    THROWABLE_TYPE,
    ClassType,
    ParameterizedType,
    PrimitiveType,
    StaticType,
    TypeTable,
    node_source,
)

logger = logging.getLogger(__name__)


class ValueShape(Enum):
    """The static-type shapes a result value can take."""

    PRIMITIVE = "primitive"
    THROWABLE_CLASS = "throwable-class"
    PLAIN_CLASS = "plain-class"
    PARAMETERIZED = "parameterized"
    UNSUPPORTED = "unsupported"


class SlotKind(Enum):
    """Kinds of template parameter slots."""

    PLAIN_VALUE = "plain-value"
    EXACT_CLASS = "exact-class"
    THROWABLE = "throwable"
    GENERIC_WITNESS = "generic-witness"


class StubPrefix(Enum):
    """Stub method chained after ``when(...)``."""

    RETURN = "thenReturn"
    THROW = "thenThrow"


@dataclass(frozen=True)
class TemplateSlot:
    """One parameter slot of a stub template.

    ``type_name`` is the fully-qualified class name for exact-class slots and
    the raw class name for generic-witness slots. Rendering only uses the
    expression; the type name appears in the template's log summary.
    """

    kind: SlotKind
    expression: cst.BaseExpression
    type_name: str | None = None


def shape_of(static_type: StaticType) -> ValueShape:
    if isinstance(static_type, PrimitiveType):
        return ValueShape.PRIMITIVE
    if isinstance(static_type, ClassType):
        if static_type.is_assignable_to(THROWABLE_TYPE):
            return ValueShape.THROWABLE_CLASS
        return ValueShape.PLAIN_CLASS
    if isinstance(static_type, ParameterizedType):
        return ValueShape.PARAMETERIZED
    return ValueShape.UNSUPPORTED


def classify_result(expression: cst.BaseExpression, types: TypeTable) -> tuple[StubPrefix, TemplateSlot]:
    """Return the stub prefix and parameter slot for one result expression.

    Raises:
        MissingTypeInformation: If the expression has no resolved type.
        StructuralViolation: If the type has a shape that cannot be templated.
    """
    static_type = types.resolve(expression)
    if static_type is None:
        source = node_source(expression)
        raise MissingTypeInformation(f"Missing type information for result: {source}", expression, source)

    shape = shape_of(static_type)
    logger.debug(f"Result {node_source(expression)!r} classified as {shape.value}")

    if shape is ValueShape.PRIMITIVE:
        return StubPrefix.RETURN, TemplateSlot(SlotKind.PLAIN_VALUE, expression)
    elif shape is ValueShape.THROWABLE_CLASS:
        return StubPrefix.THROW, TemplateSlot(SlotKind.THROWABLE, expression)
    elif shape is ValueShape.PLAIN_CLASS:
        assert isinstance(static_type, ClassType)
        return StubPrefix.RETURN, TemplateSlot(SlotKind.EXACT_CLASS, expression, static_type.fully_qualified_name)
    elif shape is ValueShape.PARAMETERIZED:
        assert isinstance(static_type, ParameterizedType)
        return StubPrefix.RETURN, TemplateSlot(
            SlotKind.GENERIC_WITNESS, expression, static_type.raw.fully_qualified_name
        )
    raise StructuralViolation(f"Unexpected expression type for template: {static_type!r}", expression)

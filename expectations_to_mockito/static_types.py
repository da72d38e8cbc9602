"""Static type model and lookup table used by the expectations rewriter.

The rewriter never infers types from data flow. It consumes types that
were resolved elsewhere and attached to expressions. This module holds
the small type model (primitive, class, parameterized, array and union
shapes) and :class:`TypeTable`, which maps expression source text to a
resolved type. The table also recognizes the few shapes whose type is
evident from syntax alone: numeric, boolean and string literals,
container displays and calls to builtin exception classes.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

from __future__ import annotations

import builtins
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

import libcst as cst

from .exceptions import ConfigurationError

THROWABLE_TYPE = "builtins.BaseException"

PRIMITIVE_NAMES = frozenset({"int", "float", "complex", "bool", "None"})

_EMPTY_MODULE = cst.Module(body=[])


@dataclass(frozen=True)
class PrimitiveType:
    """A value type with no class identity (numbers, booleans, ``None``)."""

    name: str


@dataclass(frozen=True)
class ClassType:
    """A concrete class with its fully-qualified name and known supertypes."""

    fully_qualified_name: str
    supertypes: tuple[str, ...] = ()

    def is_assignable_to(self, fully_qualified_name: str) -> bool:
        return self.fully_qualified_name == fully_qualified_name or fully_qualified_name in self.supertypes


@dataclass(frozen=True)
class ParameterizedType:
    """A generic class applied to type arguments, e.g. ``list[str]``."""

    raw: ClassType
    arguments: tuple[StaticType, ...] = ()


@dataclass(frozen=True)
class ArrayType:
    element: StaticType


@dataclass(frozen=True)
class UnionType:
    options: tuple[StaticType, ...] = ()


StaticType = Union[PrimitiveType, ClassType, ParameterizedType, ArrayType, UnionType]


def node_source(node: cst.CSTNode) -> str:
    """Return the source text for a libcst node, stripped of outer whitespace."""
    return _EMPTY_MODULE.code_for_node(node).strip()


def _builtin_class_type(name: str) -> ClassType | None:
    obj = getattr(builtins, name, None)
    if not isinstance(obj, type):
        return None
    supertypes = tuple(f"builtins.{base.__name__}" for base in obj.__mro__[1:] if base is not object)
    return ClassType(f"builtins.{name}", supertypes)


def _literal_type(node: cst.BaseExpression) -> StaticType | None:
    """Return the type evident from an expression's syntax, if any."""
    if isinstance(node, cst.Integer):
        return PrimitiveType("int")
    if isinstance(node, cst.Float):
        return PrimitiveType("float")
    if isinstance(node, cst.Imaginary):
        return PrimitiveType("complex")
    if isinstance(node, cst.Name):
        if node.value in ("True", "False"):
            return PrimitiveType("bool")
        if node.value == "None":
            return PrimitiveType("None")
        return None
    if isinstance(node, cst.SimpleString):
        return ClassType("builtins.bytes") if "b" in node.prefix.lower() else ClassType("builtins.str")
    if isinstance(node, cst.ConcatenatedString | cst.FormattedString):
        return ClassType("builtins.str")
    if isinstance(node, cst.UnaryOperation) and isinstance(node.operator, cst.Minus | cst.Plus):
        return _literal_type(node.expression)
    if isinstance(node, cst.List | cst.ListComp):
        return ParameterizedType(ClassType("builtins.list"))
    if isinstance(node, cst.Set | cst.SetComp):
        return ParameterizedType(ClassType("builtins.set"))
    if isinstance(node, cst.Dict | cst.DictComp):
        return ParameterizedType(ClassType("builtins.dict"))
    if isinstance(node, cst.Tuple):
        return ParameterizedType(ClassType("builtins.tuple"))
    if isinstance(node, cst.Call) and isinstance(node.func, cst.Name):
        # Instantiating a builtin exception, e.g. ``ValueError("boom")``
        builtin = _builtin_class_type(node.func.value)
        if builtin is not None and builtin.is_assignable_to(THROWABLE_TYPE):
            return builtin
    return None


def _class_types(static_type: StaticType) -> list[ClassType]:
    """Return every class named anywhere inside ``static_type``."""
    if isinstance(static_type, ClassType):
        return [static_type]
    if isinstance(static_type, ParameterizedType):
        nested = [static_type.raw]
        for argument in static_type.arguments:
            nested.extend(_class_types(argument))
        return nested
    if isinstance(static_type, ArrayType):
        return _class_types(static_type.element)
    if isinstance(static_type, UnionType):
        return [c for option in static_type.options for c in _class_types(option)]
    return []


def _enrich(static_type: StaticType, known: Mapping[str, ClassType]) -> StaticType:
    if isinstance(static_type, ClassType):
        if static_type.supertypes:
            return static_type
        return known.get(static_type.fully_qualified_name, static_type)
    if isinstance(static_type, ParameterizedType):
        raw = _enrich(static_type.raw, known)
        assert isinstance(raw, ClassType)
        return ParameterizedType(raw, tuple(_enrich(a, known) for a in static_type.arguments))
    if isinstance(static_type, ArrayType):
        return ArrayType(_enrich(static_type.element, known))
    if isinstance(static_type, UnionType):
        return UnionType(tuple(_enrich(o, known) for o in static_type.options))
    return static_type


@dataclass(frozen=True)
class TypeTable:
    """Resolved static types keyed by expression source text.

    Explicit entries always win over types evident from syntax. Tables are
    immutable; :meth:`with_entries` returns a layered copy.
    """

    entries: Mapping[str, StaticType] = field(default_factory=dict)

    def resolve(self, node: cst.BaseExpression) -> StaticType | None:
        """Return the static type attached to ``node`` or ``None``."""
        resolved = self.entries.get(node_source(node))
        if resolved is not None:
            return resolved
        return _literal_type(node)

    def with_entries(self, entries: Mapping[str, StaticType]) -> TypeTable:
        merged = dict(self.entries)
        merged.update(entries)
        return TypeTable(merged)

    def with_declarations(self, declarations: Mapping[str, StaticType]) -> TypeTable:
        """Add types read from source declarations to this table.

        Entries already in the table win for the same expression. A
        declaration only knows the class it names, so when the table holds a
        class of that name with known supertypes, those supertypes are kept
        and a class described as an exception stays throwable.
        """
        known: dict[str, ClassType] = {}
        for static_type in self.entries.values():
            for class_type in _class_types(static_type):
                if class_type.supertypes:
                    known.setdefault(class_type.fully_qualified_name, class_type)
        added = {expr: _enrich(t, known) for expr, t in declarations.items() if expr not in self.entries}
        return self.with_entries(added)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> TypeTable:
        """Build a table from a mapping of expression text to type descriptions.

        Args:
            raw: Mapping as loaded from a YAML type file.

        Returns:
            A new ``TypeTable``.

        Raises:
            ConfigurationError: If a description is malformed.
        """
        if not isinstance(raw, Mapping):
            raise ConfigurationError("Type table must be a mapping of expression to type", config_key="types_file")
        return cls({str(expr): parse_type_description(desc) for expr, desc in raw.items()})


def parse_type_description(desc: Any) -> StaticType:
    """Parse one YAML type description.

    A plain string names a class (``"app.Service"``) or a primitive
    (``"int"``, ``"float"``, ``"complex"``, ``"bool"``, ``"None"``). A mapping
    carries a ``kind`` key (``primitive``, ``class``, ``parameterized``,
    ``array`` or ``union``) plus the fields of that kind.
    """
    if isinstance(desc, str):
        if desc in PRIMITIVE_NAMES:
            return PrimitiveType(desc)
        return ClassType(desc)
    if not isinstance(desc, Mapping):
        raise ConfigurationError(f"Unsupported type description: {desc!r}", config_key="types_file")

    kind = desc.get("kind", "class")
    try:
        if kind == "primitive":
            return PrimitiveType(str(desc["name"]))
        if kind == "class":
            return ClassType(str(desc["name"]), tuple(str(s) for s in desc.get("supertypes", ())))
        if kind == "parameterized":
            raw = ClassType(str(desc["name"]), tuple(str(s) for s in desc.get("supertypes", ())))
            arguments = tuple(parse_type_description(a) for a in desc.get("arguments", ()))
            return ParameterizedType(raw, arguments)
        if kind == "array":
            return ArrayType(parse_type_description(desc["element"]))
        if kind == "union":
            return UnionType(tuple(parse_type_description(o) for o in desc["options"]))
    except KeyError as e:
        raise ConfigurationError(f"Type description of kind {kind!r} is missing {e}", config_key="types_file") from e
    raise ConfigurationError(f"Unknown type kind: {kind!r}", config_key="types_file")


def _dotted_name(node: cst.BaseExpression) -> str | None:
    if isinstance(node, cst.Name):
        return node.value
    if isinstance(node, cst.Attribute):
        owner = _dotted_name(node.value)
        return f"{owner}.{node.attr.value}" if owner else None
    return None


def type_from_annotation(annotation: cst.BaseExpression, imports: Mapping[str, str]) -> StaticType | None:
    """Translate a type annotation into a :data:`StaticType`.

    Names are qualified through ``imports``, a mapping of local name to
    fully-qualified name built from the module's import statements. Names
    without an import entry are taken as builtins when they exist there and
    as-is otherwise.

    Returns:
        The translated type, or ``None`` when the annotation has no usable
        shape (for example a string forward reference).
    """
    if isinstance(annotation, cst.BinaryOperation) and isinstance(annotation.operator, cst.BitOr):
        left = type_from_annotation(annotation.left, imports)
        right = type_from_annotation(annotation.right, imports)
        if left is None or right is None:
            return None
        return UnionType((left, right))
    if isinstance(annotation, cst.Subscript):
        raw = type_from_annotation(annotation.value, imports)
        if not isinstance(raw, ClassType):
            return None
        arguments: list[StaticType] = []
        for element in annotation.slice:
            if isinstance(element.slice, cst.Index):
                arg = type_from_annotation(element.slice.value, imports)
                if arg is not None:
                    arguments.append(arg)
        return ParameterizedType(raw, tuple(arguments))

    dotted = _dotted_name(annotation)
    if dotted is None:
        return None
    if dotted in PRIMITIVE_NAMES:
        return PrimitiveType(dotted)
    head, _, rest = dotted.partition(".")
    if head in imports:
        qualified = imports[head] + (f".{rest}" if rest else "")
        return ClassType(qualified)
    builtin = _builtin_class_type(dotted) if not rest else None
    if builtin is not None:
        return builtin
    return ClassType(dotted)

"""
Type Notation Transformer

Converts the ``type`` subtree of the grammar into shared type terms:
``int|null``, ``array<string, int>``, ``non-empty-list<Foo>``,
``array{id: int, name?: string}``, ``int<0, max>``, ``class-string<Foo>``.
Unknown names are class or interface names.
"""

from typing import Dict, List, Optional, Tuple

from lark import Transformer, v_args
from lark.lexer import Token
from typing_extensions import TypeAlias

from ...shared.errors import AssertNarrowSourceError, ErrorCode
from ...shared.source_location import SourceLocation
from ...shared.types import (
    Type, ConstantIntegerType, ConstantStringType, ClassStringType,
    IterableType, ObjectType,
    MIXED, NEVER, NULL, BOOL, TRUE, FALSE, INT, FLOAT, STRING, NON_EMPTY_STRING,
    RESOURCE, OBJECT, CALLABLE,
)
from ...shared.type_combinator import TypeCombinator

LarkMeta: TypeAlias = object
ShapeItem: TypeAlias = Tuple[Optional[Type], Type, bool]

_NAMED_TYPES: Dict[str, Type] = {
    "mixed": MIXED,
    "never": NEVER,
    "void": NULL,
    "bool": BOOL,
    "boolean": BOOL,
    "int": INT,
    "integer": INT,
    "float": FLOAT,
    "double": FLOAT,
    "string": STRING,
    "non-empty-string": NON_EMPTY_STRING,
    "class-string": ClassStringType(),
    "resource": RESOURCE,
    "object": OBJECT,
    "callable": CALLABLE,
    "array": TypeCombinator.array(MIXED, MIXED),
    "non-empty-array": TypeCombinator.array(MIXED, MIXED, is_non_empty=True),
    "list": TypeCombinator.array(INT, MIXED, is_list=True),
    "non-empty-list": TypeCombinator.array(INT, MIXED, is_list=True, is_non_empty=True),
    "iterable": IterableType(MIXED, MIXED),
    "array-key": TypeCombinator.union(INT, STRING),
    "scalar": TypeCombinator.union(INT, FLOAT, STRING, BOOL),
    "positive-int": TypeCombinator.integer_range(1, None),
    "negative-int": TypeCombinator.integer_range(None, -1),
    "non-negative-int": TypeCombinator.integer_range(0, None),
    "non-positive-int": TypeCombinator.integer_range(None, 0),
}

_ARRAY_LIKE_GENERICS = ("array", "non-empty-array", "list", "non-empty-list")
_RANGE_BOUNDS = ("min", "max")


def unquote(token: str) -> str:
    """Strip the quotes of a string literal and resolve backslash escapes."""
    body = token[1:-1]
    quote = token[0]
    out: List[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\" and index + 1 < len(body) and body[index + 1] in (quote, "\\"):
            out.append(body[index + 1])
            index += 2
            continue
        out.append(char)
        index += 1
    return "".join(out)


@v_args(inline=True, meta=True)
class TypeNotationTransformer(Transformer):
    """Type notation -> ``Type``."""

    def __init__(self) -> None:
        super().__init__()
        self.current_file: str = ""

    def _location(self, meta: LarkMeta) -> Optional[SourceLocation]:
        if getattr(meta, "empty", True):
            return None
        return SourceLocation(
            file=self.current_file,
            line=meta.line,
            column=meta.column,
            end_line=meta.end_line,
            end_column=meta.end_column,
        )

    def _invalid(self, meta: LarkMeta, message: str) -> AssertNarrowSourceError:
        return AssertNarrowSourceError(message, self._location(meta), ErrorCode.INVALID_TYPE.value)

    # =========================================================================
    # Composite types
    # =========================================================================

    def union_type(self, meta: LarkMeta, *members: Type) -> Type:
        return TypeCombinator.union(*members)

    def intersection_type(self, meta: LarkMeta, *members: Type) -> Type:
        return TypeCombinator.intersect(*members)

    # =========================================================================
    # Atoms
    # =========================================================================

    def named_type(self, meta: LarkMeta, name: Token) -> Type:
        known = _NAMED_TYPES.get(str(name).lower())
        if known is not None:
            return known
        return ObjectType(str(name))

    def null_type(self, meta: LarkMeta, token: Token) -> Type:
        return NULL

    def true_type(self, meta: LarkMeta, token: Token) -> Type:
        return TRUE

    def false_type(self, meta: LarkMeta, token: Token) -> Type:
        return FALSE

    def constant_string_type(self, meta: LarkMeta, token: Token) -> Type:
        return ConstantStringType(unquote(str(token)))

    def constant_int_type(self, meta: LarkMeta, token: Token) -> Type:
        return ConstantIntegerType(int(token))

    def generic_type(self, meta: LarkMeta, name: Token, *arguments: Type) -> Type:
        base = str(name).lower()
        if base in _ARRAY_LIKE_GENERICS:
            return self._array_generic(meta, base, arguments)
        if base == "iterable":
            if len(arguments) == 1:
                return IterableType(MIXED, arguments[0])
            if len(arguments) == 2:
                return IterableType(arguments[0], arguments[1])
        elif base == "int" and len(arguments) == 2:
            return TypeCombinator.integer_range(
                self._range_bound(meta, arguments[0]), self._range_bound(meta, arguments[1]))
        elif base == "class-string" and len(arguments) == 1 and isinstance(arguments[0], ObjectType):
            return ClassStringType(arguments[0].class_name)
        raise self._invalid(meta, f"Unsupported generic type {name}<{', '.join(map(str, arguments))}>")

    def _array_generic(self, meta: LarkMeta, base: str, arguments: Tuple[Type, ...]) -> Type:
        is_list = base.endswith("list")
        is_non_empty = base.startswith("non-empty")
        if len(arguments) == 1:
            key = INT if is_list else TypeCombinator.union(INT, STRING)
            return TypeCombinator.array(key, arguments[0], is_list, is_non_empty)
        if len(arguments) == 2 and not is_list:
            return TypeCombinator.array(arguments[0], arguments[1], is_list, is_non_empty)
        raise self._invalid(meta, f"{base} takes {'1' if is_list else '1 or 2'} type argument(s)")

    def _range_bound(self, meta: LarkMeta, bound: Type) -> Optional[int]:
        if isinstance(bound, ConstantIntegerType):
            return bound.value
        if isinstance(bound, ObjectType) and bound.class_name.lower() in _RANGE_BOUNDS:
            return None
        raise self._invalid(meta, f"Invalid integer range bound: {bound}")

    # =========================================================================
    # Array shapes
    # =========================================================================

    def shape_type(self, meta: LarkMeta, name: Token, items: Optional[List[ShapeItem]] = None) -> Type:
        if str(name).lower() != "array":
            raise self._invalid(meta, f"Only array shapes are supported, got {name}{{...}}")
        entries = []
        next_index = 0
        for key, value, optional in items or []:
            if key is None:
                key = ConstantIntegerType(next_index)
            if isinstance(key, ConstantIntegerType) and key.value >= next_index:
                next_index = key.value + 1
            entries.append((key, value, optional))
        return TypeCombinator.constant_array(entries)

    def shape_items(self, meta: LarkMeta, *items: ShapeItem) -> List[ShapeItem]:
        return list(items)

    def keyed_item(self, meta: LarkMeta, key: Token, *rest) -> ShapeItem:
        optional = len(rest) == 2
        value = rest[-1]
        if key.type == "SIGNED_INT":
            key_type: Type = ConstantIntegerType(int(key))
        elif key.type == "STRING":
            key_type = ConstantStringType(unquote(str(key)))
        else:
            key_type = ConstantStringType(str(key))
        return key_type, value, optional

    def positional_item(self, meta: LarkMeta, value: Type) -> ShapeItem:
        return None, value, False

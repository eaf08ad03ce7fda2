"""
Type System

PHPStan Pattern: PHPStan\\Type\\Type
Reference: DESIGN.md (host type system)

Convention: every type term is an immutable (frozen) dataclass, so two types
compare equal exactly when they denote the same term. Unions keep their
members in a canonical order; build them through ``TypeCombinator.union``
rather than instantiating ``UnionType`` directly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
import re


class TypeKind(Enum):
    """Discriminant for the type term algebra."""
    MIXED = "mixed"
    NEVER = "never"
    NULL = "null"
    BOOLEAN = "bool"
    CONSTANT_BOOLEAN = "constant_bool"
    INTEGER = "int"
    INTEGER_RANGE = "int_range"
    CONSTANT_INTEGER = "constant_int"
    FLOAT = "float"
    STRING = "string"
    NON_EMPTY_STRING = "non_empty_string"
    CONSTANT_STRING = "constant_string"
    CLASS_STRING = "class_string"
    RESOURCE = "resource"
    OBJECT = "object"              # object without a known class
    NAMED_OBJECT = "named_object"  # Foo, Traversable, ...
    CALLABLE = "callable"
    ARRAY = "array"
    CONSTANT_ARRAY = "constant_array"
    ITERABLE = "iterable"
    UNION = "union"
    INTERSECTION = "intersection"


class TrinaryLogic(Enum):
    """Three-valued answer for questions such as "is A a supertype of B"."""
    YES = "yes"
    MAYBE = "maybe"
    NO = "no"

    def yes(self) -> bool:
        return self is TrinaryLogic.YES

    def maybe(self) -> bool:
        return self is TrinaryLogic.MAYBE

    def no(self) -> bool:
        return self is TrinaryLogic.NO


@dataclass(frozen=True)
class Type:
    """
    Base type term.

    Subclasses set ``kind`` in their own ``__init__`` and render themselves in
    PHPDoc notation through ``describe()``.
    """
    kind: TypeKind

    def describe(self) -> str:
        return self.kind.value

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class MixedType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.MIXED)


@dataclass(frozen=True)
class NeverType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.NEVER)


@dataclass(frozen=True)
class NullType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.NULL)


@dataclass(frozen=True)
class BooleanType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.BOOLEAN)


@dataclass(frozen=True)
class ConstantBooleanType(Type):
    """``true`` or ``false``"""
    value: bool

    def __init__(self, value: bool):
        super().__init__(kind=TypeKind.CONSTANT_BOOLEAN)
        object.__setattr__(self, 'value', value)

    def describe(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class IntegerType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.INTEGER)


@dataclass(frozen=True)
class IntegerRangeType(Type):
    """
    ``int<min, max>``; ``None`` stands for an unbounded side.

    ``TypeCombinator.integer_range`` collapses degenerate ranges to ``int``
    or a constant integer.
    """
    min: Optional[int]
    max: Optional[int]

    def __init__(self, min: Optional[int], max: Optional[int]):
        super().__init__(kind=TypeKind.INTEGER_RANGE)
        object.__setattr__(self, 'min', min)
        object.__setattr__(self, 'max', max)

    def contains(self, value: int) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True

    def describe(self) -> str:
        low = "min" if self.min is None else str(self.min)
        high = "max" if self.max is None else str(self.max)
        return f"int<{low}, {high}>"


@dataclass(frozen=True)
class ConstantIntegerType(Type):
    value: int

    def __init__(self, value: int):
        super().__init__(kind=TypeKind.CONSTANT_INTEGER)
        object.__setattr__(self, 'value', value)

    def describe(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FloatType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.FLOAT)


@dataclass(frozen=True)
class StringType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.STRING)


@dataclass(frozen=True)
class NonEmptyStringType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.NON_EMPTY_STRING)

    def describe(self) -> str:
        return "non-empty-string"


@dataclass(frozen=True)
class ConstantStringType(Type):
    value: str

    def __init__(self, value: str):
        super().__init__(kind=TypeKind.CONSTANT_STRING)
        object.__setattr__(self, 'value', value)

    def describe(self) -> str:
        return "'" + self.value.replace("'", "\\'") + "'"


@dataclass(frozen=True)
class ClassStringType(Type):
    """``class-string`` or ``class-string<Foo>``"""
    class_name: Optional[str] = None

    def __init__(self, class_name: Optional[str] = None):
        super().__init__(kind=TypeKind.CLASS_STRING)
        object.__setattr__(self, 'class_name', normalize_class_name(class_name) if class_name else None)

    def describe(self) -> str:
        if self.class_name is None:
            return "class-string"
        return f"class-string<{self.class_name}>"


@dataclass(frozen=True)
class ResourceType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.RESOURCE)


@dataclass(frozen=True)
class ObjectWithoutClassType(Type):
    """``object``"""

    def __init__(self):
        super().__init__(kind=TypeKind.OBJECT)


@dataclass(frozen=True)
class ObjectType(Type):
    """Instance of a named class or interface."""
    class_name: str

    def __init__(self, class_name: str):
        super().__init__(kind=TypeKind.NAMED_OBJECT)
        object.__setattr__(self, 'class_name', normalize_class_name(class_name))

    def describe(self) -> str:
        return self.class_name

    def __eq__(self, other):
        if not isinstance(other, ObjectType):
            return False
        return self.class_name.lower() == other.class_name.lower()

    def __hash__(self):
        return hash(('ObjectType', self.class_name.lower()))


@dataclass(frozen=True)
class CallableType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.CALLABLE)


@dataclass(frozen=True)
class ArrayType(Type):
    """
    Homogeneous array: one key type and one item type for every element.

    ``is_list`` restricts keys to ``0..n-1`` in order; ``is_non_empty``
    guarantees at least one element. Rendered as ``array<K, V>``,
    ``list<V>``, ``non-empty-array<K, V>`` or ``non-empty-list<V>``.
    """
    key_type: Type
    item_type: Type
    is_list: bool = False
    is_non_empty: bool = False

    def __init__(self, key_type: Type, item_type: Type, is_list: bool = False, is_non_empty: bool = False):
        super().__init__(kind=TypeKind.ARRAY)
        object.__setattr__(self, 'key_type', key_type)
        object.__setattr__(self, 'item_type', item_type)
        object.__setattr__(self, 'is_list', is_list)
        object.__setattr__(self, 'is_non_empty', is_non_empty)

    def describe(self) -> str:
        prefix = "non-empty-" if self.is_non_empty else ""
        if self.is_list:
            return f"{prefix}list<{self.item_type.describe()}>"
        return f"{prefix}array<{self.key_type.describe()}, {self.item_type.describe()}>"


@dataclass(frozen=True)
class ConstantArrayType(Type):
    """
    Array with statically known keys: ``array{0: string, foo?: int}``.

    ``key_types`` holds constant integer/string types in insertion order;
    ``value_types`` and ``optional_keys`` are parallel to it.
    """
    key_types: Tuple[Type, ...]
    value_types: Tuple[Type, ...]
    optional_keys: Tuple[bool, ...]

    def __init__(self, key_types: Tuple[Type, ...], value_types: Tuple[Type, ...],
                 optional_keys: Optional[Tuple[bool, ...]] = None):
        super().__init__(kind=TypeKind.CONSTANT_ARRAY)
        if len(key_types) != len(value_types):
            raise ValueError("constant array needs one value type per key")
        if optional_keys is None:
            optional_keys = tuple(False for _ in key_types)
        object.__setattr__(self, 'key_types', tuple(key_types))
        object.__setattr__(self, 'value_types', tuple(value_types))
        object.__setattr__(self, 'optional_keys', tuple(optional_keys))

    def entries(self):
        return zip(self.key_types, self.value_types, self.optional_keys)

    def required_count(self) -> int:
        return sum(1 for optional in self.optional_keys if not optional)

    def find_key(self, key: Type) -> Optional[int]:
        for index, existing in enumerate(self.key_types):
            if existing == key:
                return index
        return None

    def is_list_shaped(self) -> bool:
        """True when the keys are exactly 0..n-1 in order with nothing optional."""
        for index, (key, _, optional) in enumerate(self.entries()):
            if optional or not isinstance(key, ConstantIntegerType) or key.value != index:
                return False
        return True

    def describe(self) -> str:
        parts = []
        for key, value, optional in self.entries():
            marker = "?" if optional else ""
            parts.append(f"{_describe_shape_key(key)}{marker}: {value.describe()}")
        return "array{" + ", ".join(parts) + "}"


@dataclass(frozen=True)
class IterableType(Type):
    """``iterable<K, V>``: an array or a Traversable object."""
    key_type: Type
    item_type: Type

    def __init__(self, key_type: Type, item_type: Type):
        super().__init__(kind=TypeKind.ITERABLE)
        object.__setattr__(self, 'key_type', key_type)
        object.__setattr__(self, 'item_type', item_type)

    def describe(self) -> str:
        return f"iterable<{self.key_type.describe()}, {self.item_type.describe()}>"


@dataclass(frozen=True)
class UnionType(Type):
    """Union of two or more non-union members, stored in canonical order."""
    types: Tuple[Type, ...]

    def __init__(self, types: Tuple[Type, ...]):
        super().__init__(kind=TypeKind.UNION)
        object.__setattr__(self, 'types', tuple(sorted(types, key=_sort_key)))

    def describe(self) -> str:
        # null is written last: string|null
        ordered = sorted(self.types, key=lambda t: isinstance(t, NullType))
        return "|".join(_describe_member(t) for t in ordered)


@dataclass(frozen=True)
class IntersectionType(Type):
    """Intersection of unrelated object types, e.g. ``Countable&Foo``."""
    types: Tuple[Type, ...]

    def __init__(self, types: Tuple[Type, ...]):
        super().__init__(kind=TypeKind.INTERSECTION)
        object.__setattr__(self, 'types', tuple(sorted(types, key=_sort_key)))

    def describe(self) -> str:
        return "&".join(t.describe() for t in self.types)


def normalize_class_name(name: str) -> str:
    """Strip the leading namespace separator: ``\\Foo\\Bar`` -> ``Foo\\Bar``."""
    return name[1:] if name.startswith("\\") else name


_SHAPE_KEY_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _describe_shape_key(key: Type) -> str:
    if isinstance(key, ConstantStringType) and _SHAPE_KEY_IDENTIFIER.match(key.value):
        return key.value
    return key.describe()


def _describe_member(member: Type) -> str:
    if isinstance(member, IntersectionType):
        return f"({member.describe()})"
    return member.describe()


def _sort_key(member: Type) -> Tuple[str, str]:
    return (member.kind.value, member.describe().lower())


# Common types
MIXED = MixedType()
NEVER = NeverType()
NULL = NullType()
BOOL = BooleanType()
TRUE = ConstantBooleanType(True)
FALSE = ConstantBooleanType(False)
INT = IntegerType()
FLOAT = FloatType()
STRING = StringType()
NON_EMPTY_STRING = NonEmptyStringType()
RESOURCE = ResourceType()
OBJECT = ObjectWithoutClassType()
CALLABLE = CallableType()
ARRAY_KEY_TYPES = (INT, STRING)
EMPTY_ARRAY = ConstantArrayType((), ())

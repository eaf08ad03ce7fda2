"""
Type Combinator

PHPStan Pattern: PHPStan\\Type\\TypeCombinator
Reference: DESIGN.md (host type system)

Union, intersection and removal over the terms in ``types.py``. All
operations work member-wise on unions and return normalized results:
no nested unions, no ``never`` members, subsumed members dropped.
"""

from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from .types import (
    Type, TrinaryLogic,
    MixedType, NeverType, NullType, BooleanType, ConstantBooleanType,
    IntegerType, IntegerRangeType, ConstantIntegerType,
    StringType, NonEmptyStringType, ConstantStringType, ClassStringType,
    ObjectWithoutClassType, ObjectType, CallableType,
    ArrayType, ConstantArrayType, IterableType, UnionType, IntersectionType,
    MIXED, NEVER, NULL, BOOL, INT, NON_EMPTY_STRING, EMPTY_ARRAY,
)


# Built-in class hierarchy (lowercased). Only what the assertion catalog
# needs in order to relate Traversable/Countable/ArrayAccess to the classes
# that implement them.
_KNOWN_ANCESTORS: Dict[str, FrozenSet[str]] = {
    "iterator": frozenset({"traversable"}),
    "iteratoraggregate": frozenset({"traversable"}),
    "generator": frozenset({"iterator", "traversable"}),
    "arrayiterator": frozenset({"iterator", "traversable", "arrayaccess", "countable", "seekableiterator"}),
    "arrayobject": frozenset({"iteratoraggregate", "traversable", "arrayaccess", "countable"}),
    "splobjectstorage": frozenset({"iterator", "traversable", "arrayaccess", "countable"}),
    "splfixedarray": frozenset({"iteratoraggregate", "traversable", "arrayaccess", "countable"}),
    "countable": frozenset(),
    "traversable": frozenset(),
    "arrayaccess": frozenset(),
}

_STRING_LIKE = (StringType, NonEmptyStringType, ConstantStringType, ClassStringType)
_INTEGER_LIKE = (IntegerType, IntegerRangeType, ConstantIntegerType)


def is_subclass(child: str, parent: str) -> bool:
    """True when ``child`` is ``parent`` or is known to extend/implement it."""
    child_key = child.lower()
    parent_key = parent.lower()
    if child_key == parent_key:
        return True
    return parent_key in _KNOWN_ANCESTORS.get(child_key, frozenset())


def is_traversable_class(name: str) -> bool:
    return is_subclass(name, "Traversable")


def members(type_: Type) -> List[Type]:
    """Non-union members of a type; ``never`` has none."""
    if isinstance(type_, NeverType):
        return []
    if isinstance(type_, UnionType):
        return list(type_.types)
    return [type_]


class TypeCombinator:
    """Static type algebra (PHPStan naming: TypeCombinator)."""

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @staticmethod
    def integer_range(low: Optional[int], high: Optional[int]) -> Type:
        if low is None and high is None:
            return INT
        if low is not None and high is not None:
            if low > high:
                return NEVER
            if low == high:
                return ConstantIntegerType(low)
        return IntegerRangeType(low, high)

    @staticmethod
    def constant_array(entries: Iterable[Tuple[Type, Type, bool]]) -> Type:
        """
        Build ``array{...}`` from (key, value, optional) triples.

        A required key whose value is ``never`` makes the whole array
        impossible; an optional one is dropped.
        """
        keys: List[Type] = []
        values: List[Type] = []
        optional_flags: List[bool] = []
        for key, value, optional in entries:
            if isinstance(value, NeverType):
                if optional:
                    continue
                return NEVER
            keys.append(key)
            values.append(value)
            optional_flags.append(optional)
        return ConstantArrayType(tuple(keys), tuple(values), tuple(optional_flags))

    @staticmethod
    def array(key_type: Type, item_type: Type, is_list: bool = False, is_non_empty: bool = False) -> Type:
        if isinstance(key_type, NeverType) or isinstance(item_type, NeverType):
            # Only the empty array has no keys or no values.
            return NEVER if is_non_empty else EMPTY_ARRAY
        if is_list:
            key_type = INT
        return ArrayType(key_type, item_type, is_list, is_non_empty)

    # ------------------------------------------------------------------
    # Union
    # ------------------------------------------------------------------

    @staticmethod
    def union(*types: Type) -> Type:
        flat: List[Type] = []
        for type_ in types:
            for member in members(type_):
                if isinstance(member, MixedType):
                    return MIXED
                if member not in flat:
                    flat.append(member)

        if ConstantBooleanType(True) in flat and ConstantBooleanType(False) in flat:
            flat = [m for m in flat if not isinstance(m, ConstantBooleanType)]
            flat.append(BOOL)

        kept: List[Type] = []
        for index, member in enumerate(flat):
            subsumed = False
            for other_index, other in enumerate(flat):
                if index == other_index or other == member:
                    continue
                if _is_subtype(member, other):
                    # Mutually subsumed members: keep the first occurrence.
                    if _is_subtype(other, member) and other_index > index:
                        continue
                    subsumed = True
                    break
            if not subsumed:
                kept.append(member)

        if not kept:
            return NEVER
        if len(kept) == 1:
            return kept[0]
        return UnionType(tuple(kept))

    # ------------------------------------------------------------------
    # Intersection
    # ------------------------------------------------------------------

    @staticmethod
    def intersect(*types: Type) -> Type:
        if not types:
            return MIXED
        result = types[0]
        for other in types[1:]:
            pieces = [
                _intersect_members(left, right)
                for left in members(result)
                for right in members(other)
            ]
            result = TypeCombinator.union(*pieces) if pieces else NEVER
        return result

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    @staticmethod
    def remove(from_type: Type, type_to_remove: Type) -> Type:
        remaining: List[Type] = []
        for member in members(from_type):
            if _is_subtype(member, type_to_remove):
                continue
            remaining.append(_subtract_member(member, type_to_remove))
        return TypeCombinator.union(*remaining)

    @staticmethod
    def remove_null(type_: Type) -> Type:
        return TypeCombinator.remove(type_, NULL)

    @staticmethod
    def contains_null(type_: Type) -> bool:
        return any(isinstance(member, NullType) for member in members(type_))

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    @staticmethod
    def is_super_type_of(super_type: Type, type_: Type) -> TrinaryLogic:
        if _is_subtype(type_, super_type):
            return TrinaryLogic.YES
        if isinstance(TypeCombinator.intersect(super_type, type_), NeverType):
            return TrinaryLogic.NO
        return TrinaryLogic.MAYBE

    @staticmethod
    def map_members(type_: Type, callback: Callable[[Type], Type]) -> Type:
        return TypeCombinator.union(*(callback(member) for member in members(type_)))

    # ------------------------------------------------------------------
    # Iterable projections
    # ------------------------------------------------------------------

    @staticmethod
    def iterable_key_type(type_: Type) -> Type:
        return TypeCombinator.union(*(_member_key_type(m) for m in members(type_)))

    @staticmethod
    def iterable_value_type(type_: Type) -> Type:
        return TypeCombinator.union(*(_member_value_type(m) for m in members(type_)))

    @staticmethod
    def constant_scalar(type_: Type) -> bool:
        """True for single-valued types that ``===`` can pin down exactly."""
        if isinstance(type_, ConstantArrayType):
            return not type_.key_types
        return isinstance(type_, (NullType, ConstantBooleanType, ConstantIntegerType, ConstantStringType))


# ======================================================================
# Member-level helpers
# ======================================================================

def _is_subtype(sub: Type, sup: Type) -> bool:
    """Every value of ``sub`` is also a value of ``sup``."""
    if isinstance(sub, NeverType) or isinstance(sup, MixedType):
        return True
    if isinstance(sub, MixedType):
        return False
    if isinstance(sub, UnionType):
        return all(_is_subtype(member, sup) for member in sub.types)
    if isinstance(sup, UnionType):
        return any(_is_subtype(sub, member) for member in sup.types)
    if isinstance(sup, IntersectionType):
        return all(_is_subtype(sub, member) for member in sup.types)
    if isinstance(sub, IntersectionType):
        return any(_is_subtype(member, sup) for member in sub.types)
    if sub == sup:
        return True

    checker = _SUBTYPE_RULES.get(type(sup))
    if checker is None:
        return False
    return checker(sub, sup)


def _sub_of_boolean(sub: Type, sup: Type) -> bool:
    return isinstance(sub, ConstantBooleanType)


def _sub_of_integer(sub: Type, sup: Type) -> bool:
    return isinstance(sub, _INTEGER_LIKE)


def _sub_of_integer_range(sub: Type, sup: IntegerRangeType) -> bool:
    if isinstance(sub, ConstantIntegerType):
        return sup.contains(sub.value)
    if isinstance(sub, IntegerRangeType):
        low_ok = sup.min is None or (sub.min is not None and sub.min >= sup.min)
        high_ok = sup.max is None or (sub.max is not None and sub.max <= sup.max)
        return low_ok and high_ok
    return False


def _sub_of_string(sub: Type, sup: Type) -> bool:
    return isinstance(sub, _STRING_LIKE)


def _sub_of_non_empty_string(sub: Type, sup: Type) -> bool:
    if isinstance(sub, ConstantStringType):
        return sub.value != ""
    return isinstance(sub, ClassStringType)


def _sub_of_class_string(sub: Type, sup: ClassStringType) -> bool:
    if not isinstance(sub, ClassStringType):
        return False
    if sup.class_name is None:
        return True
    return sub.class_name is not None and is_subclass(sub.class_name, sup.class_name)


def _sub_of_object(sub: Type, sup: Type) -> bool:
    return isinstance(sub, ObjectType)


def _sub_of_named_object(sub: Type, sup: ObjectType) -> bool:
    return isinstance(sub, ObjectType) and is_subclass(sub.class_name, sup.class_name)


def _sub_of_array(sub: Type, sup: ArrayType) -> bool:
    if isinstance(sub, ArrayType):
        if sup.is_list and not sub.is_list:
            return False
        if sup.is_non_empty and not sub.is_non_empty:
            return False
        return _is_subtype(sub.key_type, sup.key_type) and _is_subtype(sub.item_type, sup.item_type)
    if isinstance(sub, ConstantArrayType):
        if sup.is_non_empty and sub.required_count() == 0:
            return False
        if sup.is_list and not sub.is_list_shaped():
            return False
        return all(
            _is_subtype(key, sup.key_type) and _is_subtype(value, sup.item_type)
            for key, value, _ in sub.entries()
        )
    return False


def _sub_of_constant_array(sub: Type, sup: ConstantArrayType) -> bool:
    if not isinstance(sub, ConstantArrayType):
        return False
    for key, value, optional in sub.entries():
        index = sup.find_key(key)
        if index is None:
            return False
        if optional and not sup.optional_keys[index]:
            return False
        if not _is_subtype(value, sup.value_types[index]):
            return False
    for key, _, optional in sup.entries():
        if not optional and sub.find_key(key) is None:
            return False
    return True


def _sub_of_iterable(sub: Type, sup: IterableType) -> bool:
    if isinstance(sub, (ArrayType, ConstantArrayType, IterableType)):
        return (_is_subtype(_member_key_type(sub), sup.key_type)
                and _is_subtype(_member_value_type(sub), sup.item_type))
    if isinstance(sub, ObjectType) and is_traversable_class(sub.class_name):
        return isinstance(sup.key_type, MixedType) and isinstance(sup.item_type, MixedType)
    return False


_SUBTYPE_RULES: Dict[type, Callable[[Type, Type], bool]] = {
    BooleanType: _sub_of_boolean,
    IntegerType: _sub_of_integer,
    IntegerRangeType: _sub_of_integer_range,
    StringType: _sub_of_string,
    NonEmptyStringType: _sub_of_non_empty_string,
    ClassStringType: _sub_of_class_string,
    ObjectWithoutClassType: _sub_of_object,
    ObjectType: _sub_of_named_object,
    ArrayType: _sub_of_array,
    ConstantArrayType: _sub_of_constant_array,
    IterableType: _sub_of_iterable,
}


def _intersect_members(left: Type, right: Type) -> Type:
    if _is_subtype(left, right):
        return left
    if _is_subtype(right, left):
        return right

    for (left_cls, right_cls), rule in _INTERSECTION_RULES:
        if isinstance(left, left_cls) and isinstance(right, right_cls):
            return rule(left, right)
        if isinstance(right, left_cls) and isinstance(left, right_cls):
            return rule(right, left)
    return NEVER


def _intersect_ranges(left: Type, right: Type) -> Type:
    left_min, left_max = _range_bounds(left)
    right_min, right_max = _range_bounds(right)
    low = _max_bound(left_min, right_min)
    high = _min_bound(left_max, right_max)
    return TypeCombinator.integer_range(low, high)


def _range_bounds(type_: Type) -> Tuple[Optional[int], Optional[int]]:
    if isinstance(type_, IntegerRangeType):
        return type_.min, type_.max
    if isinstance(type_, ConstantIntegerType):
        return type_.value, type_.value
    return None, None


def _max_bound(a: Optional[int], b: Optional[int]) -> Optional[int]:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def _min_bound(a: Optional[int], b: Optional[int]) -> Optional[int]:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def _intersect_callable(callable_type: CallableType, other: Type) -> Type:
    # Strings, arrays and objects may all be callable; keep the more
    # specific side when it carries information we cannot express otherwise.
    if isinstance(other, (ConstantStringType, ObjectType, ConstantArrayType)):
        return other
    if isinstance(other, (StringType, NonEmptyStringType, ClassStringType, ArrayType, ObjectWithoutClassType)):
        return callable_type
    return NEVER


def _intersect_class_string(class_string: ClassStringType, other: Type) -> Type:
    if isinstance(other, ConstantStringType) and other.value != "":
        return other
    return NEVER


def _intersect_objects(left: ObjectType, right: ObjectType) -> Type:
    return IntersectionType((left, right))


def _intersect_intersection(left: IntersectionType, right: Type) -> Type:
    if not isinstance(right, ObjectType):
        return NEVER
    return IntersectionType(left.types + (right,))


def _intersect_arrays(left: ArrayType, right: ArrayType) -> Type:
    return TypeCombinator.array(
        TypeCombinator.intersect(left.key_type, right.key_type),
        TypeCombinator.intersect(left.item_type, right.item_type),
        left.is_list or right.is_list,
        left.is_non_empty or right.is_non_empty,
    )


def _intersect_array_with_constant(general: ArrayType, constant: ConstantArrayType) -> Type:
    if general.is_list and not constant.is_list_shaped():
        return NEVER
    entries = []
    for key, value, optional in constant.entries():
        if not _is_subtype(key, general.key_type):
            if optional:
                continue
            return NEVER
        entries.append((key, TypeCombinator.intersect(value, general.item_type), optional))
    result = TypeCombinator.constant_array(entries)
    if general.is_non_empty and isinstance(result, ConstantArrayType) and not result.key_types:
        return NEVER
    return result


def _intersect_constant_arrays(left: ConstantArrayType, right: ConstantArrayType) -> Type:
    entries = []
    for key, value, optional in left.entries():
        index = right.find_key(key)
        if index is None:
            if optional:
                continue
            return NEVER
        entries.append((
            key,
            TypeCombinator.intersect(value, right.value_types[index]),
            optional and right.optional_keys[index],
        ))
    for key, _, optional in right.entries():
        if left.find_key(key) is None and not optional:
            return NEVER
    return TypeCombinator.constant_array(entries)


def _intersect_iterable(iterable: IterableType, other: Type) -> Type:
    if isinstance(other, IterableType):
        return IterableType(
            TypeCombinator.intersect(iterable.key_type, other.key_type),
            TypeCombinator.intersect(iterable.item_type, other.item_type),
        )
    if isinstance(other, ArrayType):
        return TypeCombinator.array(
            TypeCombinator.intersect(iterable.key_type, other.key_type),
            TypeCombinator.intersect(iterable.item_type, other.item_type),
            other.is_list,
            other.is_non_empty,
        )
    if isinstance(other, ConstantArrayType):
        return _intersect_array_with_constant(ArrayType(iterable.key_type, iterable.item_type), other)
    if isinstance(other, ObjectType) and is_traversable_class(other.class_name):
        return other
    if isinstance(other, ObjectWithoutClassType):
        return ObjectType("Traversable")
    return NEVER


_INTERSECTION_RULES = (
    ((_INTEGER_LIKE, _INTEGER_LIKE), _intersect_ranges),
    ((CallableType, Type), _intersect_callable),
    ((ClassStringType, Type), _intersect_class_string),
    ((IntersectionType, Type), _intersect_intersection),
    ((ObjectType, ObjectType), _intersect_objects),
    ((ArrayType, ArrayType), _intersect_arrays),
    ((ArrayType, ConstantArrayType), _intersect_array_with_constant),
    ((ConstantArrayType, ConstantArrayType), _intersect_constant_arrays),
    ((IterableType, Type), _intersect_iterable),
)


def _subtract_member(member: Type, removed: Type) -> Type:
    """What is left of a single member after removing ``removed`` from it."""
    if isinstance(member, BooleanType) and isinstance(removed, ConstantBooleanType):
        return ConstantBooleanType(not removed.value)
    if isinstance(member, StringType) and removed == ConstantStringType(""):
        return NON_EMPTY_STRING
    if isinstance(member, (IntegerType, IntegerRangeType)) and isinstance(removed, ConstantIntegerType):
        low, high = _range_bounds(member)
        if low is not None and removed.value == low:
            return TypeCombinator.integer_range(low + 1, high)
        if high is not None and removed.value == high:
            return TypeCombinator.integer_range(low, high - 1)
    if isinstance(removed, UnionType):
        result = member
        for part in removed.types:
            result = TypeCombinator.remove(result, part)
        return result
    return member


def _member_key_type(member: Type) -> Type:
    if isinstance(member, (ArrayType, IterableType)):
        return member.key_type
    if isinstance(member, ConstantArrayType):
        return TypeCombinator.union(*member.key_types)
    return MIXED


def _member_value_type(member: Type) -> Type:
    if isinstance(member, (ArrayType, IterableType)):
        return member.item_type
    if isinstance(member, ConstantArrayType):
        return TypeCombinator.union(*member.value_types)
    return MIXED

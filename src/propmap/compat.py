"""Effective types and the assignability rule used by the mapper."""

from __future__ import annotations

import types
from inspect import isclass
from typing import Annotated, Any, Literal, Tuple, Union, get_args, get_origin

_UnionType = getattr(types, "UnionType", None)
NoneType = type(None)


def strip_annotated(tp: Any) -> Any:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def annotated_metadata(tp: Any) -> Tuple[Any, ...]:
    if get_origin(tp) is Annotated:
        return tuple(tp.__metadata__)
    return ()


def is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or (_UnionType is not None and origin is _UnionType)


def is_optional(tp: Any) -> bool:
    tp = strip_annotated(tp)
    return tp is None or tp is NoneType or (is_union(tp) and NoneType in get_args(tp))


def unwrap_optional(tp: Any) -> Any:
    """Remove one layer of ``Optional`` / ``X | None`` wrapping."""
    if not is_union(tp):
        return tp
    members = [strip_annotated(arg) for arg in get_args(tp) if arg is not NoneType]
    if len(members) == len(get_args(tp)):
        return tp
    if len(members) == 1:
        return members[0]
    return Union[tuple(members)]


def effective_type(tp: Any, strip_optional: bool = True) -> Any:
    tp = strip_annotated(tp)
    if strip_optional:
        tp = unwrap_optional(tp)
    return strip_annotated(tp)


def is_assignable(source: Any, target: Any) -> bool:
    """Whether a value typed ``source`` may be stored in a ``target`` field.

    Subclasses go to their bases, unions are checked member by member and
    nothing is ever coerced: ``int`` is not assignable to ``float`` nor to
    ``date``.
    """
    source = strip_annotated(source)
    target = strip_annotated(target)

    if source is None:
        source = NoneType
    if target is None:
        target = NoneType
    if source == target or source is Any or target is Any or target is object:
        return True

    if is_union(source):
        return all(is_assignable(member, target) for member in get_args(source))
    if is_union(target):
        return any(is_assignable(source, member) for member in get_args(target))

    if get_origin(source) is Literal:
        return isclass(target) and all(
            isinstance(value, target) for value in get_args(source)
        )

    source_origin = get_origin(source) or source
    target_origin = get_origin(target) or target
    if not (isclass(source_origin) and isclass(target_origin)):
        return False
    if not issubclass(source_origin, target_origin):
        return False
    target_args = get_args(target)
    return not target_args or get_args(source) == target_args

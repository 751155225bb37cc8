from __future__ import annotations

import dataclasses
import logging
from decimal import Decimal
from functools import partial
from inspect import Parameter, get_annotations, isclass, signature
from typing import (
    Any,
    ClassVar,
    Dict,
    Iterator,
    List,
    Optional,
    Set,
    Tuple,
    Type,
    TypeVar,
    get_args,
    get_origin,
    get_type_hints,
)

from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from .compat import NoneType, annotated_metadata, is_optional, is_union, strip_annotated
from .correspondence import CorrespondenceTable, find_marker
from .descriptors import FieldDescriptor, TypeDescriptor

logger = logging.getLogger(__name__)

TT = TypeVar("TT")

Declared = Tuple[FieldDescriptor, Optional[str]]

_ZERO_SCALARS = (bool, int, float, complex, str, bytes, Decimal)
_ZERO_CONTAINERS = (list, dict, set, frozenset, tuple)


def zero_value(tp: Any) -> Any:
    """Value a field of type ``tp`` holds before anything is assigned."""
    tp = strip_annotated(tp)
    if is_optional(tp):
        return None
    origin = get_origin(tp) or tp
    if origin in _ZERO_SCALARS or origin in _ZERO_CONTAINERS:
        return origin()
    return None


def declared_source_name(hint: Any) -> Optional[str]:
    """Find the ``MapFrom`` name on ``hint`` or inside one ``Optional`` layer."""
    name = find_marker(annotated_metadata(hint))
    if name is None and is_union(hint) and NoneType in get_args(hint):
        for member in get_args(hint):
            name = find_marker(annotated_metadata(member))
            if name is not None:
                break
    return name


def _is_classvar(tp: Any) -> bool:
    return tp is ClassVar or get_origin(tp) is ClassVar


class PopoAdapter:
    """Describes plain annotated classes.

    Fields are the public class annotations (base classes first) followed by
    public properties. Annotated attributes are readable and writable, a
    property is readable with a getter and writable with a setter.
    """

    def describe(self, cls: Type[TT]) -> TypeDescriptor:
        fields = [descriptor for descriptor, _ in self.declared_fields(cls)]
        logger.debug("Described %s with %d fields", cls.__name__, len(fields))
        return TypeDescriptor(
            type=cls, fields=tuple(fields), factory=partial(self.create_instance, cls)
        )

    def correspondences(self, cls: Type) -> CorrespondenceTable:
        return CorrespondenceTable(
            {descriptor.name: name for descriptor, name in self.declared_fields(cls)}
        )

    def declared_fields(self, cls: Type) -> List[Declared]:
        properties = {item[0].name: item for item in self.get_property_fields(cls)}
        declared = []
        for item in self.get_attribute_fields(cls):
            name = item[0].name
            if name in properties and self._property_overrides(cls, name):
                item = properties[name]
            properties.pop(name, None)
            declared.append(item)
        declared.extend(properties.values())
        return declared

    def _property_overrides(self, cls: Type, name: str) -> bool:
        # The most derived definition of ``name`` wins.
        for klass in cls.__mro__:
            if isinstance(vars(klass).get(name), property):
                return True
            if name in get_annotations(klass):
                return False
        return False

    def get_attribute_fields(self, cls: Type) -> Iterator[Declared]:
        for name, hint in self.get_type_hints(cls).items():
            if name.startswith("_") or _is_classvar(hint):
                continue
            yield (
                FieldDescriptor(name, strip_annotated(hint)),
                declared_source_name(hint),
            )

    def get_property_fields(self, cls: Type) -> Iterator[Declared]:
        properties: Dict[str, property] = {}
        for klass in reversed(cls.__mro__):
            if klass in self.excluded_bases():
                continue
            for name, member in vars(klass).items():
                if isinstance(member, property) and not name.startswith("_"):
                    properties[name] = member
        for name, prop in properties.items():
            hint = self._getter_hint(prop)
            yield (
                FieldDescriptor(
                    name,
                    strip_annotated(hint),
                    readable=prop.fget is not None,
                    writable=prop.fset is not None,
                ),
                declared_source_name(hint),
            )

    def excluded_bases(self) -> Tuple[Type, ...]:
        return (object,)

    def get_type_hints(self, obj: Any) -> Dict[str, Any]:
        try:
            return get_type_hints(obj, include_extras=True)
        except NameError as e:
            raise TypeError(
                f"Cannot resolve annotations of {getattr(obj, '__qualname__', obj)}: {e}"
            ) from e

    def get_init_params(self, cls: Type) -> Set[Tuple[str, Parameter]]:
        return {
            (name, param)
            for name, param in signature(cls.__init__).parameters.items()
            if name != "self"
            and param.kind not in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
        }

    def filter_empty_params(
        self, init_params: Set[Tuple[str, Parameter]]
    ) -> Set[Tuple[str, Parameter]]:
        return {
            (name, param)
            for name, param in init_params
            if param.default is Parameter.empty
        }

    def create_instance(self, cls: Type[TT]) -> TT:
        if self.filter_empty_params(self.get_init_params(cls)):
            # The constructor needs arguments, so allocate and zero-fill instead.
            instance = object.__new__(cls)
        else:
            instance = cls()
        for name, value in self.default_values(cls).items():
            if not hasattr(instance, name):
                object.__setattr__(instance, name, value)
        return instance

    def default_values(self, cls: Type) -> Dict[str, Any]:
        return {
            descriptor.name: zero_value(descriptor.type)
            for descriptor, _ in self.get_attribute_fields(cls)
            if not hasattr(cls, descriptor.name)
        }

    def _getter_hint(self, prop: property) -> Any:
        if prop.fget is None:
            return Any
        return self.get_type_hints(prop.fget).get("return", Any)


class DataclassAdapter(PopoAdapter):
    """Describes dataclasses. Every field of a frozen dataclass is read-only."""

    def get_attribute_fields(self, cls: Type) -> Iterator[Declared]:
        hints = self.get_type_hints(cls)
        frozen = cls.__dataclass_params__.frozen
        for field in dataclasses.fields(cls):
            if field.name.startswith("_"):
                continue
            hint = hints.get(field.name, field.type)
            yield (
                FieldDescriptor(
                    field.name, strip_annotated(hint), readable=True, writable=not frozen
                ),
                declared_source_name(hint),
            )

    def default_values(self, cls: Type) -> Dict[str, Any]:
        hints = self.get_type_hints(cls)
        values = {}
        for field in dataclasses.fields(cls):
            if field.default is not dataclasses.MISSING:
                values[field.name] = field.default
            elif field.default_factory is not dataclasses.MISSING:
                values[field.name] = field.default_factory()
            else:
                values[field.name] = zero_value(hints.get(field.name, field.type))
        return values


class PydanticModelAdapter(PopoAdapter):
    """Describes pydantic models through ``model_fields``.

    Fields of a frozen model, and fields declared ``frozen=True``, are
    read-only. Correspondence markers live in ``FieldInfo.metadata``.
    """

    def __init__(self, BaseModel: Type = BaseModel) -> None:
        self.BaseModel = BaseModel

    def excluded_bases(self) -> Tuple[Type, ...]:
        return tuple(self.BaseModel.__mro__)

    def get_attribute_fields(self, cls: Type) -> Iterator[Declared]:
        frozen_model = bool(cls.model_config.get("frozen", False))
        for name, field in cls.model_fields.items():
            yield (
                FieldDescriptor(
                    name,
                    field.annotation,
                    readable=True,
                    writable=not (frozen_model or field.frozen),
                ),
                find_marker(field.metadata) or declared_source_name(field.annotation),
            )

    def create_instance(self, cls: Type[TT]) -> TT:
        if not (isclass(cls) and issubclass(cls, self.BaseModel)):
            raise TypeError("Expected a Pydantic BaseModel class")
        return cls.model_construct(**self.default_values(cls))

    def default_values(self, cls: Type) -> Dict[str, Any]:
        return {
            name: zero_value(field.annotation)
            for name, field in cls.model_fields.items()
            if not self._field_has_default(field)
        }

    @staticmethod
    def _field_has_default(field_info: FieldInfo) -> bool:
        return (
            field_info.default is not PydanticUndefined
            or field_info.default_factory is not None
        )


def get_adapter(cls: Any) -> PopoAdapter:
    if not isclass(cls):
        raise TypeError(f"Expected a class, got {type(cls).__name__}")
    if issubclass(cls, BaseModel):
        return PydanticModelAdapter()
    if dataclasses.is_dataclass(cls):
        return DataclassAdapter()
    return PopoAdapter()

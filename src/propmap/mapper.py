"""Field-by-field mapping between a model class and a view model.

The view model declares, per field, which model field it mirrors::

    @dataclass
    class User:
        id: int
        name: Optional[str] = None

    @dataclass
    class UserView:
        user_id: Annotated[int, MapFrom("id")] = 0
        user_name: Annotated[Optional[str], MapFrom("name")] = None

    mapper = Mapper()
    view = mapper.class_to_view_model(User(1, "Johnny"), UserView)
    user = mapper.view_model_to_class(view, User)

Both directions run the same routine. Only the side being read and the side
being written are swapped.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import (
    Any,
    Callable,
    Dict,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    Type,
    TypeVar,
    Union,
    runtime_checkable,
)

from .adapters import get_adapter
from .compat import effective_type, is_assignable
from .config import MapperConfig
from .correspondence import CorrespondenceTable
from .descriptors import FieldDescriptor, TypeDescriptor
from .errors import InaccessibleField, IncompatibleTypes, UnknownSourceField

logger = logging.getLogger(__name__)

TS = TypeVar("TS")
TT = TypeVar("TT")
K = TypeVar("K")
V = TypeVar("V")

CorrespondenceSpec = Union[Mapping[str, Optional[str]], Iterable]


@runtime_checkable
class MapperService(Protocol):
    """The two mapping operations a shared mapper instance exposes."""

    def class_to_view_model(self, instance: Any, view_model_type: Type[TT]) -> TT:
        ...

    def view_model_to_class(self, instance: Any, model_type: Type[TT]) -> TT:
        ...


class Mapper:
    def __init__(self, config: Optional[MapperConfig] = None, **overrides: Any) -> None:
        if config is None:
            config = MapperConfig(**overrides)
        elif overrides:
            config = MapperConfig(**{**config.model_dump(), **overrides})
        self.config = config
        self._lock = threading.Lock()
        self._descriptors: Dict[type, TypeDescriptor] = {}
        self._declared: Dict[type, CorrespondenceTable] = {}
        self._registered: Dict[Tuple[type, type], CorrespondenceTable] = {}
        self._manual: Dict[type, Tuple[TypeDescriptor, Optional[CorrespondenceTable]]] = {}
        if not config.require_writable_source:
            logger.warning(
                "Mapper created with require_writable_source=False: "
                "getter-only fields are accepted on the side being read."
            )

    def add_mapping(
        self,
        view_model_type: type,
        model_type: type,
        correspondences: CorrespondenceSpec,
    ) -> None:
        """Register correspondences for a type pair.

        ``correspondences`` maps view-model field names to model field names.
        A set or list of names maps each name onto itself. A registered table
        replaces any ``MapFrom`` markers declared on the view model for that
        pair. Names are resolved when a mapping runs, not here.
        """
        if isinstance(correspondences, (str, bytes)):
            raise TypeError(
                "Expected a mapping or a collection of field names, "
                f"got {type(correspondences).__name__}"
            )
        if not isinstance(correspondences, Mapping):
            correspondences = {name: name for name in correspondences}
        table = CorrespondenceTable(correspondences)
        with self._lock:
            self._registered[(view_model_type, model_type)] = table
        logger.debug(
            "Registered %d correspondences %s <- %s",
            len(table),
            view_model_type.__name__,
            model_type.__name__,
        )

    def register_descriptor(
        self,
        descriptor: TypeDescriptor,
        correspondences: Optional[Mapping[str, Optional[str]]] = None,
    ) -> None:
        """Use ``descriptor`` for its type instead of introspecting the class."""
        table = None if correspondences is None else CorrespondenceTable(correspondences)
        with self._lock:
            self._manual[descriptor.type] = (descriptor, table)

    def describe(self, cls: type) -> TypeDescriptor:
        manual = self._manual.get(cls)
        if manual is not None:
            return manual[0]
        return self._cached(self._descriptors, cls, lambda: get_adapter(cls).describe(cls))

    def class_to_view_model(
        self,
        instance: TS,
        view_model_type: Type[TT],
        model_type: Optional[Type[TS]] = None,
    ) -> TT:
        """Build a ``view_model_type`` instance from a model instance.

        Raises:
            InaccessibleField: a mapped field lacks get or set access.
            UnknownSourceField: a declared name is missing on the model.
            IncompatibleTypes: the model field's type does not fit.
        """
        model_type = self._checked_type(instance, model_type)
        return self._transfer(instance, view_model_type, model_type, to_view_model=True)

    def view_model_to_class(
        self,
        instance: TS,
        model_type: Type[TT],
        view_model_type: Optional[Type[TS]] = None,
    ) -> TT:
        """Build a ``model_type`` instance from a view model instance.

        Raises the same errors as :meth:`class_to_view_model`.
        """
        view_model_type = self._checked_type(instance, view_model_type)
        return self._transfer(instance, view_model_type, model_type, to_view_model=False)

    def map(self, instance: Any, target_type: Type[TT]) -> TT:
        """Map in whichever direction the declared correspondences allow.

        The target's own correspondences win. When only the instance's type
        declares them, the instance is treated as the view model.
        """
        source_type = type(instance)
        if not self._correspondences(target_type, source_type) and self._correspondences(
            source_type, target_type
        ):
            return self.view_model_to_class(instance, target_type)
        return self.class_to_view_model(instance, target_type)

    # region Private methods
    # These methods are not intended to be used outside of this class.

    def _transfer(
        self,
        instance: Any,
        view_model_type: type,
        model_type: type,
        *,
        to_view_model: bool,
    ) -> Any:
        view_model = self.describe(view_model_type)
        model = self.describe(model_type)
        table = self._correspondences(view_model_type, model_type)
        target = view_model if to_view_model else model
        result = target.new_instance()

        for view_field in view_model.fields:
            name = table.source_name(view_field.name)
            if name is None:
                logger.debug("%s.%s is not mapped", view_model.name, view_field.name)
                continue
            self._guard_accessible(view_field, reading=not to_view_model)

            model_field = model.field(name)
            if model_field is None:
                raise UnknownSourceField(name, model_type)
            self._guard_accessible(model_field, reading=to_view_model)

            read, written = (
                (model_field, view_field) if to_view_model else (view_field, model_field)
            )
            read_type = effective_type(read.type, self.config.strip_optional)
            written_type = effective_type(written.type, self.config.strip_optional)
            if not is_assignable(read_type, written_type):
                raise IncompatibleTypes(read_type, written_type, view_field.name)

            setattr(result, written.name, getattr(instance, read.name))
            logger.debug(
                "Mapped %s.%s -> %s.%s",
                type(instance).__name__,
                read.name,
                target.name,
                written.name,
            )

        return result

    def _guard_accessible(self, field: FieldDescriptor, reading: bool) -> None:
        if reading and not self.config.require_writable_source:
            accessible = field.readable
        else:
            accessible = field.accessible
        if not accessible:
            raise InaccessibleField(field.name)

    def _correspondences(
        self, view_model_type: type, model_type: type
    ) -> CorrespondenceTable:
        registered = self._registered.get((view_model_type, model_type))
        if registered is not None:
            return registered
        manual = self._manual.get(view_model_type)
        if manual is not None and manual[1] is not None:
            return manual[1]
        return self._cached(
            self._declared,
            view_model_type,
            lambda: get_adapter(view_model_type).correspondences(view_model_type),
        )

    def _cached(self, cache: Dict[K, V], key: K, build: Callable[[], V]) -> V:
        if not self.config.cache_descriptors:
            return build()
        value = cache.get(key)
        if value is not None:
            return value
        with self._lock:
            value = cache.get(key)
            if value is None:
                value = cache[key] = build()
                logger.debug("Built %s for %r", type(value).__name__, key)
            return value

    @staticmethod
    def _checked_type(instance: Any, expected: Optional[type]) -> type:
        if expected is None:
            return type(instance)
        if not isinstance(instance, expected):
            raise TypeError(
                f"Expected an instance of {expected.__name__}, "
                f"got {type(instance).__name__}"
            )
        return expected

    # endregion

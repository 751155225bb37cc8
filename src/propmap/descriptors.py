from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple, Type


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a record type as seen by the mapping engine."""

    name: str
    type: Any
    readable: bool = True
    writable: bool = True

    @property
    def accessible(self) -> bool:
        return self.readable and self.writable


@dataclass(frozen=True)
class TypeDescriptor:
    """Ordered field descriptors of a record type plus a factory for it.

    ``fields`` keeps declaration order, which fixes the order fields are
    processed in and therefore which error is reported first.
    """

    type: Type
    fields: Tuple[FieldDescriptor, ...]
    factory: Callable[[], Any]
    _by_name: Dict[str, FieldDescriptor] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "_by_name", {f.name: f for f in self.fields})

    def field(self, name: str) -> Optional[FieldDescriptor]:
        return self._by_name.get(name)

    def new_instance(self) -> Any:
        return self.factory()

    @property
    def name(self) -> str:
        return self.type.__name__

"""Declaring which model field supplies a view-model field.

A correspondence is attached to the view-model side, either inline::

    class UserView:
        user_id: Annotated[int, MapFrom("id")]

or as a table registered on the mapper for a type pair::

    mapper.add_mapping(UserView, User, {"user_id": "id"})

Nothing is validated here. Names are only resolved when a mapping runs.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional


class MapFrom:
    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"MapFrom({self.name!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, MapFrom) and other.name == self.name

    def __hash__(self) -> int:
        return hash((MapFrom, self.name))


def map_from(name: str) -> MapFrom:
    return MapFrom(name)


def find_marker(metadata: Iterable[Any]) -> Optional[str]:
    """Return the declared source name from ``Annotated`` metadata, if any.

    Empty names count as undeclared.
    """
    for item in metadata:
        if isinstance(item, MapFrom):
            return item.name or None
    return None


class CorrespondenceTable(Mapping[str, str]):
    """Immutable view-model field name -> model field name table."""

    __slots__ = ("_entries",)

    def __init__(
        self, entries: Optional[Mapping[str, Optional[str]]] = None
    ) -> None:
        cleaned = {
            target: source for target, source in (entries or {}).items() if source
        }
        self._entries = MappingProxyType(cleaned)

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CorrespondenceTable({dict(self._entries)!r})"

    def source_name(self, target_name: str) -> Optional[str]:
        return self._entries.get(target_name)


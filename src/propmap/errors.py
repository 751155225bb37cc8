from __future__ import annotations

from typing import Any


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


class MappingError(Exception):
    """Base class for every error raised while mapping two records."""


class InaccessibleField(MappingError, NotImplementedError):
    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Missing get or set access on field {field_name}.")


class UnknownSourceField(MappingError, ValueError):
    def __init__(self, name: str, expected_on_type: Any) -> None:
        self.name = name
        self.expected_on_type = expected_on_type
        super().__init__(
            f"Mapping field {name} not found in {_type_name(expected_on_type)}."
        )


class IncompatibleTypes(MappingError, TypeError):
    def __init__(self, from_type: Any, to_type: Any, field: str) -> None:
        self.from_type = from_type
        self.to_type = to_type
        self.field = field
        super().__init__(
            f"Cannot assign {_type_name(from_type)} to {_type_name(to_type)} "
            f"on field {field}."
        )

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MapperConfig(BaseModel):
    """Settings for a :class:`~propmap.Mapper`.

    Attributes:
        require_writable_source: Reject a field that is only read when it has
            no setter. Turning this off relaxes the accessibility rule to
            "readable" on the read side.
        cache_descriptors: Keep type descriptors and correspondence tables
            after the first build.
        strip_optional: Treat ``Optional[X]`` and ``X`` as the same type when
            checking assignability.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    require_writable_source: bool = True
    cache_descriptors: bool = True
    strip_optional: bool = True

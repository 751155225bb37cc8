from .config import MapperConfig
from .correspondence import CorrespondenceTable, MapFrom, map_from
from .descriptors import FieldDescriptor, TypeDescriptor
from .errors import InaccessibleField, IncompatibleTypes, MappingError, UnknownSourceField
from .mapper import Mapper, MapperService

__all__ = [
    "CorrespondenceTable",
    "FieldDescriptor",
    "InaccessibleField",
    "IncompatibleTypes",
    "MapFrom",
    "Mapper",
    "MapperConfig",
    "MapperService",
    "MappingError",
    "TypeDescriptor",
    "UnknownSourceField",
    "map_from",
]

"""Infrastructure mappers bridging stored rows and the scheduling core."""

from .class_mapper import (
    ADAPTERS,
    ChangeEvent,
    ClassMappingError,
    ClassRecordMapper,
    LegacyClassLogAdapter,
    RecordAdapter,
    SnakeCaseClassAdapter,
)

__all__ = [
    "ADAPTERS",
    "ChangeEvent",
    "ClassMappingError",
    "ClassRecordMapper",
    "LegacyClassLogAdapter",
    "RecordAdapter",
    "SnakeCaseClassAdapter",
]

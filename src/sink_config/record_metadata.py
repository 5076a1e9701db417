"""
Field type resolution for mapped record fields.

Given the schema of an inbound record part and the native type of the
destination column, work out the in-memory type the write path should expect
for a mapped field. Record schemas are `pyspark.sql.types` structures; the
reserved field `__self` always means "the whole record part".
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, Protocol

import pyspark.sql.types as T
from pyspark.sql import Row

from src.constants import WHOLE_RECORD_FIELD
from src.sink_config.errors import FieldLookupError, UnsupportedTypeError

_PATH_SEPARATOR = "."

# Leaf types with a fixed representation. Container types are handled in
# `representation_type` because their representation depends on their elements.
_ATOMIC_REPRESENTATIONS: tuple[tuple[type[T.DataType], Any], ...] = (
    (T.ByteType, int),
    (T.ShortType, int),
    (T.IntegerType, int),
    (T.LongType, int),
    (T.FloatType, float),
    (T.DoubleType, float),
    (T.DecimalType, Decimal),
    (T.StringType, str),
    (T.CharType, str),
    (T.VarcharType, str),
    (T.BinaryType, bytes),
    (T.BooleanType, bool),
    (T.DateType, dt.date),
    (T.TimestampType, dt.datetime),
    (T.TimestampNTZType, dt.datetime),
    (T.DayTimeIntervalType, dt.timedelta),
    (T.NullType, type(None)),
)


def representation_type(data_type: T.DataType) -> Any:
    """
    Map a record schema type to the type its values have in memory.

    Arrays and maps resolve to parameterized `list[...]` / `dict[...]` aliases;
    structs resolve to `Row`.

    Raises:
        UnsupportedTypeError: for a schema type with no registered representation.
    """
    if isinstance(data_type, T.ArrayType):
        return list[representation_type(data_type.elementType)]  # type: ignore[misc]
    if isinstance(data_type, T.MapType):
        key = representation_type(data_type.keyType)
        value = representation_type(data_type.valueType)
        return dict[key, value]  # type: ignore[valid-type]
    if isinstance(data_type, T.StructType):
        return Row
    for spark_type, python_type in _ATOMIC_REPRESENTATIONS:
        if isinstance(data_type, spark_type):
            return python_type
    raise UnsupportedTypeError(data_type)


class RecordMetadata(Protocol):
    """Schema information for one record part (key or value)."""

    def field_type(self, field: str | tuple[str, ...], column_type: Any) -> Any: ...


class StructDataMetadata:
    """Metadata for a structured record part described by a StructType."""

    def __init__(self, schema: T.StructType) -> None:
        self.schema = schema

    def _walk(self, segments: tuple[str, ...]) -> T.DataType:
        """Follow `segments` through struct-typed fields and return the last field's type."""
        if not segments:
            raise FieldLookupError("An empty field path does not name a field.")
        current: T.DataType = self.schema
        for segment in segments:
            if not isinstance(current, T.StructType) or segment not in current.fieldNames():
                name = _PATH_SEPARATOR.join(segments)
                raise FieldLookupError(f"Field '{name}' does not exist in the record schema.")
            current = current[segment].dataType
        return current

    def _lookup(self, field: str) -> T.DataType:
        if field in self.schema.fieldNames():
            return self.schema[field].dataType
        return self._walk(tuple(field.split(_PATH_SEPARATOR)))

    def field_type(self, field: str | tuple[str, ...], column_type: Any) -> Any:
        """
        Representation type of `field`; the column type is only a hint and is not consulted.

        A string names a top-level field, falling back to a dotted nested path. A
        tuple of segments (`FieldPath.segments`) is always walked segment by segment,
        so a top-level field whose name contains dots stays distinct from a nested path.
        """
        if field == WHOLE_RECORD_FIELD or field == (WHOLE_RECORD_FIELD,):
            return Row
        if isinstance(field, tuple):
            return representation_type(self._walk(field))
        return representation_type(self._lookup(field))


class RawDataMetadata:
    """Metadata for a record part holding a single primitive value."""

    def __init__(self, data_type: T.DataType) -> None:
        self.data_type = data_type

    def field_type(self, field: str | tuple[str, ...], column_type: Any) -> Any:
        if field not in (WHOLE_RECORD_FIELD, (WHOLE_RECORD_FIELD,)):
            raise FieldLookupError(
                f"Field '{field}' does not exist: a primitive record part can only be "
                f"mapped as a whole."
            )
        return representation_type(self.data_type)

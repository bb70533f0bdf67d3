"""
PostgreSQL column type -> OpenAPI type descriptor.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TypeDescriptor:
    type: str
    format: str | None = None

    def as_schema(self) -> dict:
        schema = {"type": self.type}
        if self.format:
            schema["format"] = self.format
        return schema


_INT32 = TypeDescriptor("integer", "int32")
_INT64 = TypeDescriptor("integer", "int64")
_FLOAT = TypeDescriptor("number", "float")
_DOUBLE = TypeDescriptor("number", "double")
_STRING = TypeDescriptor("string")
_BOOLEAN = TypeDescriptor("boolean")
_DATE_TIME = TypeDescriptor("string", "date-time")
_DATE = TypeDescriptor("string", "date")
_TIME = TypeDescriptor("string", "time")
_OBJECT = TypeDescriptor("object")

TYPE_MAP: dict[str, TypeDescriptor] = {
    "smallint": _INT32,
    "int2": _INT32,
    "integer": _INT32,
    "int": _INT32,
    "int4": _INT32,
    "bigint": _INT64,
    "int8": _INT64,
    "numeric": _DOUBLE,
    "decimal": _DOUBLE,
    "double precision": _DOUBLE,
    "float8": _DOUBLE,
    "real": _FLOAT,
    "float4": _FLOAT,
    "character varying": _STRING,
    "varchar": _STRING,
    "character": _STRING,
    "char": _STRING,
    "bpchar": _STRING,
    "text": _STRING,
    "citext": _STRING,
    "name": _STRING,
    "boolean": _BOOLEAN,
    "bool": _BOOLEAN,
    "timestamp": _DATE_TIME,
    "timestamp with time zone": _DATE_TIME,
    "timestamp without time zone": _DATE_TIME,
    "timestamptz": _DATE_TIME,
    "date": _DATE,
    "time": _TIME,
    "time with time zone": _TIME,
    "time without time zone": _TIME,
    "timetz": _TIME,
    "json": _OBJECT,
    "jsonb": _OBJECT,
    "uuid": TypeDescriptor("string", "uuid"),
    "bytea": TypeDescriptor("string", "binary"),
    "inet": TypeDescriptor("string", "ipv4"),
    "cidr": TypeDescriptor("string", "ipv4"),
    "macaddr": _STRING,
    # Geometric types are exposed as opaque objects.
    "point": _OBJECT,
    "line": _OBJECT,
    "lseg": _OBJECT,
    "box": _OBJECT,
    "path": _OBJECT,
    "polygon": _OBJECT,
    "circle": _OBJECT,
    "interval": _STRING,
}

FALLBACK = _STRING


def map_type(data_type: str) -> TypeDescriptor:
    """
    Look up the OpenAPI descriptor for a column type. Unknown types map to a
    plain string; this never raises.
    """
    key = (data_type or "").strip().lower()
    return TYPE_MAP.get(key, FALLBACK)

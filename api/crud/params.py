"""
Adapt values between JSON and the Python types asyncpg uses per column type.

asyncpg encodes parameters strictly by the server-side type (an `integer`
parameter needs an `int`, a `timestamp` needs a `datetime`, an `interval`
needs a `timedelta`), while HTTP input arrives as JSON scalars and path
strings. `json`/`jsonb` are handled by the pool's type codec, so decoded JSON
values pass through unchanged.

Wire forms that JSON has no native type for:
- `bytea` is base64 text in both directions.
- `interval` is an ISO 8601 duration (`P1DT2H3M4.5S`) in responses; requests
  also accept PostgreSQL's `1 day 02:03:04` form or a number of seconds.
"""

from __future__ import annotations

import base64
import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Callable
from uuid import UUID

from fastapi.encoders import jsonable_encoder

_TRUE = {"true", "t", "yes", "y", "1", "on"}
_FALSE = {"false", "f", "no", "n", "0", "off"}

_ISO_DURATION = re.compile(
    r"(?P<sign>-)?P(?!$)(?:(?P<weeks>\d+)W)?(?:(?P<days>\d+)D)?"
    r"(?:T(?=\d)(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?"
)
_PG_INTERVAL = re.compile(
    r"(?:(?P<days>[+-]?\d+) days?)?\s*"
    r"(?:(?P<tsign>[+-])?(?P<hours>\d+):(?P<minutes>\d{2})(?::(?P<seconds>\d{2}(?:\.\d+)?))?)?"
)


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("boolean is not an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"not an integer: {value!r}")
        return int(value)
    if isinstance(value, (int, str)):
        return int(value)
    raise ValueError(f"not an integer: {value!r}")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    return Decimal(str(value))


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    return float(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raw = str(value).strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _iso(value: Any, kind: type, parser: Callable[[str], Any]) -> Any:
    if isinstance(value, kind):
        return value
    if not isinstance(value, str):
        raise ValueError(f"expected an ISO 8601 string, got {value!r}")
    return parser(value)


def _to_datetime(value: Any) -> datetime:
    return _iso(value, datetime, datetime.fromisoformat)


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    return _iso(value, date, date.fromisoformat)


def _to_time(value: Any) -> time:
    # `time.fromisoformat` keeps a `+HH:MM` offset as tzinfo, which timetz needs.
    return _iso(value, time, time.fromisoformat)


def _to_interval(value: Any) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError("boolean is not an interval")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"not an interval: {value!r}")

    raw = value.strip()
    m = _ISO_DURATION.fullmatch(raw)
    if m:
        delta = timedelta(
            weeks=int(m["weeks"] or 0),
            days=int(m["days"] or 0),
            hours=int(m["hours"] or 0),
            minutes=int(m["minutes"] or 0),
            seconds=float(m["seconds"] or 0),
        )
        return -delta if m["sign"] else delta

    m = _PG_INTERVAL.fullmatch(raw)
    if m and (m["days"] is not None or m["hours"] is not None):
        clock = timedelta(
            hours=int(m["hours"] or 0),
            minutes=int(m["minutes"] or 0),
            seconds=float(m["seconds"] or 0),
        )
        if m["tsign"] == "-":
            clock = -clock
        return timedelta(days=int(m["days"] or 0)) + clock

    raise ValueError(f"not an interval: {value!r}")


def _to_uuid(value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    return UUID(str(value))


def _to_text(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise ValueError(f"expected base64 text, got {value!r}")
    return base64.b64decode(value, validate=True)


_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "smallint": _to_int,
    "integer": _to_int,
    "bigint": _to_int,
    "numeric": _to_decimal,
    "decimal": _to_decimal,
    "real": _to_float,
    "double precision": _to_float,
    "boolean": _to_bool,
    "timestamp": _to_datetime,
    "timestamp with time zone": _to_datetime,
    "timestamp without time zone": _to_datetime,
    "date": _to_date,
    "time": _to_time,
    "time with time zone": _to_time,
    "time without time zone": _to_time,
    "interval": _to_interval,
    "uuid": _to_uuid,
    "character varying": _to_text,
    "character": _to_text,
    "text": _to_text,
    "bytea": _to_bytes,
}


def coerce(data_type: str | None, value: Any) -> Any:
    """
    Convert `value` for a column of `data_type`. `None` and values for unknown
    column types pass through unchanged. Raises `ValueError` when the value
    cannot represent the column type.
    """
    if value is None or data_type is None:
        return value
    convert = _CONVERTERS.get(data_type)
    if convert is None:
        return value
    try:
        return convert(value)
    except (TypeError, ArithmeticError) as exc:
        raise ValueError(f"cannot convert {value!r} to {data_type}: {exc}") from exc


def format_interval(delta: timedelta) -> str:
    total_us = delta // timedelta(microseconds=1)
    sign = "-" if total_us < 0 else ""
    days, rem = divmod(abs(total_us), 86_400_000_000)
    hours, rem = divmod(rem, 3_600_000_000)
    minutes, rem = divmod(rem, 60_000_000)
    seconds, micros = divmod(rem, 1_000_000)
    fraction = f".{micros:06d}".rstrip("0") if micros else ""
    return f"{sign}P{days}DT{hours}H{minutes}M{seconds}{fraction}S"


def _format_bytes(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


RESPONSE_ENCODERS: dict[type, Callable[[Any], Any]] = {
    bytes: _format_bytes,
    bytearray: _format_bytes,
    memoryview: lambda value: _format_bytes(value.tobytes()),
    timedelta: format_interval,
}


def to_json(content: Any) -> Any:
    """
    JSON-ready form of driver rows, using the wire forms above for values JSON
    has no type for.
    """
    return jsonable_encoder(content, custom_encoder=RESPONSE_ENCODERS)

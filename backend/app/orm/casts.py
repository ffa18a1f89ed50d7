"""
Attribute casting rules.

Every cast is idempotent and lets None through untouched so nullable
columns survive a load/save round trip. Unknown tags are a pass-through.
"""

import json
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional

INTEGER = "integer"
FLOAT = "float"
BOOLEAN = "boolean"
JSON = "json"
DATE = "date"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def cast_integer(value: Any) -> Any:
    """Leading-digits parse; anything unparseable becomes NaN."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isnan(value) or math.isinf(value) else int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else math.nan


def cast_float(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(1)) if match else math.nan


def cast_boolean(value: Any) -> bool:
    return bool(value)


def cast_json(value: Any) -> Any:
    # only textual input is decoded; dicts and lists are already values
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def cast_date(value: Any) -> datetime:
    """
    Build a timezone-aware datetime.

    Accepts datetimes, dates, ISO 8601 strings and epoch seconds. Naive
    values are taken to be UTC. Unparseable strings raise ValueError.
    """
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        result = datetime.fromisoformat(raw)
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


CASTERS: Dict[str, Callable[[Any], Any]] = {
    INTEGER: cast_integer,
    "int": cast_integer,
    FLOAT: cast_float,
    "double": cast_float,
    BOOLEAN: cast_boolean,
    JSON: cast_json,
    DATE: cast_date,
}


def cast_value(tag: Optional[str], value: Any) -> Any:
    """Apply the cast named by `tag` to `value`."""
    if tag is None or value is None:
        return value
    caster = CASTERS.get(tag)
    if caster is None:
        return value
    return caster(value)


def to_storage(tag: Optional[str], value: Any) -> Any:
    """Turn a cast value back into something a driver can bind."""
    if tag == JSON and value is not None and not isinstance(value, str):
        return json.dumps(value)
    return value

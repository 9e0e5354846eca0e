"""Helpers for reading loosely-typed stored documents."""

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic_core import PydanticCustomError

from taskapi.exceptions import ValidationError
from taskapi.utils import ensure_utc


def first_present(raw: Mapping[str, Any], names: Iterable[str]) -> Any:
    """Return the value of the first field in ``names`` that is set and not null."""
    for name in names:
        value = raw.get(name)
        if value is not None:
            return value
    return None


def coerce_datetime(value: Any) -> datetime | None:
    """Best-effort conversion of a stored timestamp to an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings, epoch seconds or milliseconds, and
    ``{"seconds": ...}`` / ``{"_seconds": ...}`` mappings left by earlier
    exports. Returns None when nothing usable is found.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            return None
    if isinstance(value, Mapping):
        return coerce_datetime(first_present(value, ("seconds", "_seconds")))
    return None


def apply_rule(rule: Callable[[Any], Any], value: Any, field: str) -> Any:
    """Run a field rule, reporting violations as ``ValidationError``."""
    try:
        return rule(value)
    except PydanticCustomError as exc:
        raise ValidationError(exc.message(), field=field) from exc

"""Parameter parsing helpers: numbers, sort strings, field lists."""

from __future__ import annotations

import math
import re
from typing import Any

_SEPARATORS = re.compile(r"[\s,]+")


def parse_int_or_default(value: Any, default: int) -> int:
    """Coerce a query parameter to ``int``, falling back to ``default``.

    Missing, non-numeric, non-finite and zero values all map to ``default``.
    Negative values are returned as they are.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value or default
    if isinstance(value, float):
        number = value
    else:
        text = str(value).strip()
        try:
            return int(text) or default
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return default
    if not math.isfinite(number):
        return default
    return int(number) or default


def _split(raw: str) -> list[str]:
    return [part for part in _SEPARATORS.split(raw) if part]


def parse_sort(spec: Any) -> list[tuple[str, int]]:
    """Build MongoDB sort tuples.

    Accepts ``"-name createdAt"`` (spaces or commas), ``["-name", "age"]`` or
    ``[(field, "asc"|"desc"|1|-1)]``.
    """
    if not spec:
        return []
    items = _split(spec) if isinstance(spec, str) else list(spec)
    result: list[tuple[str, int]] = []
    for item in items:
        if isinstance(item, tuple):
            field, direction = item[0], item[1]
            descending = str(direction).lower() in ("desc", "-1")
            result.append((field, -1 if descending else 1))
        elif isinstance(item, str):
            if item.startswith("-"):
                if len(item) > 1:
                    result.append((item[1:], -1))
            else:
                result.append((item, 1))
    return result


def parse_fields(raw: Any) -> dict[str, int] | None:
    """Build a projection: ``{field: 1, ...}``; ``-field`` excludes. None means all."""
    if not raw:
        return None
    if isinstance(raw, str):
        fields = _split(raw)
    elif isinstance(raw, (list, tuple)):
        fields = [str(f).strip() for f in raw if str(f).strip()]
    else:
        return None
    projection: dict[str, int] = {}
    for field in fields:
        if field.startswith("-"):
            if len(field) > 1:
                projection[field[1:]] = 0
        else:
            projection[field] = 1
    return projection or None

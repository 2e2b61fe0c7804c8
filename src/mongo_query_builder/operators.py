"""Comparison operator tokens and the structural filter rewrite."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from .exceptions import FilterParseError

OPERATOR_TOKENS: dict[str, str] = {
    "gte": "$gte",
    "gt": "$gt",
    "lte": "$lte",
    "lt": "$lt",
    "ne": "$ne",
    "in": "$in",
    "nin": "$nin",
}

_LIST_OPERATORS = frozenset({"$in", "$nin"})
_MONGO_OPERATORS = frozenset(OPERATOR_TOKENS.values())

# field[op] or field[a][b]
_BRACKET_KEY = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])+)$")
_BRACKET_PART = re.compile(r"\[([^\[\]]*)\]")


def expand_bracket_keys(params: Mapping[str, Any]) -> dict[str, Any]:
    """Expand ``field[op]`` keys into nested mappings.

    ``{"price[gte]": "10", "price[lt]": "50"}`` becomes
    ``{"price": {"gte": "10", "lt": "50"}}``. Keys without brackets are kept
    as they are.
    """
    result: dict[str, Any] = {}
    for key, value in params.items():
        if "[" not in key and "]" not in key:
            _merge(result, key, value, raw_key=key)
            continue
        match = _BRACKET_KEY.match(key)
        if match is None:
            raise FilterParseError(f"Malformed filter key: {key!r}")
        path = [match.group(1), *_BRACKET_PART.findall(match.group(2))]
        if any(not part for part in path):
            raise FilterParseError(f"Empty segment in filter key: {key!r}")
        target = result
        for part in path[:-1]:
            existing = target.setdefault(part, {})
            if not isinstance(existing, dict):
                raise FilterParseError(
                    f"Filter key {key!r} conflicts with a plain value for {part!r}"
                )
            target = existing
        _merge(target, path[-1], value, raw_key=key)
    return result


def _merge(target: dict[str, Any], key: str, value: Any, *, raw_key: str) -> None:
    if isinstance(value, Mapping):
        value = _copy_mapping(value)
    if key not in target:
        target[key] = value
        return
    existing = target[key]
    if isinstance(existing, dict) and isinstance(value, dict):
        for inner_key, inner in value.items():
            _merge(existing, inner_key, inner, raw_key=raw_key)
        return
    raise FilterParseError(f"Filter key {raw_key!r} is given more than once")


def _copy_mapping(value: Mapping[str, Any]) -> dict[str, Any]:
    return {
        k: _copy_mapping(v) if isinstance(v, Mapping) else v for k, v in value.items()
    }


def rewrite_operators(value: Any, *, coerce: bool = True) -> Any:
    """Recursively rewrite operator tokens used as keys to their ``$`` form.

    Only mapping keys are inspected; string values that happen to contain an
    operator word are left alone.
    """
    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for key, inner in value.items():
            if key in OPERATOR_TOKENS:
                mongo_op = OPERATOR_TOKENS[key]
            elif key.startswith("$"):
                if key not in _MONGO_OPERATORS:
                    raise FilterParseError(f"Operator {key!r} is not allowed")
                mongo_op = key
            else:
                out[key] = rewrite_operators(inner, coerce=coerce)
                continue
            out[mongo_op] = _normalise_operand(mongo_op, inner, coerce=coerce)
        return out
    if isinstance(value, list):
        return [rewrite_operators(v, coerce=coerce) for v in value]
    return value


def _normalise_operand(mongo_op: str, val: Any, *, coerce: bool) -> Any:
    if isinstance(val, Mapping):
        return rewrite_operators(val, coerce=coerce)
    if mongo_op in _LIST_OPERATORS:
        if isinstance(val, str):
            items: Iterable[Any] = [v.strip() for v in val.split(",") if v.strip()]
        elif isinstance(val, (list, tuple)):
            items = val
        else:
            items = [val]
        return [parse_scalar(v) if coerce else v for v in items]
    return parse_scalar(val) if coerce else val


def parse_scalar(s: Any) -> Any:
    """Parse a query-string literal to bool, None, int, float or str."""
    if not isinstance(s, str):
        return s
    lowered = s.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return float(s)
    except ValueError:
        pass
    return s


def compile_filter(
    params: Mapping[str, Any],
    *,
    excluded_fields: Iterable[str] = (),
    coerce: bool = True,
) -> dict[str, Any]:
    """Build a MongoDB filter document from request parameters.

    Reserved keys are dropped first; every remaining key becomes an equality
    condition or, when its value is an operator mapping, a comparison.
    """
    query_object = dict(params)
    for field in excluded_fields:
        query_object.pop(field, None)
    if not query_object:
        return {}
    return rewrite_operators(expand_bracket_keys(query_object), coerce=coerce)

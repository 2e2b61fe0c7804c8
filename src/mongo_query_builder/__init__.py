"""Chainable search, filter, sort, pagination and projection for MongoDB queries."""

from __future__ import annotations

from .builder import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    DEFAULT_SORT,
    RESERVED_FIELDS,
    QueryBuilder,
)
from .exceptions import FilterParseError, QueryBuilderError
from .operators import OPERATOR_TOKENS, compile_filter, rewrite_operators
from .pagination import PageMeta
from .params import parse_fields, parse_int_or_default, parse_sort
from .query import ComposableQuery, MongoQuery

__all__ = [
    # Builder
    "QueryBuilder",
    "MongoQuery",
    "ComposableQuery",
    "PageMeta",
    # Defaults
    "DEFAULT_LIMIT",
    "DEFAULT_PAGE",
    "DEFAULT_SORT",
    "RESERVED_FIELDS",
    "OPERATOR_TOKENS",
    # Helpers
    "compile_filter",
    "rewrite_operators",
    "parse_fields",
    "parse_int_or_default",
    "parse_sort",
    # Exceptions
    "QueryBuilderError",
    "FilterParseError",
]

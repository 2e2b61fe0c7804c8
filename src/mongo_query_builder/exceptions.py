"""Query builder exceptions."""

from __future__ import annotations


class QueryBuilderError(Exception):
    """Root exception for the query builder."""


class FilterParseError(QueryBuilderError, ValueError):
    """Raised when the filter part of a parameter mapping is malformed."""

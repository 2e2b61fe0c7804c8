"""QueryBuilder: request parameters -> search, filter, sort, page, projection."""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .operators import compile_filter
from .pagination import PageMeta
from .params import parse_fields, parse_int_or_default

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from .query import ComposableQuery

logger = logging.getLogger("mongo_query_builder.builder")

RESERVED_FIELDS: tuple[str, ...] = ("searchTerm", "sort", "page", "limit", "fields")
DEFAULT_SORT = "-createdAt"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


class QueryBuilder:
    """Apply a flat parameter mapping to a composable query.

    Usage::

        builder = (
            QueryBuilder(MongoQuery(db.users), request.query_params)
            .search(["name", "email"])
            .filter()
            .sort()
            .paginate()
            .fields()
        )
        users = await builder.build().to_list()
        meta = await builder.count_total()

    Every step replaces ``model_query`` with the refined query and returns the
    builder. Steps may be skipped, repeated or reordered; nothing enforces the
    conventional order.
    """

    def __init__(
        self,
        model_query: ComposableQuery,
        query: Mapping[str, Any] | None = None,
        *,
        default_sort: str = DEFAULT_SORT,
        default_page: int = DEFAULT_PAGE,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int | None = None,
        excluded_fields: Iterable[str] = RESERVED_FIELDS,
        escape_search: bool = True,
        coerce_operands: bool = True,
    ) -> None:
        if max_limit is not None and max_limit < 1:
            raise ValueError(f"max_limit must be at least 1, got {max_limit!r}")
        self.model_query = model_query
        self.query: Mapping[str, Any] = MappingProxyType(dict(query or {}))
        self._default_sort = default_sort
        self._default_page = default_page
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._excluded_fields = tuple(excluded_fields)
        self._escape_search = escape_search
        self._coerce_operands = coerce_operands

    def search(self, searchable_fields: Sequence[str]) -> QueryBuilder:
        """Match documents where any of ``searchable_fields`` contains ``searchTerm``."""
        search_term = self.query.get("searchTerm")
        if not search_term:
            return self
        if not searchable_fields:
            logger.debug("searchTerm given but no searchable fields; search skipped")
            return self
        pattern = str(search_term)
        if self._escape_search:
            pattern = re.escape(pattern)
        self.model_query = self.model_query.find(
            {
                "$or": [
                    {field: {"$regex": pattern, "$options": "i"}}
                    for field in searchable_fields
                ]
            }
        )
        return self

    def filter(self) -> QueryBuilder:
        """Turn every non-reserved parameter into a filter condition.

        Raises:
            FilterParseError: if a bracket key or operator is malformed.
        """
        conditions = compile_filter(
            self.query,
            excluded_fields=self._excluded_fields,
            coerce=self._coerce_operands,
        )
        logger.debug("filter conditions: %s", conditions)
        self.model_query = self.model_query.find(conditions)
        return self

    def sort(self) -> QueryBuilder:
        sort = self.query.get("sort") or self._default_sort
        self.model_query = self.model_query.sort(sort)
        return self

    def paginate(self) -> QueryBuilder:
        page, limit = self._page_and_limit()
        skip = (page - 1) * limit
        self.model_query = self.model_query.skip(skip).limit(limit)
        return self

    def fields(self) -> QueryBuilder:
        self.model_query = self.model_query.select(
            parse_fields(self.query.get("fields"))
        )
        return self

    def build(self) -> ComposableQuery:
        """Return the composed query for the caller to execute."""
        return self.model_query

    async def count_total(self) -> PageMeta:
        """Count documents matching the current filter and summarise paging.

        Page and limit come from the parameter mapping, not from the query.
        Driver errors propagate unchanged.
        """
        total_queries = self.model_query.get_filter()
        total = await self.model_query.count_documents(total_queries)
        page, limit = self._page_and_limit()
        return PageMeta.from_total(page=page, limit=limit, total=total)

    def _page_and_limit(self) -> tuple[int, int]:
        limit = parse_int_or_default(self.query.get("limit"), self._default_limit)
        if self._max_limit is not None:
            limit = min(limit, self._max_limit)
        page = parse_int_or_default(self.query.get("page"), self._default_page)
        return page, limit

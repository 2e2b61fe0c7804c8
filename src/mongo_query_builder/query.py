"""MongoQuery: immutable query descriptor bound to a Motor collection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .params import parse_fields, parse_sort

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

logger = logging.getLogger("mongo_query_builder.query")


@runtime_checkable
class ComposableQuery(Protocol):
    """Capabilities QueryBuilder needs from the query it wraps.

    Every refining method returns the refined query; implementations may
    mutate in place and return ``self`` or return a new object.
    """

    def find(self, conditions: Mapping[str, Any]) -> ComposableQuery: ...

    def sort(self, spec: Any) -> ComposableQuery: ...

    def skip(self, n: int) -> ComposableQuery: ...

    def limit(self, n: int) -> ComposableQuery: ...

    def select(self, fields: Any) -> ComposableQuery: ...

    def get_filter(self) -> dict[str, Any]: ...

    async def count_documents(self, conditions: Mapping[str, Any]) -> int: ...


class MongoQuery:
    """Pending read against a collection.

    The collection is anything exposing Motor's ``find()`` and
    ``count_documents()`` (Motor, mongomock-motor). Nothing runs until
    ``to_list()``, iteration or ``count_documents()``.
    """

    __slots__ = (
        "_collection",
        "_conditions",
        "_sort",
        "_skip",
        "_limit",
        "_projection",
    )

    def __init__(
        self,
        collection: Any,
        *,
        conditions: tuple[dict[str, Any], ...] = (),
        sort: tuple[tuple[str, int], ...] = (),
        skip: int | None = None,
        limit: int | None = None,
        projection: dict[str, int] | None = None,
    ) -> None:
        self._collection = collection
        self._conditions = conditions
        self._sort = sort
        self._skip = skip
        self._limit = limit
        self._projection = projection

    def _replace(self, **changes: Any) -> MongoQuery:
        state: dict[str, Any] = {
            "conditions": self._conditions,
            "sort": self._sort,
            "skip": self._skip,
            "limit": self._limit,
            "projection": self._projection,
        }
        state.update(changes)
        return MongoQuery(self._collection, **state)

    # -- refinement ---------------------------------------------------------

    def find(self, conditions: Mapping[str, Any]) -> MongoQuery:
        """Add a condition document; all conditions must match."""
        if not conditions:
            return self
        return self._replace(conditions=(*self._conditions, dict(conditions)))

    def sort(self, spec: Any) -> MongoQuery:
        return self._replace(sort=tuple(parse_sort(spec)))

    def skip(self, n: int) -> MongoQuery:
        return self._replace(skip=n)

    def limit(self, n: int) -> MongoQuery:
        return self._replace(limit=n)

    def select(self, fields: Any) -> MongoQuery:
        """Set the projection from a field string, list or projection dict."""
        if isinstance(fields, dict):
            projection: dict[str, int] | None = dict(fields) or None
        else:
            projection = parse_fields(fields)
        return self._replace(projection=projection)

    # -- inspection ---------------------------------------------------------

    @property
    def collection(self) -> Any:
        return self._collection

    def get_filter(self) -> dict[str, Any]:
        if not self._conditions:
            return {}
        if len(self._conditions) == 1:
            return dict(self._conditions[0])
        return {"$and": [dict(c) for c in self._conditions]}

    def get_sort(self) -> list[tuple[str, int]]:
        return list(self._sort)

    def get_skip(self) -> int | None:
        return self._skip

    def get_limit(self) -> int | None:
        return self._limit

    def get_projection(self) -> dict[str, int] | None:
        return dict(self._projection) if self._projection else None

    def find_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``collection.find()``."""
        kwargs: dict[str, Any] = {"filter": self.get_filter()}
        if self._projection:
            kwargs["projection"] = dict(self._projection)
        if self._sort:
            kwargs["sort"] = list(self._sort)
        if self._skip is not None:
            kwargs["skip"] = self._skip
        if self._limit is not None:
            kwargs["limit"] = self._limit
        return kwargs

    # -- execution ----------------------------------------------------------

    async def to_list(self) -> list[dict[str, Any]]:
        """Execute the query and return all matching documents."""
        return [doc async for doc in self]

    async def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        kwargs = self.find_kwargs()
        logger.debug("find on %s: %s", _collection_name(self._collection), kwargs)
        cursor = self._collection.find(**kwargs)
        async for doc in cursor:
            yield doc

    async def count_documents(self, conditions: Mapping[str, Any]) -> int:
        logger.debug(
            "count_documents on %s: %s",
            _collection_name(self._collection),
            conditions,
        )
        return int(await self._collection.count_documents(dict(conditions)))

    def __repr__(self) -> str:
        return (
            f"MongoQuery(collection={_collection_name(self._collection)!r}, "
            f"filter={self.get_filter()!r}, sort={self.get_sort()!r}, "
            f"skip={self._skip!r}, limit={self._limit!r}, "
            f"projection={self._projection!r})"
        )


def _collection_name(collection: Any) -> str:
    return str(getattr(collection, "name", type(collection).__name__))

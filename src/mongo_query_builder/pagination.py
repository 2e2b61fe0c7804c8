"""PageMeta: pagination summary returned by ``QueryBuilder.count_total``."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field


class PageMeta(BaseModel):
    """Page, limit, matching total and number of pages.

    ``model_dump(by_alias=True)`` yields ``{"page", "limit", "total",
    "totalPage"}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_page: int = Field(alias="totalPage")

    @classmethod
    def from_total(cls, *, page: int, limit: int, total: int) -> PageMeta:
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_page=math.ceil(total / limit),
        )

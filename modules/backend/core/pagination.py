"""
Pagination.

List endpoints take `?page=&limit=` and answer with a PaginatedResponse;
repositories work in limit/offset. Default and maximum page sizes come from
application.yaml `pagination`.
"""

import math
from dataclasses import dataclass
from typing import Any

from fastapi import Query
from pydantic import BaseModel

from modules.backend.core.config import get_app_config
from modules.backend.schemas.base import PaginatedResponse, PaginationInfo, ResponseMetadata

# Largest limit the query string accepts; application.yaml may lower it
MAX_PAGE_SIZE = 100


@dataclass
class PaginationParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_pagination_params(
    page: int = Query(default=1, ge=1, description="Page number, starting at 1"),
    limit: int | None = Query(default=None, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
) -> PaginationParams:
    """
    FastAPI dependency. A missing limit uses the configured default; a
    limit above the configured maximum is lowered to it.
    """
    config = get_app_config().application.pagination
    return PaginationParams(page=page, limit=min(limit or config.default_limit, config.max_limit))


def create_paginated_response(
    items: list[Any],
    item_schema: type[BaseModel],
    total: int,
    limit: int = 20,
    offset: int = 0,
    request_id: str | None = None,
) -> dict[str, Any]:
    """
    Serialize one page of ORM rows (or dicts) through `item_schema`.

    Usage:
        surveys, total = await service.list_surveys(..., limit=pagination.limit, offset=pagination.offset)
        return create_paginated_response(surveys, SiteSurveyResponse, total, pagination.limit, pagination.offset)
    """
    data = [item_schema.model_validate(item).model_dump(mode="json", by_alias=True) for item in items]
    pagination = PaginationInfo(
        total=total,
        limit=limit,
        page=offset // limit + 1 if limit else 1,
        pages=math.ceil(total / limit) if limit else 0,
        has_more=offset + len(items) < total,
    )
    return PaginatedResponse(
        data=data,
        pagination=pagination,
        metadata=ResponseMetadata(request_id=request_id),
    ).model_dump(mode="json")

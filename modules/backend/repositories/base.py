"""
Base Repository.

Data access shared by every table keyed on a string `id`. Repositories
flush but never commit; the request's session dependency commits.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import NotFoundError
from modules.backend.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)

LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", "\\%").replace("_", "\\_")


def contains(column: Any, text: str) -> ColumnElement[bool]:
    """Case-insensitive substring match."""
    return column.ilike(f"%{escape_like(text)}%", escape=LIKE_ESCAPE)


class BaseRepository(Generic[ModelType]):
    """
    CRUD for one model.

        class CustomerRepository(BaseRepository[Customer]):
            model = Customer
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @property
    def label(self) -> str:
        """Name used in not-found messages, e.g. "SiteSurvey not found"."""
        return self.model.__name__

    async def get_by_id_or_none(self, id: str) -> ModelType | None:
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_by_id(self, id: str) -> ModelType:
        """
        Raises:
            NotFoundError: No row with this id
        """
        instance = await self.get_by_id_or_none(id)
        if instance is None:
            raise NotFoundError(f"{self.label} not found")
        return instance

    async def exists(self, id: str) -> bool:
        result = await self.session.execute(select(self.model.id).where(self.model.id == id))
        return result.scalar_one_or_none() is not None

    async def create(self, **values: Any) -> ModelType:
        instance = self.model(**values)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, id: str, **values: Any) -> ModelType:
        """
        Assign the given columns; keys the model does not have are skipped.

        Raises:
            NotFoundError: No row with this id
        """
        instance = await self.get_by_id(id)
        for key, value in values.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: str) -> None:
        """
        Raises:
            NotFoundError: No row with this id
        """
        await self.session.delete(await self.get_by_id(id))
        await self.session.flush()

    async def _fetch_page(self, query: Select, limit: int, offset: int) -> tuple[list[ModelType], int]:
        """
        One page of `query` plus the number of rows matching its filters.

        The count drops the ORDER BY so list endpoints build their WHERE
        clause once and pass the ordered query here.
        """
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total = (await self.session.execute(count_query)).scalar_one()
        result = await self.session.execute(query.limit(limit).offset(offset))
        return list(result.scalars().unique().all()), total

"""
File Repository.
"""

from sqlalchemy import select

from modules.backend.models.file import File
from modules.backend.repositories.base import LIKE_ESCAPE, BaseRepository, escape_like


class FileRepository(BaseRepository[File]):
    """Repository for File model."""

    model = File

    async def list_for_entity(
        self,
        entity_id: str,
        entity_type: str | None = None,
    ) -> list[File]:
        """Files attached to an entity, newest first."""
        query = select(File).where(File.entity_id == entity_id)
        if entity_type:
            query = query.where(File.type == entity_type)
        result = await self.session.execute(query.order_by(File.created_at.desc()))
        return list(result.scalars().all())

    async def list_by_name_prefix(
        self,
        entity_id: str,
        entity_type: str,
        prefix: str,
    ) -> list[File]:
        """
        Files of an entity whose name starts with `prefix`.

        Used to find earlier versions of a generated document.
        """
        result = await self.session.execute(
            select(File)
            .where(File.entity_id == entity_id)
            .where(File.type == entity_type)
            .where(File.name.like(f"{escape_like(prefix)}%", escape=LIKE_ESCAPE))
            .order_by(File.created_at.desc())
        )
        return list(result.scalars().all())

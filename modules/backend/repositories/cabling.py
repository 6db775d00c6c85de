"""
Cabling Repository.

Upsert and replace helpers for the normalized cabling hierarchy. The
cabling models carry no ORM relationships; child rows are managed with
explicit statements so nothing is lazy-loaded inside the async session.
"""

from typing import Any, TypeVar

from sqlalchemy import delete, select

from modules.backend.models.base import Base
from modules.backend.models.cabling import (
    Building,
    CablingSurvey,
    CentralRack,
    Device,
    Floor,
    FloorRack,
    ImageAsset,
    Room,
)
from modules.backend.repositories.base import BaseRepository

RowT = TypeVar("RowT", bound=Base)

IMAGE_OWNER_COLUMNS = {
    "building": ImageAsset.building_id,
    "central_rack": ImageAsset.central_rack_id,
    "floor": ImageAsset.floor_id,
    "floor_rack": ImageAsset.floor_rack_id,
    "room": ImageAsset.room_id,
}

DEVICE_RACK_COLUMNS = {
    "central_rack": Device.central_rack_id,
    "floor_rack": Device.floor_rack_id,
}


class CablingRepository(BaseRepository[CablingSurvey]):
    """Repository for the cabling survey and its building tree."""

    model = CablingSurvey

    async def get_by_site_survey(self, site_survey_id: str) -> CablingSurvey | None:
        result = await self.session.execute(
            select(CablingSurvey).where(CablingSurvey.site_survey_id == site_survey_id)
        )
        return result.scalar_one_or_none()

    async def _upsert(
        self,
        model: type[RowT],
        match: dict[str, Any],
        values: dict[str, Any],
    ) -> RowT:
        """
        Update the row identified by `match`, or insert it.

        Args:
            model: Model class
            match: Column values that identify the row (natural key)
            values: Columns to write on both insert and update
        """
        query = select(model)
        for column, value in match.items():
            query = query.where(getattr(model, column) == value)
        instance = (await self.session.execute(query)).scalar_one_or_none()

        if instance is None:
            instance = model(**match, **values)
            self.session.add(instance)
        else:
            for key, value in values.items():
                setattr(instance, key, value)

        await self.session.flush()
        return instance

    async def upsert_survey(self, site_survey_id: str) -> CablingSurvey:
        return await self._upsert(CablingSurvey, {"site_survey_id": site_survey_id}, {})

    async def upsert_building(
        self,
        cabling_survey_id: str,
        site_survey_id: str,
        name: str,
        **values: Any,
    ) -> Building:
        return await self._upsert(
            Building,
            {"site_survey_id": site_survey_id, "name": name},
            {"cabling_survey_id": cabling_survey_id, **values},
        )

    async def upsert_central_rack(self, building_id: str, **values: Any) -> CentralRack:
        return await self._upsert(CentralRack, {"building_id": building_id}, values)

    async def upsert_floor(self, building_id: str, name: str, **values: Any) -> Floor:
        return await self._upsert(Floor, {"building_id": building_id, "name": name}, values)

    async def upsert_room(self, floor_id: str, name: str, **values: Any) -> Room:
        return await self._upsert(Room, {"floor_id": floor_id, "name": name}, values)

    async def replace_images(self, owner: str, owner_id: str, urls: list[str]) -> None:
        """
        Delete the images of one tree node and recreate them as photos.

        Args:
            owner: Node kind, a key of IMAGE_OWNER_COLUMNS
            owner_id: Node row id
            urls: Image URLs in display order
        """
        column = IMAGE_OWNER_COLUMNS[owner]
        await self.session.execute(delete(ImageAsset).where(column == owner_id))
        for url in urls:
            self.session.add(ImageAsset(url=url, kind="PHOTO", **{column.key: owner_id}))
        await self.session.flush()

    async def replace_devices(
        self,
        rack: str,
        rack_id: str,
        devices: list[dict[str, Any]],
    ) -> None:
        """Delete the devices of a rack and insert the given ones."""
        column = DEVICE_RACK_COLUMNS[rack]
        await self.session.execute(delete(Device).where(column == rack_id))
        for values in devices:
            self.session.add(Device(**{column.key: rack_id}, **values))
        await self.session.flush()

    async def delete_floor_racks(self, floor_id: str) -> None:
        """Delete every rack on a floor together with its images and devices."""
        rack_ids = select(FloorRack.id).where(FloorRack.floor_id == floor_id)
        await self.session.execute(
            delete(ImageAsset).where(ImageAsset.floor_rack_id.in_(rack_ids))
        )
        await self.session.execute(delete(Device).where(Device.floor_rack_id.in_(rack_ids)))
        await self.session.execute(delete(FloorRack).where(FloorRack.floor_id == floor_id))
        await self.session.flush()

    async def create_floor_rack(self, floor_id: str, **values: Any) -> FloorRack:
        rack = FloorRack(floor_id=floor_id, **values)
        self.session.add(rack)
        await self.session.flush()
        return rack

    async def list_buildings(self, site_survey_id: str) -> list[Building]:
        result = await self.session.execute(
            select(Building)
            .where(Building.site_survey_id == site_survey_id)
            .order_by(Building.name.asc())
        )
        return list(result.scalars().all())

    async def list_images(self, owner: str, owner_id: str) -> list[ImageAsset]:
        column = IMAGE_OWNER_COLUMNS[owner]
        result = await self.session.execute(
            select(ImageAsset).where(column == owner_id).order_by(ImageAsset.created_at)
        )
        return list(result.scalars().all())

    async def list_devices(self, rack: str, rack_id: str) -> list[Device]:
        column = DEVICE_RACK_COLUMNS[rack]
        result = await self.session.execute(select(Device).where(column == rack_id))
        return list(result.scalars().all())

    async def list_floor_racks(self, floor_id: str) -> list[FloorRack]:
        result = await self.session.execute(
            select(FloorRack).where(FloorRack.floor_id == floor_id)
        )
        return list(result.scalars().all())

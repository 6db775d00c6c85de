"""
Cabling Survey Service.

Maps the submitted cabling tree onto normalized rows and keeps the full
tree as a JSON snapshot on the cabling survey.

Save rules, per node kind:
    building      upsert by (site survey, name)
    central rack  upsert by building
    floor         upsert by (building, name)
    floor rack    all racks of a floor recreated when the payload lists racks
    room          upsert by (floor, name); room devices stay in the snapshot

Images and rack devices are replaced only when the payload carries a
non-empty list for that node.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import NotFoundError
from modules.backend.core.utils import dumps_json, loads_json
from modules.backend.models.cabling import CablingSurvey
from modules.backend.repositories.cabling import CablingRepository
from modules.backend.repositories.site_survey import SiteSurveyRepository
from modules.backend.schemas.cabling import (
    BuildingData,
    CablingSurveyPayload,
    CablingSurveyResponse,
    DeviceData,
    FloorData,
    RackData,
)
from modules.backend.services.base import BaseService


def device_columns(device: DeviceData) -> dict[str, Any]:
    """Device row values. A phone number replaces the notes."""
    return {
        "type": device.type,
        "vendor": device.brand,
        "model": device.model,
        "label": device.name,
        "mgmt_ip": device.ip_address,
        "notes": f"Phone: {device.phone_number}" if device.phone_number else device.notes,
    }


def rack_columns(rack: RackData) -> dict[str, Any]:
    return {
        "name": rack.name,
        "code": rack.code,
        "units": rack.units,
        "location": rack.location,
        "notes": rack.notes,
        "cable_terminations": [item.model_dump(by_alias=True) for item in rack.cable_terminations],
        "fiber_terminations": [item.model_dump(by_alias=True) for item in rack.fiber_terminations],
    }


class CablingService(BaseService):
    """Service for saving and loading the cabling hierarchy of a site survey."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = CablingRepository(session)
        self.surveys = SiteSurveyRepository(session)

    async def save(self, site_survey_id: str, payload: CablingSurveyPayload) -> CablingSurveyResponse:
        """
        Persist the cabling tree of a site survey.

        All writes share the request session and are committed together.

        Raises:
            NotFoundError: If the site survey does not exist
        """
        if not await self.surveys.exists(site_survey_id):
            raise NotFoundError("Site survey not found")

        self._log_operation(
            "Saving cabling survey",
            site_survey_id=site_survey_id,
            buildings=len(payload.buildings),
            connections=len(payload.building_connections),
        )
        cabling = await self._execute_db_operation(
            "save_cabling_survey",
            self._save_tree(site_survey_id, payload),
        )
        return self._response(cabling)

    async def _save_tree(self, site_survey_id: str, payload: CablingSurveyPayload) -> CablingSurvey:
        cabling = await self.repo.upsert_survey(site_survey_id)

        for building in payload.buildings:
            await self._save_building(cabling.id, site_survey_id, building)

        buildings_json = [item.model_dump(by_alias=True, mode="json") for item in payload.buildings]
        connections_json = [
            item.model_dump(by_alias=True, mode="json") for item in payload.building_connections
        ]
        cabling.general_notes = dumps_json(buildings_json)
        cabling.building_connections = dumps_json(connections_json)
        await self.session.flush()
        return cabling

    async def _save_building(
        self,
        cabling_survey_id: str,
        site_survey_id: str,
        data: BuildingData,
    ) -> None:
        building = await self.repo.upsert_building(
            cabling_survey_id,
            site_survey_id,
            data.name,
            code=data.code,
            address=data.address,
            notes=data.notes,
        )
        if data.images:
            await self.repo.replace_images("building", building.id, data.images)

        if data.central_rack is not None:
            rack = await self.repo.upsert_central_rack(building.id, **rack_columns(data.central_rack))
            if data.central_rack.images:
                await self.repo.replace_images("central_rack", rack.id, data.central_rack.images)
            if data.central_rack.devices:
                await self.repo.replace_devices(
                    "central_rack",
                    rack.id,
                    [device_columns(device) for device in data.central_rack.devices],
                )

        for floor in data.floors:
            await self._save_floor(building.id, floor)

    async def _save_floor(self, building_id: str, data: FloorData) -> None:
        floor = await self.repo.upsert_floor(
            building_id,
            data.name,
            level=data.level,
            blueprint_url=data.blueprint_url,
            similar_to_floor_id=data.similar_to_floor_id,
            notes=data.notes,
        )
        if data.images:
            await self.repo.replace_images("floor", floor.id, data.images)

        if data.floor_racks:
            await self.repo.delete_floor_racks(floor.id)
            for rack_data in data.floor_racks:
                rack = await self.repo.create_floor_rack(floor.id, **rack_columns(rack_data))
                if rack_data.images:
                    await self.repo.replace_images("floor_rack", rack.id, rack_data.images)
                if rack_data.devices:
                    await self.repo.replace_devices(
                        "floor_rack",
                        rack.id,
                        [device_columns(device) for device in rack_data.devices],
                    )

        for room_data in data.rooms:
            room = await self.repo.upsert_room(
                floor.id,
                room_data.name,
                number=room_data.number,
                type=room_data.type,
                connection_type=room_data.connection_type,
                floor_plan_url=room_data.floor_plan_url,
                notes=room_data.notes,
            )
            if room_data.images:
                await self.repo.replace_images("room", room.id, room_data.images)

    async def load(self, site_survey_id: str) -> CablingSurveyResponse:
        """
        Return the stored cabling tree of a site survey.

        Raises:
            NotFoundError: If no cabling survey was saved yet
        """
        cabling = await self.repo.get_by_site_survey(site_survey_id)
        if cabling is None:
            raise NotFoundError("Cabling survey not found")
        return self._response(cabling)

    def _response(self, cabling: CablingSurvey) -> CablingSurveyResponse:
        buildings = loads_json(cabling.general_notes, default=[])
        connections = loads_json(cabling.building_connections, default=[])
        if not isinstance(buildings, list):
            self._logger.warning(
                "Cabling snapshot is not a list",
                extra={"cabling_survey_id": cabling.id},
            )
            buildings = []
        return CablingSurveyResponse(
            cabling_survey_id=cabling.id,
            site_survey_id=cabling.site_survey_id,
            buildings=buildings,
            building_connections=connections if isinstance(connections, list) else [],
        )

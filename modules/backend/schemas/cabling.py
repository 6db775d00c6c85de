"""
Cabling Survey Schemas.

The cabling tree is exchanged in the client's camelCase shape. Models
accept both camelCase and snake_case input and serialize by alias.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CablingModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CableTermination(CablingModel):
    type: str
    count: int = Field(default=0, ge=0)


class FiberTermination(CablingModel):
    type: str
    total_strands: int = Field(default=0, ge=0)
    terminated_strands: int = Field(default=0, ge=0)


class DeviceData(CablingModel):
    type: str | None = None
    name: str | None = None
    brand: str | None = None
    model: str | None = None
    ip_address: str | None = None
    phone_number: str | None = None
    notes: str | None = None


class RackData(CablingModel):
    """Central rack of a building or a rack on a floor."""

    name: str | None = None
    code: str | None = None
    units: int | None = None
    location: str | None = None
    notes: str | None = None
    images: list[str] = Field(default_factory=list)
    cable_terminations: list[CableTermination] = Field(default_factory=list)
    fiber_terminations: list[FiberTermination] = Field(default_factory=list)
    devices: list[DeviceData] = Field(default_factory=list)


class RoomData(CablingModel):
    name: str = Field(..., min_length=1)
    number: str | None = None
    type: str | None = None
    connection_type: str | None = None
    floor_plan_url: str | None = None
    outlets: int = Field(default=0, ge=0)
    notes: str | None = None
    images: list[str] = Field(default_factory=list)
    devices: list[DeviceData] = Field(default_factory=list)


class FloorData(CablingModel):
    name: str = Field(..., min_length=1)
    level: int | None = None
    blueprint_url: str | None = None
    similar_to_floor_id: str | None = None
    notes: str | None = None
    images: list[str] = Field(default_factory=list)
    floor_racks: list[RackData] = Field(default_factory=list)
    rooms: list[RoomData] = Field(default_factory=list)


class BuildingData(CablingModel):
    name: str = Field(..., min_length=1)
    code: str | None = None
    address: str | None = None
    notes: str | None = None
    images: list[str] = Field(default_factory=list)
    central_rack: RackData | None = None
    floors: list[FloorData] = Field(default_factory=list)


class BuildingConnection(CablingModel):
    """Link between two buildings, referenced by their index in the list."""

    id: str | None = None
    from_building: int = Field(..., ge=0)
    to_building: int = Field(..., ge=0)
    connection_type: str | None = None
    description: str | None = None
    distance: float | None = None
    notes: str | None = None


class CablingSurveyPayload(CablingModel):
    """Complete cabling tree submitted by the client."""

    buildings: list[BuildingData] = Field(default_factory=list)
    building_connections: list[BuildingConnection] = Field(default_factory=list)


class CablingSurveyResponse(CablingModel):
    cabling_survey_id: str
    site_survey_id: str
    buildings: list[BuildingData] = Field(default_factory=list)
    building_connections: list[BuildingConnection] = Field(default_factory=list)

"""
Cabling Hierarchy Models.

Normalized rows for the physical network infrastructure of a site:

    CablingSurvey (one per site survey)
      └─ Building
           ├─ CentralRack (one per building) ─ Device, ImageAsset
           └─ Floor
                ├─ FloorRack ─ Device, ImageAsset
                └─ Room ─ ImageAsset

Children reference their parent with ON DELETE CASCADE. The complete tree
as submitted by the client is also kept as JSON on the CablingSurvey so it
can be returned verbatim.
"""

from typing import Any

from sqlalchemy import JSON, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from modules.backend.models.base import Base, TimestampMixin, UUIDMixin


class CablingSurvey(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "cabling_surveys"

    site_survey_id: Mapped[str] = mapped_column(
        ForeignKey("site_surveys.id", ondelete="CASCADE"), nullable=False, unique=True,
    )
    # JSON text snapshots of the submitted tree
    general_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    building_connections: Mapped[str | None] = mapped_column(Text, nullable=True)


class Building(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "buildings"
    __table_args__ = (UniqueConstraint("site_survey_id", "name"),)

    cabling_survey_id: Mapped[str] = mapped_column(
        ForeignKey("cabling_surveys.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    site_survey_id: Mapped[str] = mapped_column(
        ForeignKey("site_surveys.id", ondelete="CASCADE"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class CentralRack(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "central_racks"

    building_id: Mapped[str] = mapped_column(
        ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, unique=True,
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    units: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    cable_terminations: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    fiber_terminations: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)


class Floor(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "floors"
    __table_args__ = (UniqueConstraint("building_id", "name"),)

    building_id: Mapped[str] = mapped_column(
        ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    blueprint_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    similar_to_floor_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class FloorRack(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "floor_racks"

    floor_id: Mapped[str] = mapped_column(
        ForeignKey("floors.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    units: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    cable_terminations: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    fiber_terminations: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)


class Room(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "rooms"
    __table_args__ = (UniqueConstraint("floor_id", "name"),)

    floor_id: Mapped[str] = mapped_column(
        ForeignKey("floors.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    connection_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    floor_plan_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class Device(UUIDMixin, TimestampMixin, Base):
    """Active equipment mounted in a rack. Exactly one rack FK is set."""

    __tablename__ = "devices"

    central_rack_id: Mapped[str | None] = mapped_column(
        ForeignKey("central_racks.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    floor_rack_id: Mapped[str | None] = mapped_column(
        ForeignKey("floor_racks.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    vendor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mgmt_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class ImageAsset(UUIDMixin, TimestampMixin, Base):
    """Photo or drawing attached to one node of the cabling tree."""

    __tablename__ = "image_assets"

    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False, default="PHOTO")
    caption: Mapped[str | None] = mapped_column(String(512), nullable=True)

    building_id: Mapped[str | None] = mapped_column(
        ForeignKey("buildings.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    central_rack_id: Mapped[str | None] = mapped_column(
        ForeignKey("central_racks.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    floor_id: Mapped[str | None] = mapped_column(
        ForeignKey("floors.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    floor_rack_id: Mapped[str | None] = mapped_column(
        ForeignKey("floor_racks.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    room_id: Mapped[str | None] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"), nullable=True, index=True,
    )

"""
File Model.

Metadata for objects stored on the CDN. A file is attached to any entity
by (`entity_id`, `type`); there is no foreign key because the owner may
be a customer, lead, site survey, brand and so on.
"""

from enum import Enum

from sqlalchemy import BigInteger, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from modules.backend.models.base import Base, TimestampMixin, UUIDMixin


class FileEntityType(str, Enum):
    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"
    PROJECT = "PROJECT"
    TASK = "TASK"
    USER = "USER"
    SITESURVEY = "SITESURVEY"
    LEAD = "LEAD"
    BRAND = "BRAND"


class File(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "files"
    __table_args__ = (Index("ix_files_entity", "entity_id", "type"),)

    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(512), nullable=False)
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)
    filetype: Mapped[str | None] = mapped_column(String(255), nullable=True)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    def __repr__(self) -> str:
        return f"<File(id={self.id}, name={self.name!r}, type={self.type})>"

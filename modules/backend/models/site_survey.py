"""
Site Survey Model.

A customer-site data collection visit (cabling, VoIP, WiFi, ...). The
equipment tree used for the bill of materials is kept as JSON in
`infrastructure_data`; the normalized cabling hierarchy lives in
modules.backend.models.cabling.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from modules.backend.models.base import Base, TimestampMixin, UUIDMixin
from modules.backend.models.customer import Contact, Customer
from modules.backend.models.user import User


class SiteSurveyType(str, Enum):
    COMPREHENSIVE = "COMPREHENSIVE"
    VOIP = "VOIP"
    CABLING = "CABLING"
    WIFI = "WIFI"
    DIGITAL_SIGNAGE = "DIGITAL_SIGNAGE"
    HOTEL_TV = "HOTEL_TV"
    NETWORK = "NETWORK"
    CCTV = "CCTV"
    IOT = "IOT"


class SiteSurveyStage(str, Enum):
    INFRASTRUCTURE_PLANNING = "INFRASTRUCTURE_PLANNING"
    REQUIREMENTS_AND_PRODUCTS = "REQUIREMENTS_AND_PRODUCTS"
    PRICING_COMPLETED = "PRICING_COMPLETED"
    DOCUMENTS_READY = "DOCUMENTS_READY"


DEFAULT_SITE_SURVEY_STATUS = "Scheduled"


class SiteSurvey(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "site_surveys"

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(
        String(32), nullable=False, default=SiteSurveyType.COMPREHENSIVE.value,
    )
    status: Mapped[str] = mapped_column(
        String(64), nullable=False, default=DEFAULT_SITE_SURVEY_STATUS,
    )
    stage: Mapped[str | None] = mapped_column(String(64), nullable=True)

    customer_id: Mapped[str] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    contact_id: Mapped[str | None] = mapped_column(
        ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True,
    )
    lead_id: Mapped[str | None] = mapped_column(
        ForeignKey("leads.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    assign_from_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    assign_to_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )

    arranged_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    infrastructure_data: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    customer: Mapped[Customer] = relationship(lazy="selectin")
    contact: Mapped[Contact | None] = relationship(lazy="selectin")
    assign_from: Mapped[User | None] = relationship(
        foreign_keys=[assign_from_id], lazy="selectin",
    )
    assign_to: Mapped[User | None] = relationship(
        foreign_keys=[assign_to_id], lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<SiteSurvey(id={self.id}, title={self.title!r}, type={self.type})>"

"""
Lead Models.

Sales leads moving through the lead → opportunity → RFP → quote pipeline,
plus the audit trail of stage changes.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from modules.backend.models.base import Base, TimestampMixin, UUIDMixin
from modules.backend.models.customer import Contact, Customer
from modules.backend.models.user import User


class LeadStage(str, Enum):
    LEAD_NEW = "LEAD_NEW"
    LEAD_WORKING = "LEAD_WORKING"
    LEAD_NURTURING = "LEAD_NURTURING"
    LEAD_QUALIFIED = "LEAD_QUALIFIED"
    LEAD_DISQUALIFIED = "LEAD_DISQUALIFIED"
    OPP_PROSPECTING = "OPP_PROSPECTING"
    OPP_DISCOVERY = "OPP_DISCOVERY"
    OPP_QUALIFIED = "OPP_QUALIFIED"
    OPP_PROPOSAL = "OPP_PROPOSAL"
    OPP_NEGOTIATION = "OPP_NEGOTIATION"
    OPP_CLOSED_WON = "OPP_CLOSED_WON"
    OPP_CLOSED_LOST = "OPP_CLOSED_LOST"
    RFP_PENDING = "RFP_PENDING"
    RFP_SUBMITTED = "RFP_SUBMITTED"
    QUOTE_DRAFT = "QUOTE_DRAFT"
    QUOTE_SENT = "QUOTE_SENT"
    QUOTE_ACCEPTED = "QUOTE_ACCEPTED"
    QUOTE_REJECTED = "QUOTE_REJECTED"


class LeadStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    ARCHIVED = "ARCHIVED"
    FROZEN = "FROZEN"


class LeadPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Lead(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "leads"

    lead_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    stage: Mapped[str] = mapped_column(String(32), nullable=False, default=LeadStage.LEAD_NEW.value)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=LeadStatus.ACTIVE.value)
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default=LeadPriority.MEDIUM.value,
    )
    probability: Mapped[int | None] = mapped_column(Integer, nullable=True)
    estimated_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    expected_close_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    requested_site_survey: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    customer_id: Mapped[str | None] = mapped_column(
        ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    contact_id: Mapped[str | None] = mapped_column(
        ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True,
    )
    owner_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    assignee_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )

    customer: Mapped[Customer | None] = relationship(lazy="selectin")
    contact: Mapped[Contact | None] = relationship(lazy="selectin")
    owner: Mapped[User | None] = relationship(foreign_keys=[owner_id], lazy="selectin")
    assignee: Mapped[User | None] = relationship(foreign_keys=[assignee_id], lazy="selectin")
    status_changes: Mapped[list["LeadStatusChange"]] = relationship(
        back_populates="lead",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="LeadStatusChange.created_at",
    )

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, number={self.lead_number!r}, stage={self.stage})>"


class LeadStatusChange(UUIDMixin, TimestampMixin, Base):
    """One stage transition of a lead. `from_stage` is null for the creation entry."""

    __tablename__ = "lead_status_changes"

    lead_id: Mapped[str] = mapped_column(
        ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    from_stage: Mapped[str | None] = mapped_column(String(32), nullable=True)
    to_stage: Mapped[str] = mapped_column(String(32), nullable=False)
    changed_by_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    lead: Mapped[Lead] = relationship(back_populates="status_changes")
    changed_by: Mapped[User | None] = relationship(lazy="selectin")

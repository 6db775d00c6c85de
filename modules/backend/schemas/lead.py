"""
Lead Schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from modules.backend.models.lead import LeadPriority, LeadStage, LeadStatus
from modules.backend.schemas.customer import CustomerSummary
from modules.backend.schemas.user import UserSummary


class LeadCreate(BaseModel):
    """
    Schema for creating a lead.

    With `requested_site_survey` set and a customer given, a site survey
    linked to the lead is created alongside it.
    """

    title: str = Field(..., min_length=1, max_length=255, examples=["Office network upgrade"])
    description: str | None = None
    stage: LeadStage = LeadStage.LEAD_NEW
    status: LeadStatus = LeadStatus.ACTIVE
    priority: LeadPriority = LeadPriority.MEDIUM
    probability: int | None = Field(default=None, ge=0, le=100, description="Win probability, %")
    estimated_value: float | None = Field(default=None, ge=0)
    expected_close_date: datetime | None = None
    customer_id: str | None = None
    contact_id: str | None = None
    owner_id: str | None = Field(default=None, description="Defaults to the current user")
    assignee_id: str | None = None
    requested_site_survey: bool = False

    model_config = ConfigDict(use_enum_values=True)


class LeadUpdate(BaseModel):
    """Partial lead update. Stage changes go through the status change endpoint."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: LeadStatus | None = None
    priority: LeadPriority | None = None
    probability: int | None = Field(default=None, ge=0, le=100)
    estimated_value: float | None = Field(default=None, ge=0)
    expected_close_date: datetime | None = None
    customer_id: str | None = None
    contact_id: str | None = None
    owner_id: str | None = None
    assignee_id: str | None = None
    requested_site_survey: bool | None = None

    model_config = ConfigDict(use_enum_values=True)


class LeadResponse(BaseModel):
    id: str
    lead_number: str
    title: str
    description: str | None
    stage: str
    status: str
    priority: str
    probability: int | None
    estimated_value: float | None
    expected_close_date: datetime | None
    requested_site_survey: bool
    customer_id: str | None
    contact_id: str | None
    owner_id: str | None
    assignee_id: str | None
    customer: CustomerSummary | None = None
    owner: UserSummary | None = None
    assignee: UserSummary | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LeadStatusChangeRequest(BaseModel):
    to_stage: LeadStage
    note: str | None = Field(default=None, max_length=2000)

    model_config = ConfigDict(use_enum_values=True)


class LeadStatusChangeResponse(BaseModel):
    id: str
    lead_id: str
    from_stage: str | None
    to_stage: str
    changed_by_id: str | None
    changed_by: UserSummary | None = None
    note: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

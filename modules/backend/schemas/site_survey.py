"""
Site Survey Schemas.

Pydantic schemas for site survey CRUD, workflow stage, and the equipment
infrastructure tree used by the bill of materials.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from modules.backend.models.site_survey import SiteSurveyStage, SiteSurveyType
from modules.backend.schemas.customer import ContactResponse, CustomerSummary
from modules.backend.schemas.file import FileResponse
from modules.backend.schemas.user import UserSummary


class SiteSurveyCreate(BaseModel):
    """Schema for creating a site survey."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Hotel Aegean cabling"])
    description: str | None = None
    type: SiteSurveyType = Field(default=SiteSurveyType.COMPREHENSIVE)
    status: str | None = Field(default=None, max_length=64, description="Defaults to Scheduled")
    customer_id: str = Field(..., min_length=1)
    contact_id: str | None = None
    lead_id: str | None = None
    arranged_date: datetime | None = None
    assign_from_id: str | None = Field(default=None, description="Defaults to the current user")
    assign_to_id: str | None = None
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=128)
    phone: str | None = Field(default=None, max_length=64)
    email: EmailStr | None = None

    model_config = ConfigDict(use_enum_values=True)


class SiteSurveyUpdate(BaseModel):
    """
    Schema for a partial site survey update.

    Empty strings for contact_id, assign_from_id, assign_to_id and email
    clear the stored value.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    type: SiteSurveyType | None = None
    status: str | None = Field(default=None, max_length=64)
    contact_id: str | None = None
    lead_id: str | None = None
    arranged_date: datetime | None = None
    assign_from_id: str | None = None
    assign_to_id: str | None = None
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=128)
    phone: str | None = Field(default=None, max_length=64)
    email: str | None = Field(default=None, max_length=255)

    model_config = ConfigDict(use_enum_values=True)


class SiteSurveyResponse(BaseModel):
    """Schema for site survey in API responses."""

    id: str
    title: str
    description: str | None
    type: str
    status: str
    stage: str | None
    customer_id: str
    contact_id: str | None
    lead_id: str | None
    arranged_date: datetime | None
    assign_from_id: str | None
    assign_to_id: str | None
    address: str | None
    city: str | None
    phone: str | None
    email: str | None
    customer: CustomerSummary | None = None
    assign_from: UserSummary | None = None
    assign_to: UserSummary | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SiteSurveyDetail(SiteSurveyResponse):
    """Site survey with contact and attached files."""

    contact: ContactResponse | None = None
    files: list[FileResponse] = []


class SiteSurveyStageResponse(BaseModel):
    id: str
    title: str
    stage: str | None
    status: str

    model_config = ConfigDict(from_attributes=True)


class SiteSurveyStageUpdate(BaseModel):
    stage: SiteSurveyStage

    model_config = ConfigDict(use_enum_values=True)


class InfrastructureData(BaseModel):
    """
    Equipment tree for the bill of materials.

    Buildings keep the client's shape; each equipment entry carries either
    `products[{productId, quantity}]` or a single `productId`/`quantity`.
    """

    buildings: list[dict[str, Any]] = Field(default_factory=list)
    building_connections: list[dict[str, Any]] = Field(
        default_factory=list, alias="buildingConnections",
    )

    model_config = ConfigDict(populate_by_name=True)

"""
Customer Schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CustomerCreate(BaseModel):
    """Schema for creating a customer."""

    name: str = Field(..., min_length=1, max_length=255, examples=["ACME S.A."])
    afm: str | None = Field(default=None, max_length=32, description="Tax id")
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=64)
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=128)


class CustomerUpdate(BaseModel):
    """Schema for updating a customer. Only provided fields are written."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    afm: str | None = Field(default=None, max_length=32)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=64)
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=128)


class CustomerResponse(BaseModel):
    id: str
    name: str
    afm: str | None
    email: str | None
    phone: str | None
    address: str | None
    city: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerSummary(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class ContactCreate(BaseModel):
    """Schema for creating a contact under a customer."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=64)
    mobile_phone: str | None = Field(default=None, max_length=64)


class ContactResponse(BaseModel):
    id: str
    customer_id: str
    name: str
    email: str | None
    phone: str | None
    mobile_phone: str | None

    model_config = ConfigDict(from_attributes=True)

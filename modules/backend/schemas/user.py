"""
User Schemas.

Pydantic schemas for authentication and user administration. Password
hashes never appear in a response schema.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from modules.backend.models.user import UserRole


class TokenRequest(BaseModel):
    """Credentials for obtaining an access token."""

    email: EmailStr = Field(..., description="Login email", examples=["admin@example.com"])
    password: str = Field(..., min_length=1, max_length=255, description="Password")


class TokenResponse(BaseModel):
    """Issued access token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")


class NamedRef(BaseModel):
    """Department, work position or branch reference."""

    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Compact user reference embedded in other resources."""

    id: str
    name: str | None
    email: str

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    """Schema for user in API responses."""

    id: str = Field(description="User unique identifier")
    email: str
    name: str | None
    role: UserRole
    is_active: bool
    phone: str | None
    work_phone: str | None
    mobile: str | None
    department: NamedRef | None = None
    work_position: NamedRef | None = None
    branch: NamedRef | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class UserUpdate(BaseModel):
    """
    Schema for an admin update of a user.

    Reference ids accept "none" or an empty string to clear the reference.
    """

    name: str | None = Field(default=None, max_length=255)
    role: UserRole | None = Field(default=None, description="One of ADMIN, MANAGER, EMPLOYEE, USER")
    is_active: bool | None = None
    phone: str | None = Field(default=None, max_length=64)
    work_phone: str | None = Field(default=None, max_length=64)
    mobile: str | None = Field(default=None, max_length=64)
    department_id: str | None = None
    work_position_id: str | None = None
    branch_id: str | None = None

    model_config = ConfigDict(use_enum_values=True)

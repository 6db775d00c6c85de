"""
File Schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FileResponse(BaseModel):
    """Stored file metadata."""

    id: str
    entity_id: str
    type: str = Field(description="Owning entity type, e.g. SITESURVEY")
    name: str
    title: str | None
    filetype: str | None
    url: str
    description: str | None
    size: int | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UploadError(BaseModel):
    """A file that could not be uploaded, with the reason."""

    name: str
    error: str


class UploadResult(BaseModel):
    """Result of a multi-file upload. Failures do not abort the batch."""

    files: list[FileResponse] = []
    errors: list[UploadError] = []


class CablingImageResponse(BaseModel):
    """Converted cabling image or PDF stored on the CDN."""

    url: str
    filename: str
    content_type: str
    size: int
    width: int | None = None
    height: int | None = None

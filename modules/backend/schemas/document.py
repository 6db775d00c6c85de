"""
Document Schemas.
"""

from pydantic import BaseModel, Field

from modules.backend.schemas.file import FileResponse


class BomGenerationResponse(BaseModel):
    """Generated bill of materials stored as a versioned file."""

    file: FileResponse
    version: int = Field(ge=1)
    product_count: int = Field(description="Distinct products in the BOM")
    total_quantity: int
    linked_to: str = Field(description="LEAD or CUSTOMER")

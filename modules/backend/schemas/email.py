"""
Email Schemas.

Request bodies for the mailbox endpoints. Message, folder and attachment
responses reuse the Microsoft Graph models.
"""

from pydantic import BaseModel, EmailStr, Field

from modules.backend.integrations.microsoft_graph.models import EmailMessage


class EmailAttachmentInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(default="application/octet-stream", max_length=255)
    content_bytes: str = Field(..., min_length=1, description="Base64 encoded content")


class SendEmailRequest(BaseModel):
    """Schema for sending an email from the caller's mailbox."""

    to: list[EmailStr] = Field(..., min_length=1)
    cc: list[EmailStr] = Field(default_factory=list)
    bcc: list[EmailStr] = Field(default_factory=list)
    subject: str = Field(..., max_length=998)
    body: str = ""
    is_html: bool = True
    attachments: list[EmailAttachmentInput] = Field(default_factory=list)


class MarkReadRequest(BaseModel):
    is_read: bool


class MoveEmailRequest(BaseModel):
    destination_folder_id: str = Field(..., min_length=1)


class ReplyRequest(BaseModel):
    content: str = Field(..., min_length=1)
    content_type: str = Field(default="html", pattern="^(html|text)$")


class ForwardRequest(BaseModel):
    to: list[EmailStr] = Field(..., min_length=1)
    content: str | None = None
    content_type: str = Field(default="html", pattern="^(html|text)$")


class EmailListResponse(BaseModel):
    messages: list[EmailMessage]
    total_count: int
    limit: int
    offset: int


class Mailbox(BaseModel):
    """A mailbox the caller can work with."""

    email: str
    name: str | None = None
    is_shared: bool = False

"""
Microsoft Graph Models.

Pydantic models for the Graph v1.0 resources the application reads, plus
helpers that build request bodies. Graph uses camelCase; fields are
snake_case here and populated through camelCase aliases.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GraphModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class EmailAddress(GraphModel):
    name: str | None = None
    address: str | None = None


class Recipient(GraphModel):
    email_address: EmailAddress


class ItemBody(GraphModel):
    content_type: str = "html"
    content: str = ""


class GraphUser(GraphModel):
    id: str
    display_name: str | None = None
    mail: str | None = None
    user_principal_name: str | None = None
    job_title: str | None = None
    department: str | None = None
    office_location: str | None = None
    business_phones: list[str] = Field(default_factory=list)
    mobile_phone: str | None = None

    @property
    def email(self) -> str | None:
        return self.mail or self.user_principal_name


class MailFolder(GraphModel):
    id: str
    display_name: str
    child_folder_count: int = 0
    unread_item_count: int = 0
    total_item_count: int = 0
    parent_folder_id: str | None = None


class EmailMessage(GraphModel):
    id: str
    subject: str | None = None
    sender: Recipient | None = Field(default=None, alias="from")
    to_recipients: list[Recipient] = Field(default_factory=list)
    cc_recipients: list[Recipient] = Field(default_factory=list)
    bcc_recipients: list[Recipient] = Field(default_factory=list)
    body: ItemBody | None = None
    body_preview: str | None = None
    received_date_time: datetime | None = None
    sent_date_time: datetime | None = None
    is_read: bool = False
    is_draft: bool = False
    has_attachments: bool = False
    importance: str | None = None
    internet_message_id: str | None = None
    conversation_id: str | None = None
    parent_folder_id: str | None = None
    web_link: str | None = None


class EmailAttachment(GraphModel):
    id: str
    name: str
    content_type: str | None = None
    size: int = 0
    is_inline: bool = False
    content_id: str | None = None
    content_bytes: str | None = None


class EmailPage(BaseModel):
    """One page of messages plus the folder's total message count."""

    messages: list[EmailMessage]
    total_count: int


MESSAGE_FIELDS = (
    "id",
    "subject",
    "from",
    "toRecipients",
    "ccRecipients",
    "bccRecipients",
    "body",
    "bodyPreview",
    "receivedDateTime",
    "sentDateTime",
    "isRead",
    "isDraft",
    "hasAttachments",
    "importance",
    "internetMessageId",
    "conversationId",
    "parentFolderId",
    "webLink",
)


def recipients(addresses: list[str] | None) -> list[dict[str, Any]]:
    """Graph recipient list for plain email addresses."""
    return [{"emailAddress": {"address": address}} for address in addresses or []]


def build_message(
    subject: str,
    body: str,
    to: list[str],
    cc: list[str] | None = None,
    bcc: list[str] | None = None,
    is_html: bool = True,
    attachments: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    """
    Build the `message` object of a sendMail request.

    Args:
        attachments: Items with name, content_type and base64 content_bytes
    """
    message: dict[str, Any] = {
        "subject": subject,
        "body": {"contentType": "HTML" if is_html else "Text", "content": body},
        "toRecipients": recipients(to),
    }
    if cc:
        message["ccRecipients"] = recipients(cc)
    if bcc:
        message["bccRecipients"] = recipients(bcc)
    if attachments:
        message["attachments"] = [
            {
                "@odata.type": "#microsoft.graph.fileAttachment",
                "name": item["name"],
                "contentType": item["content_type"],
                "contentBytes": item["content_bytes"],
            }
            for item in attachments
        ]
    return message

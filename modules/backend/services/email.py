"""
Email Service.

Mailbox operations on behalf of the signed-in user through Microsoft
Graph. Graph failures are translated into application errors here so
endpoints only see the common exception hierarchy.
"""

from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import TypeVar

from modules.backend.core.config import get_app_config
from modules.backend.core.logging import get_logger
from modules.backend.integrations.microsoft_graph import (
    MicrosoftGraphClient,
    MicrosoftGraphError,
    to_application_error,
)
from modules.backend.integrations.microsoft_graph.errors import describe
from modules.backend.integrations.microsoft_graph.models import (
    EmailAttachment,
    EmailMessage,
    MailFolder,
)
from modules.backend.schemas.email import (
    EmailListResponse,
    ForwardRequest,
    Mailbox,
    ReplyRequest,
    SendEmailRequest,
)

logger = get_logger(__name__)

T = TypeVar("T")


def _odata_datetime(value: date | datetime) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return f"{value.isoformat()}T00:00:00Z"


def build_filter(
    is_read: bool | None = None,
    has_attachments: bool | None = None,
    date_from: date | datetime | None = None,
    date_to: date | datetime | None = None,
) -> str | None:
    """OData $filter for the message list, or None when nothing is filtered."""
    clauses = []
    if is_read is not None:
        clauses.append(f"isRead eq {str(is_read).lower()}")
    if has_attachments is not None:
        clauses.append(f"hasAttachments eq {str(has_attachments).lower()}")
    if date_from is not None:
        clauses.append(f"receivedDateTime ge {_odata_datetime(date_from)}")
    if date_to is not None:
        clauses.append(f"receivedDateTime le {_odata_datetime(date_to)}")
    return " and ".join(clauses) or None


class EmailService:
    """
    Mail operations for one caller.

    Args:
        access_token: Delegated Graph token of the caller
        client: Graph client to use instead of creating one
    """

    def __init__(self, access_token: str, client: MicrosoftGraphClient | None = None) -> None:
        self._access_token = access_token
        self._client = client

    def _graph(self) -> MicrosoftGraphClient:
        if self._client is None:
            self._client = MicrosoftGraphClient(self._access_token)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    async def _call(self, operation: str, call: Callable[[MicrosoftGraphClient], Awaitable[T]]) -> T:
        try:
            return await call(self._graph())
        except MicrosoftGraphError as e:
            logger.warning(
                "Mail operation failed",
                extra={"operation": operation, **describe(e)},
            )
            raise to_application_error(e) from e

    async def list_emails(
        self,
        folder_id: str = "inbox",
        limit: int = 50,
        offset: int = 0,
        search: str | None = None,
        is_read: bool | None = None,
        has_attachments: bool | None = None,
        date_from: date | datetime | None = None,
        date_to: date | datetime | None = None,
    ) -> EmailListResponse:
        odata_filter = build_filter(is_read, has_attachments, date_from, date_to)
        page = await self._call(
            "list_emails",
            lambda graph: graph.get_emails(
                folder_id=folder_id,
                limit=limit,
                skip=offset,
                filter=odata_filter,
                search=search,
            ),
        )
        return EmailListResponse(
            messages=page.messages,
            total_count=page.total_count,
            limit=limit,
            offset=offset,
        )

    async def get_email(self, message_id: str) -> EmailMessage:
        return await self._call("get_email", lambda graph: graph.get_email_by_id(message_id))

    async def list_attachments(self, message_id: str) -> list[EmailAttachment]:
        return await self._call(
            "list_attachments",
            lambda graph: graph.get_email_attachments(message_id),
        )

    async def list_folders(self) -> list[MailFolder]:
        return await self._call("list_folders", lambda graph: graph.get_email_folders())

    async def list_mailboxes(self) -> list[Mailbox]:
        """The caller's own mailbox followed by the configured shared mailboxes."""
        profile = await self._call("get_user_profile", lambda graph: graph.get_user_profile())
        mailboxes = []
        if profile.email:
            mailboxes.append(Mailbox(email=profile.email, name=profile.display_name))

        own = {mailbox.email.lower() for mailbox in mailboxes}
        for address in get_app_config().integrations.microsoft_graph.shared_mailboxes:
            if address.lower() not in own:
                mailboxes.append(Mailbox(email=address, name=address, is_shared=True))
        return mailboxes

    async def send_email(self, data: SendEmailRequest) -> None:
        logger.info(
            "Sending email",
            extra={"recipients": len(data.to) + len(data.cc) + len(data.bcc)},
        )
        await self._call(
            "send_email",
            lambda graph: graph.send_email(
                to=list(data.to),
                subject=data.subject,
                body=data.body,
                cc=list(data.cc),
                bcc=list(data.bcc),
                is_html=data.is_html,
                attachments=[item.model_dump() for item in data.attachments],
            ),
        )

    async def set_read(self, message_id: str, is_read: bool) -> None:
        if is_read:
            await self._call("mark_as_read", lambda graph: graph.mark_as_read(message_id))
        else:
            await self._call("mark_as_unread", lambda graph: graph.mark_as_unread(message_id))

    async def delete_email(self, message_id: str) -> None:
        await self._call("delete_email", lambda graph: graph.delete_email(message_id))

    async def move_email(self, message_id: str, destination_folder_id: str) -> None:
        await self._call(
            "move_email",
            lambda graph: graph.move_email(message_id, destination_folder_id),
        )

    async def reply(self, message_id: str, data: ReplyRequest, reply_all: bool = False) -> None:
        if reply_all:
            await self._call(
                "reply_all",
                lambda graph: graph.reply_all_to_email(message_id, data.content, data.content_type),
            )
        else:
            await self._call(
                "reply",
                lambda graph: graph.reply_to_email(message_id, data.content, data.content_type),
            )

    async def forward(self, message_id: str, data: ForwardRequest) -> None:
        await self._call(
            "forward",
            lambda graph: graph.forward_email(
                message_id,
                list(data.to),
                data.content,
                data.content_type,
            ),
        )

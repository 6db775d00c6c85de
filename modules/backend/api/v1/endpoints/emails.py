"""
Emails API Endpoints.

Mailbox access on behalf of the caller. Requests carry the caller's
delegated Microsoft Graph token in the `X-Graph-Token` header next to the
usual bearer token.
"""

from collections.abc import AsyncIterator
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from modules.backend.core.dependencies import (
    CurrentUser,
    GraphToken,
    RequestId,
    require_graph_integration,
)
from modules.backend.integrations.microsoft_graph.models import (
    EmailAttachment,
    EmailMessage,
    MailFolder,
)
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.email import (
    EmailListResponse,
    ForwardRequest,
    Mailbox,
    MarkReadRequest,
    MoveEmailRequest,
    ReplyRequest,
    SendEmailRequest,
)
from modules.backend.services.email import EmailService

router = APIRouter(dependencies=[Depends(require_graph_integration)])


async def get_email_service(token: GraphToken) -> AsyncIterator[EmailService]:
    service = EmailService(token)
    try:
        yield service
    finally:
        await service.close()


Mail = Annotated[EmailService, Depends(get_email_service)]


@router.get(
    "",
    response_model=ApiResponse[EmailListResponse],
    summary="List messages",
    description="Messages of a folder, newest first, with the folder's total count.",
)
async def list_emails(
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
    folder_id: str = Query(default="inbox"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    search: str | None = Query(default=None, max_length=255),
    is_read: bool | None = Query(default=None),
    has_attachments: bool | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
) -> ApiResponse[EmailListResponse]:
    page = await mail.list_emails(
        folder_id=folder_id,
        limit=limit,
        offset=offset,
        search=search,
        is_read=is_read,
        has_attachments=has_attachments,
        date_from=date_from,
        date_to=date_to,
    )
    return ApiResponse(data=page)


@router.post("", response_model=ApiResponse[dict[str, bool]], status_code=202, summary="Send a message")
async def send_email(
    data: SendEmailRequest,
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[dict[str, bool]]:
    await mail.send_email(data)
    return ApiResponse(data={"sent": True})


@router.get("/folders", response_model=ApiResponse[list[MailFolder]], summary="List mail folders")
async def list_folders(
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[list[MailFolder]]:
    return ApiResponse(data=await mail.list_folders())


@router.get(
    "/mailboxes",
    response_model=ApiResponse[list[Mailbox]],
    summary="List mailboxes",
    description="The caller's own mailbox followed by the configured shared mailboxes.",
)
async def list_mailboxes(
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[list[Mailbox]]:
    return ApiResponse(data=await mail.list_mailboxes())


@router.get("/{message_id}", response_model=ApiResponse[EmailMessage], summary="Get a message")
async def get_email(
    message_id: str,
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[EmailMessage]:
    return ApiResponse(data=await mail.get_email(message_id))


@router.patch("/{message_id}", status_code=204, summary="Mark a message read or unread")
async def mark_email(
    message_id: str,
    data: MarkReadRequest,
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> None:
    await mail.set_read(message_id, data.is_read)


@router.delete("/{message_id}", status_code=204, summary="Delete a message")
async def delete_email(
    message_id: str,
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> None:
    await mail.delete_email(message_id)


@router.post("/{message_id}/move", status_code=204, summary="Move a message to another folder")
async def move_email(
    message_id: str,
    data: MoveEmailRequest,
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> None:
    await mail.move_email(message_id, data.destination_folder_id)


@router.post("/{message_id}/reply", status_code=204, summary="Reply to the sender")
async def reply_email(
    message_id: str,
    data: ReplyRequest,
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> None:
    await mail.reply(message_id, data)


@router.post("/{message_id}/reply-all", status_code=204, summary="Reply to all recipients")
async def reply_all_email(
    message_id: str,
    data: ReplyRequest,
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> None:
    await mail.reply(message_id, data, reply_all=True)


@router.post("/{message_id}/forward", status_code=204, summary="Forward a message")
async def forward_email(
    message_id: str,
    data: ForwardRequest,
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> None:
    await mail.forward(message_id, data)


@router.get(
    "/{message_id}/attachments",
    response_model=ApiResponse[list[EmailAttachment]],
    summary="List attachments of a message",
)
async def list_attachments(
    message_id: str,
    mail: Mail,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[list[EmailAttachment]]:
    return ApiResponse(data=await mail.list_attachments(message_id))

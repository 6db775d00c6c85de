"""
Microsoft Graph Client (delegated).

Typed wrapper around the Graph v1.0 mail and directory endpoints, acting
with the signed-in user's access token.

Usage:
    async with MicrosoftGraphClient(access_token) as graph:
        page = await graph.get_emails(folder_id="inbox", limit=25)
"""

from typing import Any

from modules.backend.integrations.microsoft_graph.base import GraphHttpClient
from modules.backend.integrations.microsoft_graph.errors import MicrosoftGraphError
from modules.backend.integrations.microsoft_graph.models import (
    MESSAGE_FIELDS,
    EmailAttachment,
    EmailMessage,
    EmailPage,
    GraphUser,
    MailFolder,
    build_message,
    recipients,
)


def _require(value: Any, message: str) -> None:
    if not value or (isinstance(value, str) and not value.strip()):
        raise MicrosoftGraphError(message, "INVALID_INPUT", 400)


class MicrosoftGraphClient(GraphHttpClient):
    """Graph client authenticated with a delegated (user) access token."""

    def __init__(self, access_token: str, **kwargs: Any) -> None:
        _require(access_token, "Access token is required")
        super().__init__(**kwargs)
        self._token = access_token

    async def _access_token(self) -> str:
        return self._token

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def get_user_profile(self) -> GraphUser:
        response = await self._request("GET", "/me")
        return GraphUser.model_validate(response.json())

    async def get_user_photo(self) -> bytes | None:
        """Profile photo bytes, or None when the user has no photo."""
        try:
            response = await self._request("GET", "/me/photo/$value")
        except MicrosoftGraphError as e:
            if e.status_code == 404:
                return None
            raise
        return response.content

    async def get_users_in_tenant(
        self,
        top: int = 999,
        select: list[str] | None = None,
    ) -> list[GraphUser]:
        params: dict[str, Any] = {"$top": top}
        if select:
            params["$select"] = ",".join(select)
        response = await self._request("GET", "/users", params=params)
        return [GraphUser.model_validate(item) for item in response.json().get("value", [])]

    async def get_user_by_id(self, user_id: str) -> GraphUser | None:
        _require(user_id, "User ID is required and must be a string")
        try:
            response = await self._request("GET", f"/users/{user_id}")
        except MicrosoftGraphError as e:
            if e.status_code == 404:
                return None
            raise
        return GraphUser.model_validate(response.json())

    # -------------------------------------------------------------------------
    # Mail folders and messages
    # -------------------------------------------------------------------------

    async def get_email_folders(self) -> list[MailFolder]:
        response = await self._request(
            "GET",
            "/me/mailFolders",
            params={"$top": 100, "$orderby": "displayName asc"},
        )
        return [MailFolder.model_validate(item) for item in response.json().get("value", [])]

    async def get_emails(
        self,
        folder_id: str = "inbox",
        limit: int = 50,
        skip: int = 0,
        filter: str | None = None,
        search: str | None = None,
    ) -> EmailPage:
        """
        One page of messages from a folder, newest first, plus the total count.

        Graph rejects $orderby and $skip together with $search, so a search
        query returns the top `limit` matches by relevance.
        """
        params: dict[str, Any] = {"$top": limit, "$select": ",".join(MESSAGE_FIELDS)}
        headers: dict[str, str] | None = None
        if search:
            params["$search"] = f'"{search}"'
            headers = {"ConsistencyLevel": "eventual"}
        else:
            params["$skip"] = skip
            params["$orderby"] = "receivedDateTime desc"
        if filter:
            params["$filter"] = filter

        response = await self._request(
            "GET",
            f"/me/mailFolders/{folder_id}/messages",
            params=params,
            headers=headers,
        )
        messages = [EmailMessage.model_validate(item) for item in response.json().get("value", [])]

        count_response = await self._request(
            "GET",
            f"/me/mailFolders/{folder_id}/messages/$count",
            params={"$filter": filter} if filter else None,
            headers={"ConsistencyLevel": "eventual"},
        )
        try:
            total_count = int(count_response.text.strip() or 0)
        except ValueError:
            total_count = len(messages)

        return EmailPage(messages=messages, total_count=total_count)

    async def get_email_by_id(self, message_id: str) -> EmailMessage:
        _require(message_id, "Message ID is required and must be a string")
        response = await self._request(
            "GET",
            f"/me/messages/{message_id}",
            params={"$select": ",".join(MESSAGE_FIELDS)},
        )
        return EmailMessage.model_validate(response.json())

    async def get_email_attachments(self, message_id: str) -> list[EmailAttachment]:
        _require(message_id, "Message ID is required and must be a string")
        response = await self._request("GET", f"/me/messages/{message_id}/attachments")
        return [EmailAttachment.model_validate(item) for item in response.json().get("value", [])]

    async def mark_as_read(self, message_id: str) -> None:
        _require(message_id, "Message ID is required and must be a string")
        await self._request("PATCH", f"/me/messages/{message_id}", json={"isRead": True})

    async def mark_as_unread(self, message_id: str) -> None:
        _require(message_id, "Message ID is required and must be a string")
        await self._request("PATCH", f"/me/messages/{message_id}", json={"isRead": False})

    async def delete_email(self, message_id: str) -> None:
        _require(message_id, "Message ID is required and must be a string")
        await self._request("DELETE", f"/me/messages/{message_id}")

    async def move_email(self, message_id: str, destination_folder_id: str) -> None:
        _require(message_id, "Message ID is required and must be a string")
        _require(destination_folder_id, "Destination folder ID is required and must be a string")
        await self._request(
            "POST",
            f"/me/messages/{message_id}/move",
            json={"destinationId": destination_folder_id},
        )

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    async def send_email(
        self,
        to: list[str],
        subject: str,
        body: str,
        cc: list[str] | None = None,
        bcc: list[str] | None = None,
        is_html: bool = True,
        attachments: list[dict[str, str]] | None = None,
    ) -> None:
        _require(to, "At least one recipient is required")
        message = build_message(subject, body, to, cc, bcc, is_html, attachments)
        await self._request(
            "POST",
            "/me/sendMail",
            json={"message": message, "saveToSentItems": True},
        )

    async def reply_to_email(
        self,
        message_id: str,
        content: str,
        content_type: str = "html",
    ) -> None:
        _require(message_id, "Message ID is required and must be a string")
        _require(content, "Reply content is required and must be a string")
        await self._request(
            "POST",
            f"/me/messages/{message_id}/reply",
            json={"message": {"body": {"contentType": content_type, "content": content}}},
        )

    async def reply_all_to_email(
        self,
        message_id: str,
        content: str,
        content_type: str = "html",
    ) -> None:
        _require(message_id, "Message ID is required and must be a string")
        _require(content, "Reply content is required and must be a string")
        await self._request(
            "POST",
            f"/me/messages/{message_id}/replyAll",
            json={"message": {"body": {"contentType": content_type, "content": content}}},
        )

    async def forward_email(
        self,
        message_id: str,
        to: list[str],
        content: str | None = None,
        content_type: str = "html",
    ) -> None:
        _require(message_id, "Message ID is required and must be a string")
        _require(to, "To recipients are required and must be a non-empty array")
        body: dict[str, Any] = {"toRecipients": recipients(to)}
        if content:
            body["message"] = {"body": {"contentType": content_type, "content": content}}
        await self._request("POST", f"/me/messages/{message_id}/forward", json=body)

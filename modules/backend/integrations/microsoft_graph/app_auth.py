"""
Microsoft Graph Application Client.

Client-credentials (app-only) access to Graph, used for system actions
that run outside a user's session: sending notification mail on behalf of
a user and writing calendar events.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from modules.backend.core.config import get_app_config, get_settings
from modules.backend.core.logging import get_logger
from modules.backend.integrations.microsoft_graph.base import GraphHttpClient
from modules.backend.integrations.microsoft_graph.errors import (
    MicrosoftGraphError,
    handle_graph_error,
)
from modules.backend.integrations.microsoft_graph.models import build_message, recipients

logger = get_logger(__name__)


@dataclass
class _CachedToken:
    token: str
    expires_at: float


_token_cache: dict[tuple[str, str], _CachedToken] = {}


def clear_token_cache() -> None:
    _token_cache.clear()


class GraphAppClient(GraphHttpClient):
    """
    Graph client authenticated with an application token.

    Tokens are cached per (tenant, client) until `token_safety_margin_seconds`
    before they expire.
    """

    def __init__(
        self,
        tenant_id: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        graph_config = get_app_config().integrations.microsoft_graph
        self.tenant_id = tenant_id or graph_config.tenant_id
        self.client_id = client_id or graph_config.client_id
        self.client_secret = client_secret or get_settings().ms_graph_client_secret
        self.scope = graph_config.scope
        self.authority_url = graph_config.authority_url.rstrip("/")
        self.safety_margin = graph_config.token_safety_margin_seconds
        self.calendar_timezone = graph_config.calendar_timezone
        self.default_event_duration = timedelta(hours=graph_config.default_event_duration_hours)

    async def _access_token(self) -> str:
        if not self.tenant_id or not self.client_id or not self.client_secret:
            raise MicrosoftGraphError(
                "Missing Microsoft Graph credentials (tenant_id, client_id, client secret)",
                "CONFIGURATION_ERROR",
                0,
            )

        key = (self.tenant_id, self.client_id)
        cached = _token_cache.get(key)
        if cached and cached.expires_at > time.time():
            return cached.token

        client = await self._get_client()
        try:
            response = await client.post(
                f"{self.authority_url}/{self.tenant_id}/oauth2/v2.0/token",
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "scope": self.scope,
                    "grant_type": "client_credentials",
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise handle_graph_error(exc) from exc

        token_data = response.json()
        _token_cache[key] = _CachedToken(
            token=token_data["access_token"],
            expires_at=time.time() + int(token_data.get("expires_in", 3600)) - self.safety_margin,
        )
        logger.debug("Acquired Microsoft Graph application token", extra={"tenant_id": self.tenant_id})
        return token_data["access_token"]

    def _wall_clock(self, value: datetime) -> str:
        if value.tzinfo is not None:
            value = value.astimezone(ZoneInfo(self.calendar_timezone))
        return value.strftime("%Y-%m-%dT%H:%M:%S")

    async def send_email_as_user(
        self,
        user_email: str,
        subject: str,
        body_html: str,
        recipients_to: list[str],
        cc: list[str] | None = None,
    ) -> None:
        """Send mail from `user_email`'s mailbox, saving a copy to Sent Items."""
        message = build_message(subject, body_html, recipients_to, cc=cc, is_html=True)
        await self._request(
            "POST",
            f"/users/{user_email}/sendMail",
            json={"message": message, "saveToSentItems": True},
        )
        logger.info(
            "Sent email as user",
            extra={"sender": user_email, "recipient_count": len(recipients_to)},
        )

    async def create_calendar_event(
        self,
        user_email: str,
        subject: str,
        body_html: str,
        start: datetime,
        end: datetime | None = None,
        location: str | None = None,
        attendees: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        Create an event on `user_email`'s default calendar.

        Naive datetimes are wall-clock times in the configured calendar
        timezone; aware datetimes are converted to it. `end` defaults to
        `start` plus the configured duration.
        """
        end = end or start + self.default_event_duration
        event: dict[str, Any] = {
            "subject": subject,
            "body": {"contentType": "HTML", "content": body_html},
            "start": {
                "dateTime": self._wall_clock(start),
                "timeZone": self.calendar_timezone,
            },
            "end": {
                "dateTime": self._wall_clock(end),
                "timeZone": self.calendar_timezone,
            },
            "attendees": [
                {**recipient, "type": "required"} for recipient in recipients(attendees)
            ],
        }
        if location:
            event["location"] = {"displayName": location}

        response = await self._request("POST", f"/users/{user_email}/calendar/events", json=event)
        logger.info("Created calendar event", extra={"calendar_owner": user_email})
        return response.json()

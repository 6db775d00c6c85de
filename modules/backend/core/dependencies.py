"""
FastAPI Dependencies.

Shared dependencies for request handling: database session, request id,
the authenticated user, role checks and the caller's Graph token.
"""

import uuid
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.config import get_app_config
from modules.backend.core.database import get_db_session
from modules.backend.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
)
from modules.backend.core.logging import get_logger
from modules.backend.core.security import decode_access_token
from modules.backend.integrations.bunny import BunnyStorageClient
from modules.backend.models.user import STAFF_ROLES, User, UserRole
from modules.backend.repositories.user import UserRepository

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

bearer_scheme = HTTPBearer(auto_error=False)


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


async def get_current_user(
    session: DbSession,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    """
    Resolve the user from the Bearer access token.

    Raises:
        AuthenticationError: Missing, invalid or expired token, unknown or
            deactivated user
    """
    if credentials is None:
        raise AuthenticationError("Authentication required")

    claims = decode_access_token(credentials.credentials)
    user = await UserRepository(session).get_by_id_or_none(claims["sub"])
    if user is None or not user.is_active:
        logger.warning("Rejected token for unknown or inactive user", extra={"user_id": claims["sub"]})
        raise AuthenticationError("User not found or inactive")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_roles(*roles: UserRole):
    """
    Dependency factory restricting an endpoint to the given roles.

    Usage:
        @router.post("", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """
    allowed = {role.value for role in roles}

    async def check_role(user: CurrentUser) -> User:
        if user.role not in allowed:
            raise AuthorizationError("Insufficient permissions")
        return user

    return check_role


StaffUser = Annotated[User, Depends(require_roles(*STAFF_ROLES))]
AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN))]


async def get_graph_token(x_graph_token: str | None = Header(None)) -> str:
    """Delegated Microsoft Graph access token of the caller."""
    if not x_graph_token:
        raise AuthenticationError("Microsoft Graph access token required (X-Graph-Token header)")
    return x_graph_token


GraphToken = Annotated[str, Depends(get_graph_token)]


def require_graph_integration() -> None:
    """Reject mail requests while the Microsoft Graph integration is switched off."""
    if not get_app_config().features.integration_microsoft_graph_enabled:
        raise ExternalServiceError(
            "Microsoft Graph integration is disabled",
            service="microsoft_graph",
        )


async def get_storage() -> AsyncIterator[BunnyStorageClient]:
    """Bunny storage client for the request, closed afterwards."""
    if not get_app_config().features.integration_bunny_enabled:
        raise ExternalServiceError("File storage is disabled", service="bunny")
    async with BunnyStorageClient() as storage:
        yield storage


Storage = Annotated[BunnyStorageClient, Depends(get_storage)]

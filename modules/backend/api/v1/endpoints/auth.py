"""
Auth API Endpoints.

Token issue and the current user's profile.
"""

from fastapi import APIRouter

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.user import TokenRequest, TokenResponse, UserResponse
from modules.backend.services.user import UserService

router = APIRouter()


@router.post(
    "/token",
    response_model=ApiResponse[TokenResponse],
    summary="Obtain an access token",
    description="Exchange email and password for a JWT bearer token.",
)
async def issue_token(
    data: TokenRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[TokenResponse]:
    service = UserService(db)
    token = await service.authenticate(data.email, data.password)
    return ApiResponse(data=token)


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Current user",
)
async def get_me(user: CurrentUser, request_id: RequestId) -> ApiResponse[UserResponse]:
    """Profile of the authenticated user."""
    return ApiResponse(data=UserResponse.model_validate(user))

"""
Integration Test Fixtures.

Fixtures for integration tests - uses a real database and the real
FastAPI application. External services (Bunny storage, Microsoft Graph,
notifications) are replaced with fakes.
"""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.database import get_db_session
from modules.backend.core.dependencies import get_storage
from modules.backend.models.user import User, UserRole

CDN_HOST = "https://cdn.test"


# =============================================================================
# Fakes
# =============================================================================


class FakeStorage:
    """In-memory stand-in for BunnyStorageClient."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.deleted: list[str] = []

    async def put(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self.objects[path] = (data, content_type)
        return f"{CDN_HOST}/{path}"

    async def delete(self, url_or_path: str) -> None:
        path = url_or_path.removeprefix(f"{CDN_HOST}/")
        self.objects.pop(path, None)
        self.deleted.append(path)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def dispatched() -> AsyncMock:
    """Records notifications dispatched by endpoints instead of sending them."""
    return AsyncMock()


@pytest.fixture
async def client(
    db_session: AsyncSession,
    storage: FakeStorage,
    dispatched: AsyncMock,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with database session and integration overrides.

    The client uses the test database session, so API writes are visible
    to the test and rolled back afterwards.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    async def override_get_storage() -> AsyncGenerator[FakeStorage, None]:
        yield storage

    mock_settings = _create_mock_settings()
    with patch("modules.backend.core.config.get_settings", return_value=mock_settings), \
         patch("modules.backend.core.security.get_settings", return_value=mock_settings), \
         patch("modules.backend.tasks.notifications.dispatch_notification", dispatched):
        from modules.backend.main import create_app

        app = create_app()
        app.dependency_overrides[get_db_session] = override_get_db_session
        app.dependency_overrides[get_storage] = override_get_storage

        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as test_client:
            test_client.app = app
            yield test_client

        app.dependency_overrides.clear()


# =============================================================================
# Mock Settings Helper
# =============================================================================


def _create_mock_settings() -> Any:
    """Create a mock secrets object for testing."""
    settings = MagicMock()
    settings.db_password = "test_pass"
    settings.redis_password = ""
    settings.jwt_secret = "test-secret-key"
    settings.ms_graph_client_secret = "test-graph-secret"
    settings.bunny_storage_api_key = "test-bunny-key"
    return settings


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """Assert the response is a successful envelope and return its JSON."""
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """Assert the response is an error envelope and return its JSON."""
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """Assert the response is a request validation error (422)."""
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()


# =============================================================================
# Users and Authentication
# =============================================================================


async def _make_user(db_session: AsyncSession, email: str, role: UserRole, name: str) -> User:
    user = User(email=email, name=name, role=role.value, is_active=True)
    db_session.add(user)
    await db_session.flush()
    return user


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "admin@example.com", UserRole.ADMIN, "Admin")


@pytest.fixture
async def employee_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "tech@example.com", UserRole.EMPLOYEE, "Technician")


@pytest.fixture
async def basic_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "viewer@example.com", UserRole.USER, "Viewer")


def _bearer(user: User) -> dict[str, str]:
    from modules.backend.core.security import create_access_token

    token = create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for(client: AsyncClient):
    """
    Build Authorization headers for any user.

    Depends on `client` so tokens are signed with the patched test secret.
    """
    return _bearer


@pytest.fixture
def admin_headers(client: AsyncClient, admin_user: User) -> dict[str, str]:
    return _bearer(admin_user)


@pytest.fixture
def staff_headers(client: AsyncClient, employee_user: User) -> dict[str, str]:
    return _bearer(employee_user)


@pytest.fixture
def user_headers(client: AsyncClient, basic_user: User) -> dict[str, str]:
    return _bearer(basic_user)

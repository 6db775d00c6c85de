"""
User Service.

Authentication and user administration. Users are never hard-deleted;
deleting deactivates the account.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.config import get_app_config
from modules.backend.core.exceptions import AuthenticationError, ConflictError, ValidationError
from modules.backend.core.security import create_access_token, hash_password, verify_password
from modules.backend.models.user import User, UserRole
from modules.backend.repositories.base import BaseRepository
from modules.backend.repositories.user import (
    BranchRepository,
    DepartmentRepository,
    UserRepository,
    WorkPositionRepository,
)
from modules.backend.schemas.user import TokenResponse, UserUpdate
from modules.backend.services.base import BaseService

# Values that clear an organisational reference
_CLEAR_VALUES = ("", "none")


class UserService(BaseService):
    """Service for authentication and user administration."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = UserRepository(session)
        self._references: dict[str, BaseRepository] = {
            "department_id": DepartmentRepository(session),
            "work_position_id": WorkPositionRepository(session),
            "branch_id": BranchRepository(session),
        }

    async def authenticate(self, email: str, password: str) -> TokenResponse:
        """
        Verify credentials and issue an access token.

        Raises:
            AuthenticationError: Unknown email, wrong password or inactive user
        """
        user = await self.repo.get_by_email(email)
        if user is None or not user.password_hash or not verify_password(password, user.password_hash):
            self._log_operation("Login failed", email=email)
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        minutes = get_app_config().security.jwt.access_token_expire_minutes
        token = create_access_token(user.id, user.role)
        self._log_operation("User logged in", user_id=user.id)
        return TokenResponse(access_token=token, expires_in=minutes * 60)

    async def create_user(
        self,
        email: str,
        password: str,
        name: str | None = None,
        role: str = UserRole.USER.value,
    ) -> User:
        """
        Create a user with a bcrypt password hash.

        Raises:
            ConflictError: If the email is already registered
        """
        self._validate_string_length(password, "password", min_length=8)
        if await self.repo.get_by_email(email) is not None:
            raise ConflictError("Email already registered")

        self._log_operation("Creating user", email=email, role=role)
        return await self._execute_db_operation(
            "create_user",
            self.repo.create(
                email=email.strip().lower(),
                name=name,
                role=UserRole(role).value,
                password_hash=hash_password(password),
            ),
        )

    async def get_user(self, user_id: str) -> User:
        return await self.repo.get_by_id(user_id)

    async def list_users(
        self,
        role: str | None = None,
        department_id: str | None = None,
        branch_id: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        return await self.repo.list_filtered(
            role=role,
            department_id=department_id,
            branch_id=branch_id,
            is_active=is_active,
            search=search,
            limit=limit,
            offset=offset,
        )

    async def update_user(self, user_id: str, data: UserUpdate) -> User:
        """
        Update a user as an administrator.

        Department, work position and branch ids accept "none" or an empty
        string to clear the reference; any other value must exist.

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If a referenced department, position or branch
                does not exist
        """
        await self.repo.get_by_id(user_id)
        update_data = self._changes(data)

        for field, repo in self._references.items():
            if field not in update_data:
                continue
            value = update_data[field]
            if value is None or value.strip().lower() in _CLEAR_VALUES:
                update_data[field] = None
            elif not await repo.exists(value):
                raise ValidationError(
                    f"Invalid {field}",
                    details={field: f"No record with id {value}"},
                )

        if not update_data:
            return await self.repo.get_by_id(user_id)

        self._log_operation("Updating user", user_id=user_id, fields=list(update_data.keys()))
        user = await self._execute_db_operation(
            "update_user",
            self.repo.update(user_id, **update_data),
        )
        # Reload changed lookups
        await self.session.refresh(user, attribute_names=["department", "work_position", "branch"])
        return user

    async def deactivate_user(self, user_id: str) -> User:
        """Soft delete: the row stays and `is_active` is cleared."""
        self._log_operation("Deactivating user", user_id=user_id)
        return await self._execute_db_operation(
            "deactivate_user",
            self.repo.update(user_id, is_active=False),
        )

"""
User Repository.

Data access for users and the department / work position / branch lookups.
"""

from sqlalchemy import func, or_, select

from modules.backend.models.user import Branch, Department, User, WorkPosition
from modules.backend.repositories.base import BaseRepository, contains


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email (case-insensitive)."""
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def list_filtered(
        self,
        role: str | None = None,
        department_id: str | None = None,
        branch_id: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        """
        List users matching the admin filters, ordered by name.

        Returns:
            Tuple of (users, total count)
        """
        query = select(User)
        if role:
            query = query.where(User.role == role)
        if department_id:
            query = query.where(User.department_id == department_id)
        if branch_id:
            query = query.where(User.branch_id == branch_id)
        if is_active is not None:
            query = query.where(User.is_active == is_active)
        if search:
            query = query.where(or_(contains(User.name, search), contains(User.email, search)))

        query = query.order_by(User.name.asc(), User.email.asc())
        return await self._fetch_page(query, limit, offset)


class DepartmentRepository(BaseRepository[Department]):
    model = Department


class WorkPositionRepository(BaseRepository[WorkPosition]):
    model = WorkPosition


class BranchRepository(BaseRepository[Branch]):
    model = Branch

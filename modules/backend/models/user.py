"""
User Models.

Application users and the organisational lookups they belong to
(department, work position, branch).
"""

from enum import Enum

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from modules.backend.models.base import Base, TimestampMixin, UUIDMixin


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"
    USER = "USER"


# Roles allowed to create and edit operational records (surveys, leads)
STAFF_ROLES = (UserRole.ADMIN, UserRole.MANAGER, UserRole.EMPLOYEE)


class Department(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)


class WorkPosition(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "work_positions"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)


class Branch(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "branches"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)


class User(UUIDMixin, TimestampMixin, Base):
    """
    User database model.

    `password_hash` is a bcrypt hash and is never serialized by any
    response schema. Deactivated users keep their rows so historical
    references (assignees, status changes) stay intact.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=UserRole.USER.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    work_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    mobile: Mapped[str | None] = mapped_column(String(64), nullable=True)

    department_id: Mapped[str | None] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"), nullable=True,
    )
    work_position_id: Mapped[str | None] = mapped_column(
        ForeignKey("work_positions.id", ondelete="SET NULL"), nullable=True,
    )
    branch_id: Mapped[str | None] = mapped_column(
        ForeignKey("branches.id", ondelete="SET NULL"), nullable=True,
    )

    department: Mapped[Department | None] = relationship(lazy="selectin")
    work_position: Mapped[WorkPosition | None] = relationship(lazy="selectin")
    branch: Mapped[Branch | None] = relationship(lazy="selectin")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, role={self.role})>"

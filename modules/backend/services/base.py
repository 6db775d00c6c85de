"""
Base Service.

Services orchestrate repositories, enforce business rules and translate
database failures into application errors.

Usage:
    class CustomerService(BaseService):
        def __init__(self, session: AsyncSession) -> None:
            super().__init__(session)
            self.repo = CustomerRepository(session)

        async def update_customer(self, customer_id: str, data: CustomerUpdate) -> Customer:
            changes = self._changes(data)
            return await self._execute_db_operation(
                "update_customer", self.repo.update(customer_id, **changes),
            )
"""

from collections.abc import Iterable
from typing import Any, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import (
    ConflictError,
    DatabaseError,
    ValidationError,
)
from modules.backend.core.logging import get_logger
from modules.backend.core.utils import blank_to_none, naive_utc

logger = get_logger(__name__)

T = TypeVar("T")


class BaseService:
    """
    Base class for CRM services.

    Subclasses call super().__init__(session) and create their repositories
    on the same session, so one request is one unit of work.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def _execute_db_operation(
        self,
        operation: str,
        coro: Any,
    ) -> T:
        """
        Await a repository call, converting SQLAlchemy failures.

        Args:
            operation: Operation name used in logs and error messages
            coro: Repository coroutine

        Raises:
            ConflictError: Unique constraint violated (duplicate code, email, lead number)
            ValidationError: A referenced row does not exist
            DatabaseError: Any other database failure
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e)},
            )
            error_str = str(e).lower()
            if "unique" in error_str or "duplicate" in error_str:
                raise ConflictError("Resource already exists") from e
            if "foreign key" in error_str:
                raise ValidationError(
                    "Referenced record does not exist",
                    details={"operation": operation},
                ) from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(f"Database operation failed: {operation}") from e

    @staticmethod
    def _changes(
        data: BaseModel,
        *,
        blank_to_null: Iterable[str] = (),
        dates: Iterable[str] = (),
        exclude: set[str] | None = None,
    ) -> dict[str, Any]:
        """
        Fields the client actually sent in a partial update.

        Args:
            data: Update schema
            blank_to_null: Reference fields where "" clears the value
            dates: Datetime fields stored as naive UTC
            exclude: Fields handled separately by the caller
        """
        changes = data.model_dump(exclude_unset=True, exclude=exclude)
        for field in blank_to_null:
            if field in changes:
                changes[field] = blank_to_none(changes[field])
        for field in dates:
            if field in changes:
                changes[field] = naive_utc(changes[field])
        return changes

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
    ) -> None:
        """
        Raises:
            ValidationError: Listing every field that is missing or blank
        """
        missing = [
            name
            for name in field_names
            if fields.get(name) is None
            or (isinstance(fields[name], str) and not fields[name].strip())
        ]
        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _validate_string_length(
        self,
        value: str,
        field_name: str,
        min_length: int | None = None,
        max_length: int | None = None,
    ) -> None:
        if min_length is not None and len(value) < min_length:
            raise ValidationError(
                f"{field_name} too short",
                details={field_name: f"Minimum length is {min_length}"},
            )
        if max_length is not None and len(value) > max_length:
            raise ValidationError(
                f"{field_name} too long",
                details={field_name: f"Maximum length is {max_length}"},
            )

    def _log_operation(self, operation: str, **context: Any) -> None:
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(self, message: str, **context: Any) -> None:
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )

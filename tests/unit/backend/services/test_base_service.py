"""
Unit Tests for Base Service.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from modules.backend.core.exceptions import (
    ConflictError,
    DatabaseError,
    ValidationError,
)
from modules.backend.services.base import BaseService


class SurveyUpdate(BaseModel):
    title: str | None = None
    contact_id: str | None = None
    arranged_date: datetime | None = None
    tags: list[str] | None = None


def _integrity_error(message: str) -> IntegrityError:
    return IntegrityError("statement", {}, Exception(message))


@pytest.fixture
def service(mock_db_session) -> BaseService:
    return BaseService(mock_db_session)


class TestExecuteDbOperation:
    """Tests for _execute_db_operation."""

    async def test_returns_result(self, service):
        async def operation():
            return {"id": "c-1", "name": "Aegean Hotel"}

        assert await service._execute_db_operation("create_customer", operation()) == {
            "id": "c-1",
            "name": "Aegean Hotel",
        }

    @pytest.mark.parametrize(
        "message",
        ["UNIQUE constraint failed: leads.lead_number", "duplicate key value violates unique constraint"],
    )
    async def test_duplicates_are_conflicts(self, service, message):
        async def operation():
            raise _integrity_error(message)

        with pytest.raises(ConflictError, match="already exists"):
            await service._execute_db_operation("create_lead", operation())

    async def test_missing_reference_is_validation_error(self, service):
        async def operation():
            raise _integrity_error("FOREIGN KEY constraint failed")

        with pytest.raises(ValidationError) as exc_info:
            await service._execute_db_operation("create_lead", operation())

        assert exc_info.value.details == {"operation": "create_lead"}

    async def test_other_integrity_errors(self, service):
        async def operation():
            raise _integrity_error("NOT NULL constraint failed: customers.name")

        with pytest.raises(DatabaseError, match="constraint violation: create_customer"):
            await service._execute_db_operation("create_customer", operation())

    async def test_sqlalchemy_errors(self, service):
        async def operation():
            raise SQLAlchemyError("Connection lost")

        with pytest.raises(DatabaseError, match="operation failed: list_leads"):
            await service._execute_db_operation("list_leads", operation())


class TestChanges:
    """Tests for the partial update helper."""

    def test_only_sent_fields(self, service):
        assert service._changes(SurveyUpdate(title="Rack room")) == {"title": "Rack room"}

    def test_explicit_null_is_kept(self, service):
        assert service._changes(SurveyUpdate(contact_id=None)) == {"contact_id": None}

    def test_blank_reference_clears(self, service):
        changes = service._changes(
            SurveyUpdate(title="", contact_id=""),
            blank_to_null=("contact_id",),
        )

        assert changes == {"title": "", "contact_id": None}

    def test_dates_become_naive_utc(self, service):
        athens = timezone(timedelta(hours=3))
        changes = service._changes(
            SurveyUpdate(arranged_date=datetime(2026, 10, 19, 12, 0, tzinfo=athens)),
            dates=("arranged_date",),
        )

        assert changes["arranged_date"] == datetime(2026, 10, 19, 9, 0)

    def test_exclude(self, service):
        changes = service._changes(SurveyUpdate(title="x", tags=["a"]), exclude={"tags"})

        assert changes == {"title": "x"}


class TestValidateRequired:
    """Tests for _validate_required."""

    def test_passes(self, service):
        service._validate_required({"entity_id": "s-1", "folder": "info"}, ["entity_id", "folder"])

    def test_reports_every_missing_or_blank_field(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service._validate_required({"entity_id": "  ", "folder": None}, ["entity_id", "folder", "type"])

        assert exc_info.value.details["missing_fields"] == ["entity_id", "folder", "type"]


class TestValidateStringLength:
    """Tests for _validate_string_length."""

    def test_in_bounds(self, service):
        service._validate_string_length("secret-password", "password", min_length=8, max_length=72)

    def test_too_short(self, service):
        with pytest.raises(ValidationError, match="password too short") as exc_info:
            service._validate_string_length("abc", "password", min_length=8)

        assert exc_info.value.details == {"password": "Minimum length is 8"}

    def test_too_long(self, service):
        with pytest.raises(ValidationError, match="name too long"):
            service._validate_string_length("a" * 300, "name", max_length=255)


class TestLogging:
    """Log helpers carry the service class name."""

    def test_log_operation(self, mock_db_session):
        class CustomerService(BaseService):
            pass

        service = CustomerService(mock_db_session)
        with patch.object(service._logger, "info") as mock_info:
            service._log_operation("Creating customer", name="Aegean Hotel")

        extra = mock_info.call_args.kwargs["extra"]
        assert extra == {"service": "CustomerService", "name": "Aegean Hotel"}

    def test_log_debug(self, service):
        with patch.object(service._logger, "debug") as mock_debug:
            service._log_debug("Site survey created", site_survey_id="s-1")

        assert mock_debug.call_args.kwargs["extra"]["site_survey_id"] == "s-1"

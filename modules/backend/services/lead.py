"""
Lead Service.

Business logic for sales leads: sequential lead numbers, the stage-change
audit trail, and the optional site survey created with a lead.
"""

import re

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import NotFoundError
from modules.backend.core.utils import blank_to_none, naive_utc
from modules.backend.models.lead import Lead, LeadStatusChange
from modules.backend.models.site_survey import (
    DEFAULT_SITE_SURVEY_STATUS,
    SiteSurvey,
    SiteSurveyType,
)
from modules.backend.models.user import User
from modules.backend.repositories.customer import ContactRepository, CustomerRepository
from modules.backend.repositories.lead import LeadRepository, LeadStatusChangeRepository
from modules.backend.repositories.site_survey import SiteSurveyRepository
from modules.backend.repositories.user import UserRepository
from modules.backend.schemas.lead import LeadCreate, LeadUpdate
from modules.backend.services.base import BaseService

LEAD_NUMBER_PREFIX = "LL"
_LEAD_NUMBER_PATTERN = re.compile(rf"^{LEAD_NUMBER_PREFIX}(\d+)$")


def next_lead_number(latest: str | None) -> str:
    """
    Lead number following `latest`: LL001, LL002, ...

    Numbers grow past three digits once LL999 is reached.
    """
    match = _LEAD_NUMBER_PATTERN.match(latest or "")
    sequence = int(match.group(1)) + 1 if match else 1
    return f"{LEAD_NUMBER_PREFIX}{sequence:03d}"


class LeadService(BaseService):
    """Service for lead business logic."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = LeadRepository(session)
        self.status_changes = LeadStatusChangeRepository(session)
        self.customers = CustomerRepository(session)
        self.contacts = ContactRepository(session)
        self.users = UserRepository(session)
        self.surveys = SiteSurveyRepository(session)

    async def _check_references(self, values: dict) -> None:
        if values.get("customer_id") and not await self.customers.exists(values["customer_id"]):
            raise NotFoundError("Customer not found")
        if values.get("contact_id") and not await self.contacts.exists(values["contact_id"]):
            raise NotFoundError("Contact not found")
        for field in ("owner_id", "assignee_id"):
            if values.get(field) and not await self.users.exists(values[field]):
                raise NotFoundError("User not found")

    async def list_leads(
        self,
        search: str | None = None,
        stage: str | None = None,
        status: str | None = None,
        priority: str | None = None,
        assignee_id: str | None = None,
        owner_id: str | None = None,
        customer_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Lead], int]:
        return await self.repo.list_filtered(
            search=search,
            stage=stage,
            status=status,
            priority=priority,
            assignee_id=assignee_id,
            owner_id=owner_id,
            customer_id=customer_id,
            limit=limit,
            offset=offset,
        )

    async def get_lead(self, lead_id: str) -> Lead:
        return await self.repo.get_by_id(lead_id)

    async def create_lead(self, data: LeadCreate, current_user: User) -> tuple[Lead, SiteSurvey | None]:
        """
        Create a lead with the next lead number.

        Records the creation as the first status change. When a site survey
        is requested and a customer is given, a survey linked to the lead is
        created as well.

        Returns:
            Tuple of (lead, auto-created site survey or None)

        Raises:
            NotFoundError: If a referenced customer, contact or user is missing
        """
        values = data.model_dump()
        for field in ("customer_id", "contact_id", "owner_id", "assignee_id"):
            values[field] = blank_to_none(values[field])
        values["owner_id"] = values["owner_id"] or current_user.id
        values["expected_close_date"] = naive_utc(values["expected_close_date"])
        await self._check_references(values)

        lead_number = next_lead_number(await self.repo.get_latest_lead_number())
        self._log_operation("Creating lead", lead_number=lead_number, title=data.title)

        lead = await self._execute_db_operation(
            "create_lead",
            self.repo.create(lead_number=lead_number, **values),
        )
        await self._execute_db_operation(
            "record_lead_creation",
            self.status_changes.create(
                lead_id=lead.id,
                from_stage=None,
                to_stage=lead.stage,
                changed_by_id=current_user.id,
                note="Lead created",
            ),
        )

        survey = None
        if lead.requested_site_survey and lead.customer_id:
            survey = await self._execute_db_operation(
                "create_lead_site_survey",
                self.surveys.create(
                    title=f"Site Survey - {lead.title}",
                    description=lead.description,
                    type=SiteSurveyType.COMPREHENSIVE.value,
                    status=DEFAULT_SITE_SURVEY_STATUS,
                    customer_id=lead.customer_id,
                    contact_id=lead.contact_id,
                    lead_id=lead.id,
                    assign_from_id=current_user.id,
                    assign_to_id=lead.assignee_id,
                ),
            )
            self._log_operation("Site survey created for lead", lead_id=lead.id, site_survey_id=survey.id)

        return lead, survey

    async def update_lead(self, lead_id: str, data: LeadUpdate) -> Lead:
        update_data = self._changes(
            data,
            blank_to_null=("customer_id", "contact_id", "owner_id", "assignee_id"),
            dates=("expected_close_date",),
        )

        if not update_data:
            return await self.repo.get_by_id(lead_id)

        await self._check_references(update_data)
        self._log_operation("Updating lead", lead_id=lead_id, fields=list(update_data.keys()))
        return await self._execute_db_operation(
            "update_lead",
            self.repo.update(lead_id, **update_data),
        )

    async def delete_lead(self, lead_id: str) -> None:
        """Delete a lead. Linked site surveys are kept and unlinked by the database."""
        self._log_operation("Deleting lead", lead_id=lead_id)
        await self._execute_db_operation("delete_lead", self.repo.delete(lead_id))

    async def change_status(
        self,
        lead_id: str,
        to_stage: str,
        note: str | None,
        current_user: User,
    ) -> Lead:
        """
        Move a lead to another stage and record the change.

        Nothing is written when the lead is already at `to_stage`.
        """
        lead = await self.repo.get_by_id(lead_id)
        if lead.stage == to_stage:
            return lead

        from_stage = lead.stage
        self._log_operation(
            "Changing lead stage",
            lead_id=lead_id,
            from_stage=from_stage,
            to_stage=to_stage,
        )
        await self._execute_db_operation(
            "record_lead_status_change",
            self.status_changes.create(
                lead_id=lead_id,
                from_stage=from_stage,
                to_stage=to_stage,
                changed_by_id=current_user.id,
                note=note,
            ),
        )
        return await self._execute_db_operation(
            "change_lead_stage",
            self.repo.update(lead_id, stage=to_stage),
        )

    async def list_status_changes(self, lead_id: str) -> list[LeadStatusChange]:
        await self.repo.get_by_id(lead_id)
        return await self.status_changes.list_for_lead(lead_id)

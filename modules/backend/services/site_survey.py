"""
Site Survey Service.

Business logic for site surveys: CRUD, the workflow stage (which also
moves the linked lead through the sales pipeline), and the equipment
infrastructure tree used for the bill of materials.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import NotFoundError
from modules.backend.core.utils import blank_to_none, naive_utc
from modules.backend.models.file import FileEntityType
from modules.backend.models.lead import LeadStage
from modules.backend.models.site_survey import (
    DEFAULT_SITE_SURVEY_STATUS,
    SiteSurvey,
    SiteSurveyStage,
    SiteSurveyType,
)
from modules.backend.models.user import User
from modules.backend.repositories.customer import ContactRepository, CustomerRepository
from modules.backend.repositories.file import FileRepository
from modules.backend.repositories.lead import LeadRepository, LeadStatusChangeRepository
from modules.backend.repositories.site_survey import SiteSurveyRepository
from modules.backend.schemas.file import FileResponse
from modules.backend.schemas.site_survey import (
    InfrastructureData,
    SiteSurveyCreate,
    SiteSurveyDetail,
    SiteSurveyUpdate,
)
from modules.backend.services.base import BaseService

# Lead stage a linked lead moves to when the survey reaches a stage
STAGE_TO_LEAD_STAGE = {
    SiteSurveyStage.INFRASTRUCTURE_PLANNING.value: LeadStage.LEAD_WORKING.value,
    SiteSurveyStage.REQUIREMENTS_AND_PRODUCTS.value: LeadStage.OPP_DISCOVERY.value,
    SiteSurveyStage.PRICING_COMPLETED.value: LeadStage.OPP_PROPOSAL.value,
    SiteSurveyStage.DOCUMENTS_READY.value: LeadStage.QUOTE_DRAFT.value,
}

CONNECTION_MARKER = "connection"

# Fields where an empty string means "clear"
_NULLABLE_ON_BLANK = ("contact_id", "assign_from_id", "assign_to_id", "email", "lead_id")


def split_infrastructure(data: list[dict[str, Any]] | None) -> InfrastructureData:
    """Separate buildings from connection entries stored in the same list."""
    buildings: list[dict[str, Any]] = []
    connections: list[dict[str, Any]] = []
    for entry in data or []:
        if isinstance(entry, dict) and entry.get("type") == CONNECTION_MARKER:
            connection = dict(entry)
            connection.pop("type")
            connections.append(connection)
        else:
            buildings.append(entry)
    return InfrastructureData(buildings=buildings, building_connections=connections)


def merge_infrastructure(data: InfrastructureData) -> list[dict[str, Any]]:
    """Store buildings and connections together, connections tagged by type."""
    return [
        *data.buildings,
        *({**connection, "type": CONNECTION_MARKER} for connection in data.building_connections),
    ]


class SiteSurveyService(BaseService):
    """Service for site survey business logic."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = SiteSurveyRepository(session)
        self.customers = CustomerRepository(session)
        self.contacts = ContactRepository(session)
        self.leads = LeadRepository(session)
        self.status_changes = LeadStatusChangeRepository(session)
        self.files = FileRepository(session)

    async def list_surveys(
        self,
        search: str | None = None,
        survey_type: str | None = None,
        status: str | None = None,
        customer_id: str | None = None,
        assigned_to: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[SiteSurvey], int]:
        return await self.repo.list_filtered(
            search=search,
            survey_type=survey_type,
            status=status,
            customer_id=customer_id,
            assigned_to=assigned_to,
            limit=limit,
            offset=offset,
        )

    async def create_survey(self, data: SiteSurveyCreate, current_user: User) -> SiteSurvey:
        """
        Create a site survey.

        The assigner defaults to the current user. Notification of the
        assignee is the caller's concern once the survey is persisted.

        Raises:
            NotFoundError: If the customer or the contact does not exist
        """
        if not await self.customers.exists(data.customer_id):
            raise NotFoundError("Customer not found")
        contact_id = blank_to_none(data.contact_id)
        if contact_id and not await self.contacts.exists(contact_id):
            raise NotFoundError("Contact not found")

        self._log_operation(
            "Creating site survey",
            title=data.title,
            customer_id=data.customer_id,
            assign_to_id=data.assign_to_id,
        )
        survey = await self._execute_db_operation(
            "create_site_survey",
            self.repo.create(
                title=data.title,
                description=data.description,
                type=data.type or SiteSurveyType.COMPREHENSIVE.value,
                status=data.status or DEFAULT_SITE_SURVEY_STATUS,
                customer_id=data.customer_id,
                contact_id=contact_id,
                lead_id=blank_to_none(data.lead_id),
                arranged_date=naive_utc(data.arranged_date),
                assign_from_id=blank_to_none(data.assign_from_id) or current_user.id,
                assign_to_id=blank_to_none(data.assign_to_id),
                address=data.address,
                city=data.city,
                phone=data.phone,
                email=data.email,
            ),
        )
        self._log_debug("Site survey created", site_survey_id=survey.id)
        return survey

    async def get_survey(self, survey_id: str) -> SiteSurvey:
        return await self.repo.get_by_id(survey_id)

    async def get_survey_detail(self, survey_id: str) -> SiteSurveyDetail:
        """Survey with contact, assignees and its SITESURVEY files."""
        survey = await self.repo.get_by_id(survey_id)
        files = await self.files.list_for_entity(survey_id, FileEntityType.SITESURVEY.value)
        return SiteSurveyDetail.model_validate(survey).model_copy(
            update={"files": [FileResponse.model_validate(file) for file in files]},
        )

    async def update_survey(self, survey_id: str, data: SiteSurveyUpdate) -> SiteSurvey:
        """
        Partially update a survey.

        Raises:
            NotFoundError: If the survey or a newly referenced contact does
                not exist
        """
        update_data = self._changes(data, blank_to_null=_NULLABLE_ON_BLANK, dates=("arranged_date",))

        if not update_data:
            return await self.repo.get_by_id(survey_id)

        if update_data.get("contact_id") and not await self.contacts.exists(update_data["contact_id"]):
            raise NotFoundError("Contact not found")

        self._log_operation(
            "Updating site survey",
            site_survey_id=survey_id,
            fields=list(update_data.keys()),
        )
        return await self._execute_db_operation(
            "update_site_survey",
            self.repo.update(survey_id, **update_data),
        )

    async def delete_survey(self, survey_id: str) -> None:
        self._log_operation("Deleting site survey", site_survey_id=survey_id)
        await self._execute_db_operation("delete_site_survey", self.repo.delete(survey_id))

    async def update_stage(self, survey_id: str, stage: str, current_user: User) -> SiteSurvey:
        """
        Set the workflow stage and advance the linked lead.

        The lead move is recorded as a status change by the current user;
        nothing is recorded when the lead is already at the target stage.
        """
        survey = await self._execute_db_operation(
            "update_site_survey_stage",
            self.repo.update(survey_id, stage=stage),
        )
        self._log_operation("Site survey stage changed", site_survey_id=survey_id, stage=stage)

        lead_stage = STAGE_TO_LEAD_STAGE.get(stage)
        if not survey.lead_id or lead_stage is None:
            return survey

        lead = await self.leads.get_by_id_or_none(survey.lead_id)
        if lead is None or lead.stage == lead_stage:
            return survey

        from_stage = lead.stage
        await self._execute_db_operation(
            "advance_lead_stage",
            self.leads.update(lead.id, stage=lead_stage),
        )
        await self._execute_db_operation(
            "record_lead_status_change",
            self.status_changes.create(
                lead_id=lead.id,
                from_stage=from_stage,
                to_stage=lead_stage,
                changed_by_id=current_user.id,
                note=f"Site survey stage changed to {stage}",
            ),
        )
        self._log_operation(
            "Lead stage advanced from site survey",
            lead_id=lead.id,
            from_stage=from_stage,
            to_stage=lead_stage,
        )
        return survey

    async def get_infrastructure(self, survey_id: str) -> InfrastructureData:
        survey = await self.repo.get_by_id(survey_id)
        return split_infrastructure(survey.infrastructure_data)

    async def save_infrastructure(
        self,
        survey_id: str,
        data: InfrastructureData,
    ) -> InfrastructureData:
        self._log_operation(
            "Saving site survey infrastructure",
            site_survey_id=survey_id,
            buildings=len(data.buildings),
            connections=len(data.building_connections),
        )
        survey = await self._execute_db_operation(
            "save_infrastructure",
            self.repo.update(survey_id, infrastructure_data=merge_infrastructure(data)),
        )
        return split_infrastructure(survey.infrastructure_data)

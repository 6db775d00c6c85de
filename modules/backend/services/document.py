"""
Document Service.

Generates site survey documents: the bill of materials workbook (also
stored on the CDN as a versioned file of the lead or customer), the
cabling survey workbook and the Word site survey report. Rendering runs
on the shared thread pool.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.concurrency import run_blocking
from modules.backend.core.config import get_app_config
from modules.backend.core.exceptions import ValidationError
from modules.backend.core.utils import loads_json, timestamp_ms, utc_now
from modules.backend.documents.bom_excel import (
    XLSX_CONTENT_TYPE,
    BomLine,
    build_bom_workbook,
    collect_equipment,
    enrich_equipment,
)
from modules.backend.documents.cabling_excel import build_cabling_workbook
from modules.backend.documents.greeklish import create_safe_filename
from modules.backend.documents.site_survey_docx import (
    DOCX_CONTENT_TYPE,
    build_site_survey_document,
)
from modules.backend.documents.versioning import DocumentVersionManager
from modules.backend.integrations.bunny import BunnyStorageClient
from modules.backend.models.file import FileEntityType
from modules.backend.models.site_survey import SiteSurvey
from modules.backend.repositories.cabling import CablingRepository
from modules.backend.repositories.catalog import ProductRepository
from modules.backend.repositories.file import FileRepository
from modules.backend.repositories.lead import LeadRepository
from modules.backend.repositories.site_survey import SiteSurveyRepository
from modules.backend.schemas.document import BomGenerationResponse
from modules.backend.schemas.file import FileResponse
from modules.backend.services.base import BaseService
from modules.backend.services.file import sanitize_file_name
from modules.backend.services.site_survey import split_infrastructure

BOM_DOCUMENT_TYPE = "BOM"


@dataclass
class RenderedDocument:
    filename: str
    content: bytes
    content_type: str


@dataclass
class _BomOwner:
    """Entity a generated BOM is filed under."""

    entity_id: str
    entity_type: str
    reference: str

    @property
    def folder(self) -> str:
        return "leads" if self.entity_type == FileEntityType.LEAD.value else "customers"


class DocumentService(BaseService):
    """Service for generated site survey documents."""

    def __init__(self, session: AsyncSession, storage: BunnyStorageClient | None = None) -> None:
        super().__init__(session)
        self.surveys = SiteSurveyRepository(session)
        self.products = ProductRepository(session)
        self.leads = LeadRepository(session)
        self.files = FileRepository(session)
        self.cabling = CablingRepository(session)
        self.storage = storage

    async def _bom_lines(self, survey: SiteSurvey) -> list[BomLine]:
        """
        Product lines of a survey's equipment tree.

        Raises:
            ValidationError: If the survey has no buildings or no products
        """
        buildings = split_infrastructure(survey.infrastructure_data).buildings
        if not buildings:
            raise ValidationError("No buildings data found. Complete the infrastructure step first.")

        equipment = collect_equipment(buildings)
        if not equipment:
            raise ValidationError("No products found in buildings. Add products to the equipment first.")

        products = await self.products.get_many(sorted({product_id for product_id, _ in equipment}))
        return enrich_equipment(equipment, {product.id: product for product in products})

    async def _bom_owner(self, survey: SiteSurvey) -> _BomOwner:
        """The linked lead when there is one, otherwise the customer."""
        if survey.lead_id:
            lead = await self.leads.get_by_id_or_none(survey.lead_id)
            if lead is not None:
                return _BomOwner(lead.id, FileEntityType.LEAD.value, lead.lead_number)
        customer_name = survey.customer.name if survey.customer else "REF"
        return _BomOwner(survey.customer_id, FileEntityType.CUSTOMER.value, customer_name)

    async def _render_bom(self, survey: SiteSurvey, lines: list[BomLine], owner: _BomOwner) -> bytes:
        customer_name = survey.customer.name if survey.customer else "Customer"
        return await run_blocking(
            build_bom_workbook,
            lines,
            customer_name,
            owner.reference,
            owner.entity_type == FileEntityType.LEAD.value,
            utc_now(),
        )

    async def render_bom(self, survey_id: str) -> RenderedDocument:
        """Render the BOM workbook without storing it."""
        survey = await self.surveys.get_by_id(survey_id)
        lines = await self._bom_lines(survey)
        owner = await self._bom_owner(survey)
        content = await self._render_bom(survey, lines, owner)
        return RenderedDocument(
            filename=create_safe_filename(owner.reference, BOM_DOCUMENT_TYPE, extension=".xlsx"),
            content=content,
            content_type=XLSX_CONTENT_TYPE,
        )

    async def generate_bom(self, survey_id: str) -> BomGenerationResponse:
        """
        Render the BOM, upload it, and record it as the next version.

        Raises:
            NotFoundError: If the site survey does not exist
            ValidationError: If the survey has no buildings or no products
            ExternalServiceError: If the CDN upload fails
        """
        survey = await self.surveys.get_by_id(survey_id)
        lines = await self._bom_lines(survey)
        owner = await self._bom_owner(survey)
        content = await self._render_bom(survey, lines, owner)

        max_versions = get_app_config().integrations.documents.max_versions
        versions = DocumentVersionManager(self.session, self.storage, max_versions=max_versions)
        version = await self._execute_db_operation(
            "prepare_bom_version",
            versions.prepare(owner.entity_id, owner.entity_type, owner.reference, BOM_DOCUMENT_TYPE),
        )

        filename = create_safe_filename(owner.reference, BOM_DOCUMENT_TYPE, version, ".xlsx")
        path = f"{owner.folder}/{owner.entity_id}/bom/{timestamp_ms()}_{sanitize_file_name(filename)}"
        url = await self.storage.put(path, content, XLSX_CONTENT_TYPE)

        record = await self._execute_db_operation(
            "create_bom_file",
            self.files.create(
                entity_id=owner.entity_id,
                type=owner.entity_type,
                name=filename,
                title=f"BOM v{version}",
                filetype=XLSX_CONTENT_TYPE,
                url=url,
                description=f"Bill of Materials (BOM) - {len(lines)} products (v{version})",
                size=len(content),
            ),
        )
        self._log_operation(
            "BOM generated",
            site_survey_id=survey_id,
            entity_type=owner.entity_type,
            entity_id=owner.entity_id,
            version=version,
            products=len(lines),
        )
        return BomGenerationResponse(
            file=FileResponse.model_validate(record),
            version=version,
            product_count=len(lines),
            total_quantity=sum(line.quantity for line in lines),
            linked_to=owner.entity_type,
        )

    async def _cabling_snapshot(self, survey: SiteSurvey) -> tuple[list[dict[str, Any]], list[dict[str, Any]], Any]:
        """Saved cabling tree, falling back to the infrastructure tree."""
        cabling = await self.cabling.get_by_site_survey(survey.id)
        if cabling is not None:
            buildings = loads_json(cabling.general_notes, default=[])
            connections = loads_json(cabling.building_connections, default=[])
            return buildings, connections, cabling

        infrastructure = split_infrastructure(survey.infrastructure_data)
        return infrastructure.buildings, infrastructure.building_connections, None

    async def render_cabling_report(self, survey_id: str) -> RenderedDocument:
        survey = await self.surveys.get_by_id(survey_id)
        buildings, connections, cabling = await self._cabling_snapshot(survey)
        content = await run_blocking(
            build_cabling_workbook,
            survey,
            buildings,
            connections,
            cabling.created_at if cabling else survey.created_at,
            cabling.updated_at if cabling else survey.updated_at,
        )
        self._log_operation("Cabling report rendered", site_survey_id=survey_id)
        return RenderedDocument(
            filename=create_safe_filename(survey.title, "Cabling Survey", extension=".xlsx"),
            content=content,
            content_type=XLSX_CONTENT_TYPE,
        )

    async def render_site_survey_report(self, survey_id: str) -> RenderedDocument:
        survey = await self.surveys.get_by_id(survey_id)
        buildings, _, _ = await self._cabling_snapshot(survey)
        files = await self.files.list_for_entity(survey_id, FileEntityType.SITESURVEY.value)
        content = await run_blocking(
            build_site_survey_document,
            survey,
            get_app_config().company,
            buildings,
            files,
            utc_now(),
        )
        self._log_operation("Site survey report rendered", site_survey_id=survey_id)
        return RenderedDocument(
            filename=create_safe_filename(survey.title, "Site Survey", extension=".docx"),
            content=content,
            content_type=DOCX_CONTENT_TYPE,
        )

"""
Documents API Endpoints.

Generated site survey documents: the stored and versioned BOM, and
on-the-fly downloads of the BOM, cabling survey and site survey report.
"""

from urllib.parse import quote

from fastapi import APIRouter
from fastapi.responses import Response

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId, StaffUser, Storage
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.document import BomGenerationResponse
from modules.backend.services.document import DocumentService, RenderedDocument

router = APIRouter()


def _download(document: RenderedDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.content_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(document.filename)}",
        },
    )


@router.post(
    "/site-surveys/{survey_id}/bom",
    response_model=ApiResponse[BomGenerationResponse],
    status_code=201,
    summary="Generate and store the BOM",
    description=(
        "Builds the bill of materials from the survey's equipment, uploads "
        "it, and files it as the next version under the lead (or the "
        "customer when the survey has no lead). At most 10 versions are kept."
    ),
)
async def generate_bom(
    survey_id: str,
    db: DbSession,
    storage: Storage,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[BomGenerationResponse]:
    service = DocumentService(db, storage)
    return ApiResponse(data=await service.generate_bom(survey_id))


@router.get(
    "/site-surveys/{survey_id}/bom.xlsx",
    summary="Download the BOM",
    response_class=Response,
)
async def download_bom(
    survey_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> Response:
    service = DocumentService(db)
    return _download(await service.render_bom(survey_id))


@router.get(
    "/site-surveys/{survey_id}/cabling.xlsx",
    summary="Download the cabling survey",
    response_class=Response,
)
async def download_cabling_report(
    survey_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> Response:
    service = DocumentService(db)
    return _download(await service.render_cabling_report(survey_id))


@router.get(
    "/site-surveys/{survey_id}/report.docx",
    summary="Download the site survey report",
    response_class=Response,
)
async def download_site_survey_report(
    survey_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> Response:
    service = DocumentService(db)
    return _download(await service.render_site_survey_report(survey_id))

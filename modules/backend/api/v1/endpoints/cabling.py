"""
Cabling API Endpoints.

Save and load the building / floor / rack / room tree of a site survey.
Field names are camelCase on the wire.
"""

from fastapi import APIRouter

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId, StaffUser
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.cabling import CablingSurveyPayload, CablingSurveyResponse
from modules.backend.services.cabling import CablingService

router = APIRouter()


@router.get(
    "/site-surveys/{site_survey_id}",
    response_model=ApiResponse[CablingSurveyResponse],
    summary="Load a cabling survey",
)
async def load_cabling_survey(
    site_survey_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[CablingSurveyResponse]:
    service = CablingService(db)
    return ApiResponse(data=await service.load(site_survey_id))


@router.put(
    "/site-surveys/{site_survey_id}",
    response_model=ApiResponse[CablingSurveyResponse],
    summary="Save a cabling survey",
    description=(
        "Buildings and floors are matched by name. Image lists replace the "
        "stored images only when non-empty; listed floor racks replace all "
        "racks of their floor."
    ),
)
async def save_cabling_survey(
    site_survey_id: str,
    payload: CablingSurveyPayload,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[CablingSurveyResponse]:
    service = CablingService(db)
    return ApiResponse(data=await service.save(site_survey_id, payload))

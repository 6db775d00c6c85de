"""
Site Surveys API Endpoints.

CRUD, the workflow stage, and the infrastructure (equipment) tree of a
site survey. Creating a survey notifies the assignee after the response
is sent.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId, StaffUser
from modules.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from modules.backend.models.site_survey import SiteSurveyType
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.site_survey import (
    InfrastructureData,
    SiteSurveyCreate,
    SiteSurveyDetail,
    SiteSurveyResponse,
    SiteSurveyStageResponse,
    SiteSurveyStageUpdate,
    SiteSurveyUpdate,
)
from modules.backend.services.site_survey import SiteSurveyService
from modules.backend.tasks import notifications

router = APIRouter()


@router.get(
    "",
    summary="List site surveys (paginated)",
    description=(
        "Newest first. Search matches title, description, address, city, "
        "phone, email and customer name."
    ),
)
async def list_site_surveys(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    pagination: PaginationParams = Depends(get_pagination_params),
    search: str | None = Query(default=None, max_length=100),
    type: SiteSurveyType | None = Query(default=None),
    status: str | None = Query(default=None),
    customer_id: str | None = Query(default=None),
    assigned_to: str | None = Query(default=None, description="Assignee user id"),
) -> dict[str, Any]:
    service = SiteSurveyService(db)
    surveys, total = await service.list_surveys(
        search=search,
        survey_type=type.value if type else None,
        status=status,
        customer_id=customer_id,
        assigned_to=assigned_to,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return create_paginated_response(
        items=surveys,
        item_schema=SiteSurveyResponse,
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
        request_id=request_id,
    )


@router.post(
    "",
    response_model=ApiResponse[SiteSurveyResponse],
    status_code=201,
    summary="Create a site survey",
    description="The assignee is notified by mail and calendar event once the survey is stored.",
)
async def create_site_survey(
    data: SiteSurveyCreate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
    background_tasks: BackgroundTasks,
) -> ApiResponse[SiteSurveyResponse]:
    service = SiteSurveyService(db)
    survey = await service.create_survey(data, user)
    background_tasks.add_task(
        notifications.dispatch_notification,
        "site_survey_assigned",
        notifications.site_survey_payload(survey),
    )
    return ApiResponse(data=SiteSurveyResponse.model_validate(survey))


@router.get(
    "/{survey_id}",
    response_model=ApiResponse[SiteSurveyDetail],
    summary="Get a site survey",
    description="Includes customer, contact, assignees and attached files.",
)
async def get_site_survey(
    survey_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[SiteSurveyDetail]:
    service = SiteSurveyService(db)
    return ApiResponse(data=await service.get_survey_detail(survey_id))


@router.patch(
    "/{survey_id}",
    response_model=ApiResponse[SiteSurveyResponse],
    summary="Update a site survey",
    description="Empty strings clear contact, assigner, assignee and email.",
)
async def update_site_survey(
    survey_id: str,
    data: SiteSurveyUpdate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[SiteSurveyResponse]:
    service = SiteSurveyService(db)
    survey = await service.update_survey(survey_id, data)
    return ApiResponse(data=SiteSurveyResponse.model_validate(survey))


@router.delete("/{survey_id}", status_code=204, summary="Delete a site survey")
async def delete_site_survey(
    survey_id: str,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> None:
    service = SiteSurveyService(db)
    await service.delete_survey(survey_id)


@router.get(
    "/{survey_id}/stage",
    response_model=ApiResponse[SiteSurveyStageResponse],
    summary="Get the workflow stage",
)
async def get_site_survey_stage(
    survey_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[SiteSurveyStageResponse]:
    service = SiteSurveyService(db)
    survey = await service.get_survey(survey_id)
    return ApiResponse(data=SiteSurveyStageResponse.model_validate(survey))


@router.put(
    "/{survey_id}/stage",
    response_model=ApiResponse[SiteSurveyStageResponse],
    summary="Set the workflow stage",
    description="A linked lead is moved to the matching pipeline stage.",
)
async def update_site_survey_stage(
    survey_id: str,
    data: SiteSurveyStageUpdate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[SiteSurveyStageResponse]:
    service = SiteSurveyService(db)
    survey = await service.update_stage(survey_id, data.stage, user)
    return ApiResponse(data=SiteSurveyStageResponse.model_validate(survey))


@router.get(
    "/{survey_id}/infrastructure",
    response_model=ApiResponse[InfrastructureData],
    summary="Get the infrastructure tree",
)
async def get_infrastructure(
    survey_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[InfrastructureData]:
    service = SiteSurveyService(db)
    return ApiResponse(data=await service.get_infrastructure(survey_id))


@router.put(
    "/{survey_id}/infrastructure",
    response_model=ApiResponse[InfrastructureData],
    summary="Save the infrastructure tree",
    description="Buildings with their equipment and the connections between buildings.",
)
async def save_infrastructure(
    survey_id: str,
    data: InfrastructureData,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[InfrastructureData]:
    service = SiteSurveyService(db)
    return ApiResponse(data=await service.save_infrastructure(survey_id, data))

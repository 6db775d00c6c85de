"""
Leads API Endpoints.

Sales pipeline leads and their stage history.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId, StaffUser
from modules.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from modules.backend.models.lead import LeadPriority, LeadStage, LeadStatus
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.lead import (
    LeadCreate,
    LeadResponse,
    LeadStatusChangeRequest,
    LeadStatusChangeResponse,
    LeadUpdate,
)
from modules.backend.services.lead import LeadService
from modules.backend.tasks import notifications

router = APIRouter()


@router.get(
    "",
    summary="List leads (paginated)",
    description="Search matches title, description and lead number.",
)
async def list_leads(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    pagination: PaginationParams = Depends(get_pagination_params),
    search: str | None = Query(default=None, max_length=100),
    stage: LeadStage | None = Query(default=None),
    status: LeadStatus | None = Query(default=None),
    priority: LeadPriority | None = Query(default=None),
    assignee_id: str | None = Query(default=None),
    owner_id: str | None = Query(default=None),
    customer_id: str | None = Query(default=None),
) -> dict[str, Any]:
    service = LeadService(db)
    leads, total = await service.list_leads(
        search=search,
        stage=stage.value if stage else None,
        status=status.value if status else None,
        priority=priority.value if priority else None,
        assignee_id=assignee_id,
        owner_id=owner_id,
        customer_id=customer_id,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return create_paginated_response(
        items=leads,
        item_schema=LeadResponse,
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
        request_id=request_id,
    )


@router.post(
    "",
    response_model=ApiResponse[LeadResponse],
    status_code=201,
    summary="Create a lead",
    description=(
        "Numbers the lead (LL001, LL002, ...). With `requested_site_survey` "
        "and a customer, a linked site survey is created too."
    ),
)
async def create_lead(
    data: LeadCreate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
    background_tasks: BackgroundTasks,
) -> ApiResponse[LeadResponse]:
    service = LeadService(db)
    lead, survey = await service.create_lead(data, user)
    background_tasks.add_task(
        notifications.dispatch_notification,
        "lead_created",
        notifications.lead_payload(lead, user),
    )
    if survey is not None:
        background_tasks.add_task(
            notifications.dispatch_notification,
            "site_survey_assigned",
            notifications.site_survey_payload(survey),
        )
    return ApiResponse(data=LeadResponse.model_validate(lead))


@router.get("/{lead_id}", response_model=ApiResponse[LeadResponse], summary="Get a lead")
async def get_lead(
    lead_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[LeadResponse]:
    service = LeadService(db)
    lead = await service.get_lead(lead_id)
    return ApiResponse(data=LeadResponse.model_validate(lead))


@router.patch(
    "/{lead_id}",
    response_model=ApiResponse[LeadResponse],
    summary="Update a lead",
    description="The stage is changed through the status endpoint.",
)
async def update_lead(
    lead_id: str,
    data: LeadUpdate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[LeadResponse]:
    service = LeadService(db)
    lead = await service.update_lead(lead_id, data)
    return ApiResponse(data=LeadResponse.model_validate(lead))


@router.delete("/{lead_id}", status_code=204, summary="Delete a lead")
async def delete_lead(
    lead_id: str,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> None:
    service = LeadService(db)
    await service.delete_lead(lead_id)


@router.post(
    "/{lead_id}/status",
    response_model=ApiResponse[LeadResponse],
    summary="Change the lead stage",
    description="Records the change in the lead's history. Unchanged stages are ignored.",
)
async def change_lead_status(
    lead_id: str,
    data: LeadStatusChangeRequest,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[LeadResponse]:
    service = LeadService(db)
    lead = await service.change_status(lead_id, data.to_stage, data.note, user)
    return ApiResponse(data=LeadResponse.model_validate(lead))


@router.get(
    "/{lead_id}/status-changes",
    response_model=ApiResponse[list[LeadStatusChangeResponse]],
    summary="Lead stage history",
)
async def list_lead_status_changes(
    lead_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[list[LeadStatusChangeResponse]]:
    service = LeadService(db)
    changes = await service.list_status_changes(lead_id)
    return ApiResponse(data=[LeadStatusChangeResponse.model_validate(change) for change in changes])

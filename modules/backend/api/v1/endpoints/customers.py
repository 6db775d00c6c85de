"""
Customers API Endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId, StaffUser
from modules.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.customer import (
    ContactCreate,
    ContactResponse,
    CustomerCreate,
    CustomerResponse,
    CustomerUpdate,
)
from modules.backend.services.customer import CustomerService

router = APIRouter()


@router.get("", summary="List customers (paginated)")
async def list_customers(
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
    pagination: PaginationParams = Depends(get_pagination_params),
    search: str | None = Query(default=None, max_length=100),
) -> dict[str, Any]:
    service = CustomerService(db)
    customers, total = await service.list_customers(
        search=search,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return create_paginated_response(
        items=customers,
        item_schema=CustomerResponse,
        total=total,
        limit=pagination.limit,
        offset=pagination.offset,
        request_id=request_id,
    )


@router.post("", response_model=ApiResponse[CustomerResponse], status_code=201, summary="Create a customer")
async def create_customer(
    data: CustomerCreate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[CustomerResponse]:
    service = CustomerService(db)
    customer = await service.create_customer(data)
    return ApiResponse(data=CustomerResponse.model_validate(customer))


@router.get("/{customer_id}", response_model=ApiResponse[CustomerResponse], summary="Get a customer")
async def get_customer(
    customer_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[CustomerResponse]:
    service = CustomerService(db)
    customer = await service.get_customer(customer_id)
    return ApiResponse(data=CustomerResponse.model_validate(customer))


@router.patch("/{customer_id}", response_model=ApiResponse[CustomerResponse], summary="Update a customer")
async def update_customer(
    customer_id: str,
    data: CustomerUpdate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[CustomerResponse]:
    service = CustomerService(db)
    customer = await service.update_customer(customer_id, data)
    return ApiResponse(data=CustomerResponse.model_validate(customer))


@router.delete("/{customer_id}", status_code=204, summary="Delete a customer")
async def delete_customer(
    customer_id: str,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> None:
    service = CustomerService(db)
    await service.delete_customer(customer_id)


@router.get(
    "/{customer_id}/contacts",
    response_model=ApiResponse[list[ContactResponse]],
    summary="List contacts of a customer",
)
async def list_contacts(
    customer_id: str,
    db: DbSession,
    request_id: RequestId,
    user: CurrentUser,
) -> ApiResponse[list[ContactResponse]]:
    service = CustomerService(db)
    contacts = await service.list_contacts(customer_id)
    return ApiResponse(data=[ContactResponse.model_validate(contact) for contact in contacts])


@router.post(
    "/{customer_id}/contacts",
    response_model=ApiResponse[ContactResponse],
    status_code=201,
    summary="Add a contact to a customer",
)
async def create_contact(
    customer_id: str,
    data: ContactCreate,
    db: DbSession,
    request_id: RequestId,
    user: StaffUser,
) -> ApiResponse[ContactResponse]:
    service = CustomerService(db)
    contact = await service.create_contact(customer_id, data)
    return ApiResponse(data=ContactResponse.model_validate(contact))

# backend/roombook/routes/v1/resources.py
"""
Resource routes - API v1

Endpoints:
    GET / - List resources (public)
    GET /{resource_id} - Resource details (public)
    GET /{resource_id}/availability - Advisory availability check (public)
    POST / - Create resource (admin)
    PATCH /{resource_id} - Partial update, rules merged (admin)
    DELETE /{resource_id} - Delete resource without upcoming reservations (admin)
"""

import asyncio
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import AwareDatetime

from ...api.dependencies import Principal, get_resource_service, require_admin
from ...core.exceptions import DomainException
from ...schemas.resource import (
    AvailabilityResponse,
    ResourceCreate,
    ResourceResponse,
    ResourceStatusLiteral,
    ResourceUpdate,
)
from ...services.resource_service import ResourceService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["resources-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=List[ResourceResponse])
async def list_resources(
    status_filter: Optional[ResourceStatusLiteral] = Query(None, alias="status"),
    location: Optional[str] = Query(None, max_length=255),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    resource_service: ResourceService = Depends(get_resource_service),
) -> List[ResourceResponse]:
    try:
        resources = await asyncio.to_thread(
            resource_service.list_resources,
            status=status_filter,
            location=location,
            skip=skip,
            limit=limit,
        )
        return [ResourceResponse.model_validate(resource) for resource in resources]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{resource_id}", response_model=ResourceResponse)
async def get_resource(
    resource_id: str,
    resource_service: ResourceService = Depends(get_resource_service),
) -> ResourceResponse:
    try:
        resource = await asyncio.to_thread(resource_service.get_resource, resource_id)
        return ResourceResponse.model_validate(resource)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{resource_id}/availability", response_model=AvailabilityResponse)
async def check_resource_availability(
    resource_id: str,
    start: AwareDatetime = Query(..., description="Interval start with UTC offset"),
    end: AwareDatetime = Query(..., description="Interval end with UTC offset"),
    resource_service: ResourceService = Depends(get_resource_service),
) -> AvailabilityResponse:
    """
    Check whether [start, end) could be booked right now.

    Advisory only: the answer can change before a reservation is created.
    """
    try:
        decision = await asyncio.to_thread(resource_service.get_availability, resource_id, start, end)
        return AvailabilityResponse(resource_id=resource_id, start=start, end=end, **decision.to_dict())
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
async def create_resource(
    payload: ResourceCreate,
    _: Principal = Depends(require_admin),
    resource_service: ResourceService = Depends(get_resource_service),
) -> ResourceResponse:
    data = payload.model_dump()
    data["availability_rules"] = payload.availability_rules.model_dump(exclude_none=True)
    try:
        resource = await asyncio.to_thread(resource_service.create_resource, data)
        return ResourceResponse.model_validate(resource)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{resource_id}", response_model=ResourceResponse)
async def update_resource(
    resource_id: str,
    payload: ResourceUpdate,
    _: Principal = Depends(require_admin),
    resource_service: ResourceService = Depends(get_resource_service),
) -> ResourceResponse:
    try:
        resource = await asyncio.to_thread(resource_service.update_resource, resource_id, payload.to_patch())
        return ResourceResponse.model_validate(resource)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resource(
    resource_id: str,
    _: Principal = Depends(require_admin),
    resource_service: ResourceService = Depends(get_resource_service),
) -> Response:
    try:
        await asyncio.to_thread(resource_service.delete_resource, resource_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

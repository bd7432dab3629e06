# backend/roombook/routes/v1/reservations.py
"""
Reservation routes - API v1

All business logic delegated to BookingService. Regular users only ever
see their own reservations; someone else's reservation answers 404.

Endpoints:
    GET / - List reservations (own; admins may filter by user)
    POST / - Create reservation
    GET /history - Current user's reservation history
    GET /{reservation_id} - Reservation details
    PATCH /{reservation_id} - Partial update (time, resource, notes)
    POST /{reservation_id}/cancel - Cancel
    DELETE /{reservation_id} - Hard delete (admin)
"""

import asyncio
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import AwareDatetime

from ...api.dependencies import Principal, get_booking_service, get_principal, require_admin
from ...core.config import settings
from ...core.exceptions import DomainException
from ...repositories.reservation_repository import ReservationFilters
from ...schemas.reservation import (
    ReservationCreate,
    ReservationResponse,
    ReservationStatusLiteral,
    ReservationUpdate,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reservations-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=List[ReservationResponse])
async def list_reservations(
    user_id: Optional[str] = Query(None, description="Admin only; ignored for regular users"),
    resource_id: Optional[str] = Query(None),
    status_filter: Optional[ReservationStatusLiteral] = Query(None, alias="status"),
    start_date: Optional[AwareDatetime] = Query(None, description="Reservations ending on/after"),
    end_date: Optional[AwareDatetime] = Query(None, description="Reservations starting on/before"),
    limit: int = Query(settings.reservation_list_default_limit, ge=1),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[ReservationResponse]:
    filters = ReservationFilters(
        user_id=user_id if principal.is_admin else principal.user_id,
        resource_id=resource_id,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    try:
        reservations = await asyncio.to_thread(booking_service.list_reservations, filters)
        return [ReservationResponse.model_validate(r) for r in reservations]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreate,
    principal: Principal = Depends(get_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> ReservationResponse:
    """
    Book [start_time, end_time) on a resource.

    Confirmation emails are sent in the background; the response does not
    wait for them.
    """
    try:
        reservation = await asyncio.to_thread(
            booking_service.create_reservation,
            principal.user_id,
            payload.resource_id,
            payload.start_time,
            payload.end_time,
            payload.notes,
        )
        return ReservationResponse.model_validate(reservation)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/history", response_model=List[ReservationResponse])
async def get_reservation_history(
    include_active: bool = Query(True),
    principal: Principal = Depends(get_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[ReservationResponse]:
    try:
        reservations = await asyncio.to_thread(
            booking_service.get_user_history, principal.user_id, include_active
        )
        return [ReservationResponse.model_validate(r) for r in reservations]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: str,
    principal: Principal = Depends(get_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> ReservationResponse:
    try:
        reservation = await asyncio.to_thread(
            booking_service.get_reservation, reservation_id, principal.user_id, principal.is_admin
        )
        return ReservationResponse.model_validate(reservation)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: str,
    payload: ReservationUpdate,
    principal: Principal = Depends(get_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> ReservationResponse:
    try:
        reservation = await asyncio.to_thread(
            booking_service.update_reservation,
            reservation_id,
            principal.user_id,
            principal.is_admin,
            payload.to_patch(),
        )
        return ReservationResponse.model_validate(reservation)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: str,
    principal: Principal = Depends(get_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> ReservationResponse:
    try:
        reservation = await asyncio.to_thread(
            booking_service.cancel_reservation, reservation_id, principal.user_id, principal.is_admin
        )
        return ReservationResponse.model_validate(reservation)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: str,
    _: Principal = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
) -> Response:
    try:
        await asyncio.to_thread(booking_service.delete_reservation, reservation_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

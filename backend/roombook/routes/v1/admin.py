# backend/roombook/routes/v1/admin.py
"""
Admin routes - API v1

Endpoints:
    GET /statistics - Dashboard aggregates
    POST /maintenance/sweep - Run the passed-reservation sweep now
    POST /maintenance/reminders - Publish due reservation reminders now
"""

import asyncio
import logging
from typing import Dict, NoReturn

from fastapi import APIRouter, Depends, HTTPException, status

from ...api.dependencies import (
    Principal,
    get_reminder_service,
    get_statistics_service,
    get_sweeper,
    require_admin,
)
from ...core.exceptions import DomainException
from ...schemas.admin import StatisticsResponse, SweepResponse
from ...services.passed_reservation_sweeper import PassedReservationSweeper
from ...services.reminder_service import ReminderService
from ...services.statistics_service import StatisticsService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin-v1"], dependencies=[Depends(require_admin)])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    statistics_service: StatisticsService = Depends(get_statistics_service),
) -> StatisticsResponse:
    try:
        stats = await asyncio.to_thread(statistics_service.get_statistics)
        return StatisticsResponse(**stats)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/maintenance/sweep", response_model=SweepResponse)
async def run_sweep(
    principal: Principal = Depends(require_admin),
    sweeper: PassedReservationSweeper = Depends(get_sweeper),
) -> SweepResponse:
    try:
        count = await asyncio.to_thread(sweeper.sweep)
    except DomainException as e:
        handle_domain_exception(e)
    logger.info("Manual sweep by %s marked %d reservation(s) as passed", principal.user_id, count)
    return SweepResponse(passed=count)


@router.post("/maintenance/reminders")
async def run_reminders(
    reminder_service: ReminderService = Depends(get_reminder_service),
) -> Dict[str, int]:
    try:
        published = await asyncio.to_thread(reminder_service.send_due_reminders)
    except DomainException as e:
        handle_domain_exception(e)
    return {"published": published}

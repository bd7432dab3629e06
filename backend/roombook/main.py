# backend/roombook/main.py
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from typing import AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI, Response

from .core.config import is_running_tests, settings
from .core.constants import API_TITLE, API_VERSION, BRAND_NAME
from .database import SessionLocal, init_db
from .errors import register_error_handlers
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import admin as admin_v1, reservations as reservations_v1, resources as resources_v1
from .services.sweep_scheduler import SweepScheduler

logging.basicConfig(
    level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the schema on SQLite and own the in-process sweep scheduler."""
    logger.info(f"{BRAND_NAME} API starting up ({settings.environment})")

    if settings.is_sqlite:
        init_db()

    scheduler = SweepScheduler(SessionLocal)
    app.state.sweep_scheduler = scheduler
    if settings.scheduler_enabled and not is_running_tests():
        await scheduler.start()

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")
    await scheduler.stop()


def create_app() -> FastAPI:
    app = FastAPI(title=API_TITLE, version=API_VERSION, lifespan=lifespan)
    register_error_handlers(app)

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(resources_v1.router, prefix="/resources")
    api_v1.include_router(reservations_v1.router, prefix="/reservations")
    api_v1.include_router(admin_v1.router, prefix="/admin")
    app.include_router(api_v1)

    @app.get("/health", tags=["health"])
    async def health() -> Dict[str, str]:
        return {
            "status": "healthy",
            "service": f"{BRAND_NAME.lower()}-api",
            "version": API_VERSION,
            "environment": settings.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/metrics", tags=["monitoring"], include_in_schema=False)
    async def metrics() -> Response:
        return Response(
            content=prometheus_metrics.get_metrics(),
            media_type=prometheus_metrics.get_content_type(),
        )

    return app


app = create_app()

"""
Freeze Microservice API

Membership freeze requests with admin review and a daily expiration sweep.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from core.config_manager import ConfigManager
from core.logger import setup_service_logger
from core.nats_client import get_event_bus

from .factory import create_freeze_service
from .freeze_repository import FreezeRepository
from .freeze_service import FreezeService
from .models import (
    ActivateFreezeRequest,
    ApproveFreezeRequest,
    CancelFreezeRequest,
    CreateFreezeRequest,
    ExpirationResult,
    FreezeEligibility,
    FreezeListResponse,
    FreezeRequest,
    FreezeStatus,
    HealthResponse,
    RejectFreezeRequest,
    RunExpirationsRequest,
)
from .protocols import FreezeNotFoundError, FreezeStateError, FreezeValidationError
from .routes_registry import SERVICE_METADATA, get_route_summary

config_manager = ConfigManager("freeze_service")
config = config_manager.get_service_config()

logger = setup_service_logger("freeze_service", level=config.log_level.upper())

if config.debug:
    config_manager.print_config_summary(show_secrets=False)

freeze_service: Optional[FreezeService] = None
repository: Optional[FreezeRepository] = None
event_bus = None
scheduler = None
SERVICE_PORT = config.service_port or 8262
EXPIRATION_HOUR = config_manager.get_int("FREEZE_EXPIRATION_HOUR", 1)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global freeze_service, repository, event_bus, scheduler

    try:
        try:
            event_bus = await get_event_bus("freeze_service", config=config_manager)
            if event_bus:
                logger.info("✅ Event bus initialized successfully")
        except Exception as e:
            logger.warning(f"⚠️  Failed to initialize event bus: {e}. Continuing without event subscriptions.")
            event_bus = None

        freeze_service = create_freeze_service(config=config_manager, event_bus=event_bus)

        repository = freeze_service.repository
        await repository.initialize()

        if event_bus:
            try:
                from .events import get_event_handlers

                handler_map = get_event_handlers(freeze_service)
                for pattern, handler_func in handler_map.items():
                    await event_bus.subscribe_to_events(
                        pattern=pattern,
                        handler=handler_func,
                        durable=f"freeze-{pattern.replace('.', '-').replace('*', 'all')}-consumer",
                    )
                    logger.info(f"✅ Subscribed to {pattern}")
            except Exception as e:
                logger.warning(f"⚠️  Failed to subscribe to events: {e}")

        if config.scheduler_enabled:
            try:
                from apscheduler.schedulers.asyncio import AsyncIOScheduler

                scheduler = AsyncIOScheduler(timezone="UTC")
                scheduler.add_job(
                    freeze_service.process_expirations,
                    'cron',
                    hour=EXPIRATION_HOUR,
                    minute=0,
                    id='freeze_expiration_job',
                    replace_existing=True,
                    max_instances=1,
                    coalesce=True,
                )
                scheduler.start()
                logger.info(f"✅ Freeze expiration scheduler started (daily at {EXPIRATION_HOUR:02d}:00 UTC)")
            except Exception as e:
                logger.warning(f"⚠️  Failed to start expiration scheduler: {e}")
                scheduler = None

        logger.info(f"✅ Freeze service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize freeze service: {e}")
        raise
    finally:
        if scheduler:
            try:
                scheduler.shutdown()
            except Exception as e:
                logger.error(f"❌ Failed to stop scheduler: {e}")

        if event_bus:
            try:
                await event_bus.close()
            except Exception as e:
                logger.error(f"Error closing event bus: {e}")

        if repository:
            await repository.close()
            logger.info("Freeze service database connections closed")


app = FastAPI(
    title="Freeze Service",
    description="Membership freeze requests",
    version="1.0.0",
    lifespan=lifespan,
)


async def get_freeze_service() -> FreezeService:
    if not freeze_service:
        raise HTTPException(status_code=503, detail="Freeze service not initialized")
    return freeze_service


def _raise_http(e: Exception, action: str):
    """Map service errors onto HTTP status codes"""
    if isinstance(e, FreezeNotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, FreezeValidationError):
        raise HTTPException(status_code=400, detail={"message": str(e), "reason": e.reason})
    if isinstance(e, FreezeStateError):
        raise HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ValueError):
        raise HTTPException(status_code=400, detail=str(e))
    logger.error(f"Error {action}: {e}", exc_info=True)
    raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


# ====================
# Health Check and Service Info
# ====================


@app.get("/health", response_model=HealthResponse)
async def health_check():
    dependencies = {}

    try:
        if repository and repository.db:
            result = await repository.db.health_check()
            dependencies["database"] = "healthy" if result and result.get('healthy') else "unhealthy"
        else:
            dependencies["database"] = "unhealthy"
    except Exception:
        dependencies["database"] = "unhealthy"

    if event_bus:
        dependencies["event_bus"] = "healthy" if event_bus.is_connected else "unhealthy"
    else:
        dependencies["event_bus"] = "not_configured"

    dependencies["scheduler"] = "healthy" if scheduler and scheduler.running else "not_configured"

    return HealthResponse(
        status="healthy" if all(v in ["healthy", "not_configured"] for v in dependencies.values()) else "degraded",
        service="freeze_service",
        port=SERVICE_PORT,
        version="1.0.0",
        timestamp=datetime.now(timezone.utc).isoformat(),
        dependencies=dependencies,
    )


@app.get("/api/v1/freezes/info")
async def service_info():
    return {**SERVICE_METADATA, "routes": get_route_summary()}


# ====================
# Eligibility
# ====================


@app.get("/api/v1/freezes/eligibility/{member_id}", response_model=FreezeEligibility)
async def check_eligibility(
    member_id: str,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    service: FreezeService = Depends(get_freeze_service),
):
    """Remaining freeze allowance for a year (defaults to current year)"""
    try:
        return await service.check_eligibility(member_id, year)
    except Exception as e:
        _raise_http(e, "checking freeze eligibility")


# ====================
# Requests
# ====================


@app.post("/api/v1/freezes", response_model=FreezeRequest)
async def create_freeze_request(
    request: CreateFreezeRequest,
    service: FreezeService = Depends(get_freeze_service),
):
    try:
        return await service.create_request(
            member_id=request.member_id,
            requested_start_date=request.requested_start_date,
            duration_months=request.duration_months,
            user_id=request.user_id,
            reason=request.reason,
        )
    except Exception as e:
        _raise_http(e, "creating freeze request")


@app.get("/api/v1/freezes", response_model=FreezeListResponse)
async def list_freeze_requests(
    status: Optional[FreezeStatus] = Query(None),
    member_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: FreezeService = Depends(get_freeze_service),
):
    """Admin listing, newest first"""
    try:
        freezes = await service.list_freezes(status=status, member_id=member_id, limit=limit, offset=offset)
        return FreezeListResponse(freezes=freezes, total=len(freezes))
    except Exception as e:
        _raise_http(e, "listing freeze requests")


@app.post("/api/v1/freezes/expirations/run", response_model=ExpirationResult)
async def run_expirations(
    request: RunExpirationsRequest,
    service: FreezeService = Depends(get_freeze_service),
):
    try:
        return await service.process_expirations(today=request.today)
    except Exception as e:
        _raise_http(e, "processing freeze expirations")


@app.get("/api/v1/freezes/{freeze_id}", response_model=FreezeRequest)
async def get_freeze_request(freeze_id: str, service: FreezeService = Depends(get_freeze_service)):
    try:
        return await service.get_freeze(freeze_id)
    except Exception as e:
        _raise_http(e, "getting freeze request")


@app.post("/api/v1/freezes/{freeze_id}/approve", response_model=FreezeRequest)
async def approve_freeze_request(
    freeze_id: str,
    request: ApproveFreezeRequest,
    service: FreezeService = Depends(get_freeze_service),
):
    try:
        return await service.approve_request(freeze_id, request.admin_id, request.start_date)
    except Exception as e:
        _raise_http(e, "approving freeze request")


@app.post("/api/v1/freezes/{freeze_id}/reject", response_model=FreezeRequest)
async def reject_freeze_request(
    freeze_id: str,
    request: RejectFreezeRequest,
    service: FreezeService = Depends(get_freeze_service),
):
    try:
        return await service.reject_request(freeze_id, request.admin_id, request.reason)
    except Exception as e:
        _raise_http(e, "rejecting freeze request")


@app.post("/api/v1/freezes/{freeze_id}/cancel", response_model=FreezeRequest)
async def cancel_freeze_request(
    freeze_id: str,
    request: CancelFreezeRequest,
    service: FreezeService = Depends(get_freeze_service),
):
    try:
        return await service.cancel_request(freeze_id, user_id=request.user_id)
    except Exception as e:
        _raise_http(e, "cancelling freeze request")


@app.post("/api/v1/freezes/{freeze_id}/activate", response_model=FreezeRequest)
async def activate_freeze(
    freeze_id: str,
    request: ActivateFreezeRequest,
    service: FreezeService = Depends(get_freeze_service),
):
    """Admin override when the fee was settled outside checkout"""
    try:
        return await service.activate_freeze(freeze_id, payment_reference=request.payment_reference)
    except Exception as e:
        _raise_http(e, "activating freeze")


# ====================
# Error Handling
# ====================


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception in {request.url}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error occurred"}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "microservices.freeze_service.main:app",
        host="0.0.0.0",
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )

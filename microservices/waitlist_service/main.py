"""
Waitlist Microservice API

Promotes waitlisted users into freed class spots.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from core.config_manager import ConfigManager
from core.logger import setup_service_logger
from core.nats_client import get_event_bus

from .factory import create_waitlist_service
from .models import ExpiredClaimsResult, HealthResponse, PromoteRequest, PromotionResult, WaitlistEntry
from .protocols import SessionNotFoundError
from .routes_registry import SERVICE_METADATA, get_route_summary
from .waitlist_repository import WaitlistRepository
from .waitlist_service import WaitlistService

config_manager = ConfigManager("waitlist_service")
config = config_manager.get_service_config()

logger = setup_service_logger("waitlist_service", level=config.log_level.upper())

if config.debug:
    config_manager.print_config_summary(show_secrets=False)

waitlist_service: Optional[WaitlistService] = None
repository: Optional[WaitlistRepository] = None
event_bus = None
scheduler = None
SERVICE_PORT = config.service_port or 8263
SWEEP_INTERVAL_SECONDS = config_manager.get_int("WAITLIST_SWEEP_INTERVAL_SECONDS", 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global waitlist_service, repository, event_bus, scheduler

    try:
        try:
            event_bus = await get_event_bus("waitlist_service", config=config_manager)
            if event_bus:
                logger.info("✅ Event bus initialized successfully")
        except Exception as e:
            logger.warning(f"⚠️  Failed to initialize event bus: {e}. Continuing without event subscriptions.")
            event_bus = None

        waitlist_service = create_waitlist_service(config=config_manager, event_bus=event_bus)

        repository = waitlist_service.repository
        await repository.initialize()

        if event_bus:
            try:
                from .events import get_event_handlers

                handler_map = get_event_handlers(waitlist_service)
                for pattern, handler_func in handler_map.items():
                    await event_bus.subscribe_to_events(
                        pattern=pattern,
                        handler=handler_func,
                        durable=f"waitlist-{pattern.replace('.', '-').replace('*', 'all')}-consumer",
                    )
                    logger.info(f"✅ Subscribed to {pattern}")
            except Exception as e:
                logger.warning(f"⚠️  Failed to subscribe to events: {e}")

        if config.scheduler_enabled:
            try:
                from apscheduler.schedulers.asyncio import AsyncIOScheduler

                scheduler = AsyncIOScheduler(timezone="UTC")
                scheduler.add_job(
                    waitlist_service.process_expired_claims,
                    'interval',
                    seconds=SWEEP_INTERVAL_SECONDS,
                    id='waitlist_claim_expiry_job',
                    replace_existing=True,
                    max_instances=1,
                    coalesce=True,
                )
                scheduler.start()
                logger.info(f"✅ Claim-expiry sweep started (every {SWEEP_INTERVAL_SECONDS}s)")
            except Exception as e:
                logger.warning(f"⚠️  Failed to start claim-expiry sweep: {e}")
                scheduler = None

        logger.info(f"✅ Waitlist service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize waitlist service: {e}")
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

        if waitlist_service and hasattr(waitlist_service.account_client, "close"):
            await waitlist_service.account_client.close()

        if repository:
            await repository.close()
            logger.info("Waitlist service database connections closed")


app = FastAPI(
    title="Waitlist Service",
    description="Class waitlist promotion",
    version="1.0.0",
    lifespan=lifespan,
)


async def get_waitlist_service() -> WaitlistService:
    if not waitlist_service:
        raise HTTPException(status_code=503, detail="Waitlist service not initialized")
    return waitlist_service


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
        service="waitlist_service",
        port=SERVICE_PORT,
        version="1.0.0",
        timestamp=datetime.now(timezone.utc).isoformat(),
        dependencies=dependencies,
    )


@app.get("/api/v1/waitlist/info")
async def service_info():
    return {**SERVICE_METADATA, "routes": get_route_summary()}


@app.post("/api/v1/waitlist/promote", response_model=PromotionResult)
async def promote_next(
    request: PromoteRequest,
    service: WaitlistService = Depends(get_waitlist_service),
):
    """Promote the next waiting user (admin or booking cancellation)"""
    try:
        return await service.promote_next(request.session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error promoting waitlist for session {request.session_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/api/v1/waitlist/expired-claims/run", response_model=ExpiredClaimsResult)
async def run_expired_claims(service: WaitlistService = Depends(get_waitlist_service)):
    try:
        return await service.process_expired_claims()
    except Exception as e:
        logger.error(f"Error processing expired waitlist claims: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.get("/api/v1/waitlist/sessions/{session_id}", response_model=List[WaitlistEntry])
async def get_session_waitlist(session_id: str, service: WaitlistService = Depends(get_waitlist_service)):
    try:
        return await service.get_waitlist(session_id)
    except Exception as e:
        logger.error(f"Error listing waitlist for session {session_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


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
        "microservices.waitlist_service.main:app",
        host="0.0.0.0",
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )

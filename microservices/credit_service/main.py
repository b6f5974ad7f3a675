"""
Credit Microservice API

Monthly membership credit issuance with a daily scheduled run and event-driven activation grants.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from core.config_manager import ConfigManager
from core.logger import setup_service_logger
from core.nats_client import get_event_bus

from .credit_repository import CreditRepository
from .credit_service import CreditService
from .factory import create_credit_service
from .models import (
    CreditGrantResponse,
    HealthCheckResponse as HealthResponse,
    IssuanceResult,
    MemberCreditsResponse,
    RunIssuanceRequest,
)
from .routes_registry import SERVICE_METADATA, get_route_summary

# Initialize configuration manager
config_manager = ConfigManager("credit_service")
config = config_manager.get_service_config()

# Configure logging
logger = setup_service_logger("credit_service", level=config.log_level.upper())

# Print configuration info (development environment)
if config.debug:
    config_manager.print_config_summary(show_secrets=False)

# Global variables
credit_service: Optional[CreditService] = None
repository: Optional[CreditRepository] = None
event_bus = None  # NATS event bus
scheduler = None  # APScheduler for the daily issuance job
SERVICE_PORT = config.service_port or 8260
ISSUANCE_HOUR = config_manager.get_int("CREDIT_ISSUANCE_HOUR", 6)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global credit_service, repository, event_bus, scheduler

    try:
        # Initialize NATS JetStream event bus
        try:
            event_bus = await get_event_bus("credit_service", config=config_manager)
            if event_bus:
                logger.info("✅ Event bus initialized successfully")
        except Exception as e:
            logger.warning(
                f"⚠️  Failed to initialize event bus: {e}. Continuing without event subscriptions."
            )
            event_bus = None

        # Create credit service using factory (with or without event bus)
        credit_service = create_credit_service(config=config_manager, event_bus=event_bus)

        # Initialize repository connection
        repository = credit_service.repository
        await repository.initialize()

        # Subscribe to events if event bus is available
        if event_bus:
            try:
                from .events import get_event_handlers

                handler_map = get_event_handlers(credit_service)

                for pattern, handler_func in handler_map.items():
                    await event_bus.subscribe_to_events(
                        pattern=pattern,
                        handler=handler_func,
                        durable=f"credit-{pattern.replace('.', '-').replace('*', 'all')}-consumer",
                    )
                    logger.info(f"✅ Subscribed to {pattern}")

                logger.info(f"✅ Credit event subscriber started ({len(handler_map)} event patterns)")

            except Exception as e:
                logger.warning(f"⚠️  Failed to subscribe to events: {e}")

        # Start issuance scheduler (APScheduler)
        if config.scheduler_enabled:
            try:
                from apscheduler.schedulers.asyncio import AsyncIOScheduler

                scheduler = AsyncIOScheduler(timezone="UTC")

                scheduler.add_job(
                    credit_service.run_daily_issuance,
                    'cron',
                    hour=ISSUANCE_HOUR,
                    minute=0,
                    id='credit_issuance_job',
                    replace_existing=True,
                    max_instances=1,
                    coalesce=True,
                )

                scheduler.start()
                logger.info(f"✅ Credit issuance scheduler started (daily at {ISSUANCE_HOUR:02d}:00 UTC)")

            except Exception as e:
                logger.warning(f"⚠️  Failed to start issuance scheduler: {e}")
                scheduler = None

        logger.info(f"✅ Credit service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize credit service: {e}")
        raise
    finally:
        if scheduler:
            try:
                scheduler.shutdown()
                logger.info("✅ Credit issuance scheduler stopped")
            except Exception as e:
                logger.error(f"❌ Failed to stop scheduler: {e}")

        if event_bus:
            try:
                await event_bus.close()
                logger.info("Credit event bus closed")
            except Exception as e:
                logger.error(f"Error closing event bus: {e}")

        if repository:
            await repository.close()
            logger.info("Credit service database connections closed")


# Create FastAPI application
app = FastAPI(
    title="Credit Service",
    description="Monthly membership credit issuance",
    version="1.0.0",
    lifespan=lifespan,
)


# ====================
# Dependency Injection
# ====================


async def get_credit_service() -> CreditService:
    """Get credit service instance"""
    if not credit_service:
        raise HTTPException(status_code=503, detail="Credit service not initialized")
    return credit_service


# ====================
# Health Check and Service Info
# ====================


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health check"""
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

    status = "healthy" if all(v in ["healthy", "not_configured"] for v in dependencies.values()) else "degraded"

    return HealthResponse(
        status=status,
        service="credit_service",
        port=SERVICE_PORT,
        version="1.0.0",
        timestamp=datetime.now(timezone.utc).isoformat(),
        dependencies=dependencies,
    )


@app.get("/api/v1/credits/info")
async def service_info():
    """Service metadata and route summary"""
    return {**SERVICE_METADATA, "routes": get_route_summary()}


# ====================
# Issuance
# ====================


@app.post("/api/v1/credits/issuance/run", response_model=IssuanceResult)
async def run_issuance(
    request: RunIssuanceRequest,
    service: CreditService = Depends(get_credit_service)
):
    """Run the issuance job on demand (idempotent for a given date)"""
    try:
        return await service.run_daily_issuance(today=request.today)
    except Exception as e:
        logger.error(f"Error running credit issuance: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


# ====================
# Balances
# ====================


@app.get("/api/v1/credits/members/{member_id}", response_model=MemberCreditsResponse)
async def get_member_credits(
    member_id: str,
    service: CreditService = Depends(get_credit_service)
):
    """Unexpired grants and per-type balance"""
    try:
        result = await service.get_member_credits(member_id)
        return MemberCreditsResponse(
            member_id=result["member_id"],
            as_of=result["as_of"],
            grants=[CreditGrantResponse(**g.model_dump()) for g in result["grants"]],
            balances=result["balances"],
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error getting credits for member {member_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


# ====================
# Error Handling
# ====================


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception in {request.url}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error occurred"})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "microservices.credit_service.main:app",
        host="0.0.0.0",
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )

"""
Membership Microservice API

Member status lifecycle and payment status, driven by billing webhook and freeze events.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Query
from fastapi.responses import JSONResponse

from core.config_manager import ConfigManager
from core.logger import setup_service_logger
from core.nats_client import get_event_bus

from .membership_repository import MembershipRepository
from .membership_service import MembershipService
from .factory import create_membership_service
from .models import (
    ActivateMembershipRequest,
    ChangeStatusRequest,
    HealthResponse,
    MemberResponse,
    PaymentStatusResponse,
    RecordAnnualFeeRequest,
    StatusHistoryResponse,
    TransitionSource,
)
from .protocols import (
    InvalidStatusTransitionError,
    MemberNotFoundError,
    MemberStateConflictError,
)
from .routes_registry import SERVICE_METADATA, get_route_summary

# Initialize config manager
config_manager = ConfigManager("membership_service")
config = config_manager.get_service_config()

# Configure logger
logger = setup_service_logger("membership_service", level=config.log_level.upper())

# Print config info (development)
if config.debug:
    config_manager.print_config_summary(show_secrets=False)

# Global variables
membership_service: Optional[MembershipService] = None
repository: Optional[MembershipRepository] = None
event_bus = None
SERVICE_PORT = config.service_port or 8261


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global membership_service, repository, event_bus

    try:
        # Initialize NATS JetStream event bus
        try:
            event_bus = await get_event_bus("membership_service", config=config_manager)
            if event_bus:
                logger.info("Event bus initialized successfully")
        except Exception as e:
            logger.warning(
                f"Failed to initialize event bus: {e}. Continuing without event subscriptions."
            )
            event_bus = None

        # Create membership service using factory
        membership_service = create_membership_service(
            config=config_manager, event_bus=event_bus
        )

        # Initialize repository connection
        repository = membership_service.repository
        await repository.initialize()

        # Subscribe to events if event bus is available
        if event_bus:
            try:
                from .events import get_event_handlers

                handler_map = get_event_handlers(membership_service)

                for pattern, handler_func in handler_map.items():
                    await event_bus.subscribe_to_events(
                        pattern=pattern,
                        handler=handler_func,
                        durable=f"membership-{pattern.replace('.', '-').replace('*', 'all')}-consumer",
                    )
                    logger.info(f"Subscribed to {pattern}")

                logger.info(
                    f"Membership event subscriber started ({len(handler_map)} event patterns)"
                )
            except Exception as e:
                logger.warning(f"Failed to subscribe to events: {e}")

        logger.info(f"Membership service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize membership service: {e}")
        raise
    finally:
        if event_bus:
            try:
                await event_bus.close()
                logger.info("Membership event bus closed")
            except Exception as e:
                logger.error(f"Error closing event bus: {e}")

        if repository:
            await repository.close()
            logger.info("Membership service database connections closed")


# Create FastAPI app
app = FastAPI(
    title="Membership Service",
    description="Member status lifecycle and payment status",
    version="1.0.0",
    lifespan=lifespan,
)


# ====================
# Dependency Injection
# ====================


async def get_membership_service() -> MembershipService:
    """Get membership service instance"""
    if not membership_service:
        raise HTTPException(status_code=503, detail="Membership service not initialized")
    return membership_service


# ====================
# Health Check and Service Info
# ====================


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    dependencies = {}

    try:
        if repository and repository.db:
            result = await repository.db.health_check()
            dependencies["database"] = "healthy" if result.get("healthy") else "unhealthy"
        else:
            dependencies["database"] = "unhealthy"
    except Exception:
        dependencies["database"] = "unhealthy"

    dependencies["event_bus"] = (
        ("healthy" if event_bus.is_connected else "unhealthy") if event_bus else "not_configured"
    )

    return HealthResponse(
        status="healthy" if all(v in ("healthy", "not_configured") for v in dependencies.values()) else "degraded",
        service="membership_service",
        port=SERVICE_PORT,
        version="1.0.0",
        timestamp=datetime.now(timezone.utc).isoformat(),
        dependencies=dependencies,
    )


@app.get("/api/v1/members/info")
async def get_service_info():
    """Get service information"""
    return {**SERVICE_METADATA, "routes": get_route_summary()}


# ====================
# Members
# ====================


@app.get("/api/v1/members/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: str,
    service: MembershipService = Depends(get_membership_service),
):
    """Get member"""
    try:
        member = await service.get_member(member_id)
        return MemberResponse(success=True, member=member)
    except MemberNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error getting member: {e}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.get("/api/v1/members/{member_id}/payment-status", response_model=PaymentStatusResponse)
async def get_payment_status(
    member_id: str,
    service: MembershipService = Depends(get_membership_service),
):
    """Payment status and benefit access (no_membership for unknown members)"""
    try:
        result = await service.get_payment_status(member_id)
        return PaymentStatusResponse(**result)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error deriving payment status: {e}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/api/v1/members/{member_id}/activate", response_model=MemberResponse)
async def activate_member(
    member_id: str,
    request: ActivateMembershipRequest,
    service: MembershipService = Depends(get_membership_service),
):
    """Admin activation"""
    try:
        member = await service.activate_membership(
            member_id=member_id,
            start_date=request.start_date,
            subscription_ref=request.subscription_ref,
            customer_ref=request.customer_ref,
            is_founding_member=request.is_founding_member,
            gender=request.gender,
            source=TransitionSource.ADMIN,
        )
        return MemberResponse(success=True, message="Membership activated", member=member)
    except MemberNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidStatusTransitionError, MemberStateConflictError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Error activating member: {e}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.put("/api/v1/members/{member_id}/status", response_model=MemberResponse)
async def change_status(
    member_id: str,
    request: ChangeStatusRequest,
    service: MembershipService = Depends(get_membership_service),
):
    """Admin status change"""
    try:
        member = await service.change_status(member_id, request.status, reason=request.reason)
        return MemberResponse(success=True, message=f"Status is {member.status.value}", member=member)
    except MemberNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MemberStateConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Error changing member status: {e}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/api/v1/members/{member_id}/annual-fee", response_model=MemberResponse)
async def record_annual_fee(
    member_id: str,
    request: RecordAnnualFeeRequest,
    service: MembershipService = Depends(get_membership_service),
):
    """Record annual fee payment"""
    try:
        member = await service.record_annual_fee_paid(member_id, paid_at=request.paid_at)
        return MemberResponse(success=True, message="Annual fee recorded", member=member)
    except MemberNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error recording annual fee: {e}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.get("/api/v1/members/{member_id}/history", response_model=StatusHistoryResponse)
async def get_history(
    member_id: str,
    limit: int = Query(50, ge=1, le=200),
    service: MembershipService = Depends(get_membership_service),
):
    """Status history"""
    try:
        history = await service.get_status_history(member_id, limit=limit)
        return StatusHistoryResponse(member_id=member_id, history=history)
    except MemberNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error getting history: {e}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


# ====================
# Error Handling
# ====================


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception in {request.url}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error occurred"}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "microservices.membership_service.main:app",
        host="0.0.0.0",
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )

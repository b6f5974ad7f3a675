"""
NATS JetStream Client for Python Microservices
Provides event-driven communication between the club services

This module wraps nats-py's JetStream API with the Event envelope used by
every service.
"""

import asyncio
import json
import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

import nats
from nats.errors import TimeoutError as NATSTimeoutError

if TYPE_CHECKING:
    from core.config_manager import ConfigManager


class EventEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and date types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event types exchanged by the club services"""

    # Membership Events
    MEMBERSHIP_ACTIVATED = "membership.activated"
    MEMBERSHIP_STATUS_CHANGED = "membership.status_changed"
    MEMBERSHIP_ANNUAL_FEE_PAID = "membership.annual_fee_paid"

    # Credit Events
    CREDIT_CYCLE_ISSUED = "credit.cycle_issued"
    CREDIT_ISSUANCE_COMPLETED = "credit.issuance_completed"

    # Freeze Events
    FREEZE_REQUESTED = "freeze.requested"
    FREEZE_APPROVED = "freeze.approved"
    FREEZE_REJECTED = "freeze.rejected"
    FREEZE_CANCELLED = "freeze.cancelled"
    FREEZE_ACTIVATED = "freeze.activated"
    FREEZE_COMPLETED = "freeze.completed"

    # Waitlist Events
    WAITLIST_PROMOTED = "waitlist.promoted"
    WAITLIST_CLAIM_EXPIRED = "waitlist.claim_expired"

    # Events consumed from collaborators
    BILLING_CHECKOUT_COMPLETED = "billing.checkout.completed"
    BILLING_SUBSCRIPTION_UPDATED = "billing.subscription.updated"
    BILLING_SUBSCRIPTION_DELETED = "billing.subscription.deleted"
    BOOKING_CANCELLED = "booking.cancelled"


class ServiceSource(Enum):
    """Service sources"""

    CREDIT_SERVICE = "credit_service"
    MEMBERSHIP_SERVICE = "membership_service"
    FREEZE_SERVICE = "freeze_service"
    WAITLIST_SERVICE = "waitlist_service"
    BILLING_WEBHOOK = "billing_webhook"
    BOOKING_SERVICE = "booking_service"


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: EventType,
        source: ServiceSource,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value if isinstance(event_type, EventType) else str(event_type)
        self.source = source.value if isinstance(source, ServiceSource) else str(source)
        self.data = data
        self.subject = subject
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        event = cls.__new__(cls)
        event.id = data.get("id")
        event.type = data.get("type")
        event.source = data.get("source")
        event.subject = data.get("subject")
        event.timestamp = data.get("timestamp")
        event.data = data.get("data", {})
        event.metadata = data.get("metadata", {})
        event.version = data.get("version", "1.0.0")
        return event


class NATSEventBus:
    """
    NATS JetStream event bus.

    One stream per subject prefix ("credit" -> credit-stream, subjects credit.>).
    Subscriptions are durable pull consumers processed by background tasks.
    """

    def __init__(
        self,
        service_name: str,
        config: Optional["ConfigManager"] = None,
    ):
        """
        Initialize NATS Event Bus.

        Args:
            service_name: Name of the service (used in consumer names and logs)
            config: Optional ConfigManager instance for endpoint resolution
        """
        from core.config_manager import ConfigManager

        self.service_name = service_name

        if config is None:
            config = ConfigManager(service_name)

        infra = config.get_infra_config()
        self.url = infra.resolved_nats_url

        self._nc = None
        self._js = None
        self._subscriptions: Dict[str, bool] = {}  # pattern -> active
        self._subscription_tasks: List[asyncio.Task] = []
        self._streams: set = set()
        self._is_connected = False

        logger.info(f"NATS EventBus initialized: {self.url}")

    async def connect(self):
        """Connect to NATS and open a JetStream context"""
        try:
            self._nc = await nats.connect(self.url, name=self.service_name)
            self._js = self._nc.jetstream()
            self._is_connected = True
            logger.info(f"Connected to NATS as {self.service_name}")
        except Exception as e:
            logger.error(f"Failed to connect to NATS at {self.url}: {e}")
            raise

    @staticmethod
    def _get_stream_name_for_event(event_type: str) -> str:
        """Stream name for an event type or pattern (prefix before the first dot)"""
        prefix = event_type.split('.')[0]
        return f"{prefix}-stream"

    async def _ensure_stream(self, event_type: str) -> str:
        stream_name = self._get_stream_name_for_event(event_type)
        if stream_name in self._streams:
            return stream_name
        prefix = event_type.split('.')[0]
        try:
            await self._js.add_stream(name=stream_name, subjects=[f"{prefix}.>"])
        except Exception as e:
            # Stream already exists with the same subjects
            logger.debug(f"Stream creation note for {stream_name}: {e}")
        self._streams.add(stream_name)
        return stream_name

    async def publish_event(self, event: Event) -> bool:
        """
        Publish an event to JetStream.

        Returns False instead of raising so publishing never breaks the
        caller's business operation.
        """
        if not self._is_connected or not self._js:
            logger.error("Not connected to NATS")
            return False

        try:
            stream_name = await self._ensure_stream(event.type)
            payload = json.dumps(event.to_dict(), cls=EventEncoder).encode()
            ack = await self._js.publish(event.type, payload, stream=stream_name)
            logger.info(f"Published event {event.type} [{event.id}] to stream {stream_name}, seq={ack.seq}")
            return True
        except Exception as e:
            logger.error(f"Error publishing event {event.id}: {e}")
            return False

    async def subscribe_to_events(
        self,
        pattern: str,
        handler: Callable,
        durable: Optional[str] = None,
    ) -> Optional[str]:
        """
        Subscribe to a subject pattern with a durable pull consumer.

        Args:
            pattern: Subject pattern, e.g. "billing.subscription.*"
            handler: async callable receiving an Event
            durable: Durable consumer name
        """
        if not self._is_connected or not self._js:
            logger.error("Not connected to NATS")
            return None

        try:
            self._subscriptions[pattern] = True
            task = asyncio.create_task(self._consumer_loop(pattern, handler, durable))
            self._subscription_tasks.append(task)
            logger.info(f"Subscribed to {pattern} (JetStream consumer)")
            return durable or pattern
        except Exception as e:
            logger.error(f"Error subscribing to events: {e}")
            return None

    async def _consumer_loop(self, pattern: str, handler: Callable, durable: Optional[str]):
        """Pull messages in batches, dispatch to handler, ack each message"""
        stream_name = await self._ensure_stream(pattern)
        consumer_name = durable or f"{self.service_name}-{pattern.split('.')[0]}-consumer"
        subject = pattern.replace("*", ">") if pattern.endswith("*") else pattern

        logger.info(f"Starting JetStream consumer: stream={stream_name}, consumer={consumer_name}, pattern={pattern}")

        try:
            subscription = await self._js.pull_subscribe(subject, durable=consumer_name, stream=stream_name)

            while self._subscriptions.get(pattern, False):
                try:
                    messages = await subscription.fetch(10, timeout=1)
                except NATSTimeoutError:
                    continue
                except Exception as pull_e:
                    logger.warning(f"Pull error (will retry): {pull_e}")
                    await asyncio.sleep(5)
                    continue

                for msg in messages:
                    try:
                        event = Event.from_dict(json.loads(msg.data.decode()))
                        await handler(event)
                    except Exception as msg_e:
                        logger.error(f"Error processing message on {msg.subject}: {msg_e}")
                    finally:
                        await msg.ack()

        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"JetStream consumer loop error for {pattern}: {e}")
        finally:
            self._subscriptions[pattern] = False
            logger.info(f"JetStream consumer stopped: {consumer_name}")

    async def close(self):
        """Stop consumers and drain the connection"""
        for pattern in list(self._subscriptions.keys()):
            self._subscriptions[pattern] = False

        for task in self._subscription_tasks:
            if not task.done():
                task.cancel()

        if self._nc:
            await self._nc.drain()
            self._nc = None
            self._js = None

        self._is_connected = False
        logger.info("Disconnected from NATS")

    @property
    def is_connected(self) -> bool:
        """Check if connected to NATS"""
        return self._is_connected


# Singleton instance
_event_bus: Optional[NATSEventBus] = None


async def get_event_bus(
    service_name: str,
    config: Optional["ConfigManager"] = None,
) -> Optional[NATSEventBus]:
    """
    Get or create event bus instance.

    Returns None when NATS is disabled in the infrastructure config.
    """
    global _event_bus

    if _event_bus is None:
        from core.config_manager import ConfigManager

        config = config or ConfigManager(service_name)
        if not config.get_infra_config().nats_enabled:
            logger.info(f"NATS disabled, {service_name} runs without an event bus")
            return None

        _event_bus = NATSEventBus(service_name=service_name, config=config)
        await _event_bus.connect()

    return _event_bus


# Convenience function for creating events
def create_event(
    event_type: EventType,
    source: ServiceSource,
    data: Dict[str, Any],
    subject: Optional[str] = None,
    metadata: Optional[Dict[str, str]] = None,
) -> Event:
    """Create an Event instance"""
    return Event(
        event_type=event_type,
        source=source,
        data=data,
        subject=subject,
        metadata=metadata,
    )

"""
Event Hub

Fan-out of bridge state changes to the hosting UI.

The UI needs to know when the Confirmation Queue head changes, when sessions
come and go and when pairing is in progress. Each subscriber gets its own
bounded queue; publishing never blocks, and a subscriber that falls behind
loses its oldest events rather than stalling the bridge.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_SUBSCRIBER_QUEUE_SIZE = 100


class BridgeEventType(str, Enum):
    QUEUE_HEAD = "queue.head"
    SESSIONS = "sessions.changed"
    CONNECTING = "pairing.connecting"
    SNAPSHOT = "bridge.snapshot"


class BridgeEvent(BaseModel):
    type: BridgeEventType
    data: Any = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EventSubscription:
    """A subscriber's outbound queue."""

    def __init__(self, max_size: int = DEFAULT_SUBSCRIBER_QUEUE_SIZE):
        self.id = uuid4().hex
        self.dropped = 0
        self._queue: asyncio.Queue[BridgeEvent] = asyncio.Queue(maxsize=max_size)

    def __len__(self) -> int:
        return self._queue.qsize()

    def put_nowait(self, event: BridgeEvent) -> None:
        """Queue an event, discarding the oldest one when full."""
        if self._queue.full():
            self._queue.get_nowait()
            self.dropped += 1
            logger.warning(f"Subscriber {self.id} is behind; dropped oldest event")
        self._queue.put_nowait(event)

    async def get(self) -> BridgeEvent:
        return await self._queue.get()


class EventHub:
    """
    Publish/subscribe hub for BridgeEvents.

    Usage:
        subscription = hub.subscribe()
        try:
            event = await subscription.get()
        finally:
            hub.unsubscribe(subscription)
    """

    def __init__(self, max_queue_size: int = DEFAULT_SUBSCRIBER_QUEUE_SIZE):
        self._max_queue_size = max_queue_size
        self._subscriptions: dict[str, EventSubscription] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self) -> EventSubscription:
        subscription = EventSubscription(self._max_queue_size)
        self._subscriptions[subscription.id] = subscription
        logger.debug(f"Event subscriber {subscription.id} added")
        return subscription

    def unsubscribe(self, subscription: EventSubscription) -> None:
        if self._subscriptions.pop(subscription.id, None) is not None:
            logger.debug(f"Event subscriber {subscription.id} removed")

    def publish(self, event_type: BridgeEventType, data: Any = None) -> int:
        """
        Deliver an event to every subscriber.

        Returns:
            Number of subscribers the event was queued for
        """
        event = BridgeEvent(type=event_type, data=data)
        for subscription in list(self._subscriptions.values()):
            subscription.put_nowait(event)
        return len(self._subscriptions)

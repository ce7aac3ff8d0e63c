# Bridge Events
# State-change notifications for the hosting UI

from walletbridge.events.hub import (
    BridgeEvent,
    BridgeEventType,
    EventHub,
    EventSubscription,
    DEFAULT_SUBSCRIBER_QUEUE_SIZE,
)

__all__ = [
    "BridgeEvent",
    "BridgeEventType",
    "EventHub",
    "EventSubscription",
    "DEFAULT_SUBSCRIBER_QUEUE_SIZE",
]

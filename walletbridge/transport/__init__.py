# Relay Transport
# Port for the pairing/relay client and an in-memory implementation

from walletbridge.transport.ports import (
    Approval,
    RelayClient,
    RelayError,
    RelayEvent,
    RelayListener,
    RelaySession,
)
from walletbridge.transport.memory import InMemoryRelayClient

__all__ = [
    "Approval",
    "RelayClient",
    "RelayError",
    "RelayEvent",
    "RelayListener",
    "RelaySession",
    "InMemoryRelayClient",
]

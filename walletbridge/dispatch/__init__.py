# Command Dispatcher
# Validation, confirmation routing and exactly-once responses for session requests

from walletbridge.dispatch.dispatcher import (
    DISCONNECTED_MESSAGE,
    REJECTED_MESSAGE,
    Dispatcher,
    RejectMode,
)

__all__ = [
    "DISCONNECTED_MESSAGE",
    "REJECTED_MESSAGE",
    "Dispatcher",
    "RejectMode",
]

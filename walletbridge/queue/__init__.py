# Confirmation Queue
# FIFO of requests awaiting an explicit user decision, head-only resolution

from walletbridge.queue.confirmation import (
    ConfirmationQueue,
    Decision,
    DuplicateRequestError,
    HeadListener,
    PendingRequest,
)

__all__ = [
    "ConfirmationQueue",
    "Decision",
    "DuplicateRequestError",
    "HeadListener",
    "PendingRequest",
]

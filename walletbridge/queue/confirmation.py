"""
Confirmation Queue

Single FIFO holding area for requests that need an explicit user decision
before their handler may run.

Rules:
- Strict arrival order; only the head is ever presented for a decision
- Resolving with an id that is not the head is a no-op, so a stale UI action
  can never resolve the wrong request
- No automatic timeout: a request stays queued until it is approved,
  rejected, or its session is torn down

The queue is a plain data structure owned by the Dispatcher. It never runs
handlers or talks to the transport; the Dispatcher attaches futures to each
PendingRequest and completes them when the head is resolved.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from walletbridge.protocol.errors import BridgeError

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    """How a queued request left the queue."""
    APPROVE = "approve"  # User approved, handler runs
    REJECT = "reject"    # User declined, handler never runs
    CANCEL = "cancel"    # Session torn down while queued


@dataclass
class PendingRequest:
    """
    A confirmation-requiring request awaiting a user decision.

    Exists only between arrival and resolution.
    """
    id: str
    topic: str
    method: str
    params: Any
    arrival_index: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Completed by the Dispatcher; not part of the request's identity
    decision: asyncio.Future | None = field(default=None, repr=False, compare=False)
    outcome: asyncio.Future | None = field(default=None, repr=False, compare=False)

    def decide(self, decision: Decision) -> None:
        """Wake the suspended request with the user's decision."""
        if self.decision is not None and not self.decision.done():
            self.decision.set_result(decision)


class DuplicateRequestError(BridgeError):
    """A request with the same id is already awaiting a decision."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"Request {request_id} is already pending")


HeadListener = Callable[[PendingRequest | None], None]


class ConfirmationQueue:
    """
    FIFO queue of PendingRequest.

    All operations are synchronous; under the single event loop they are
    atomic with respect to other coroutines.
    """

    def __init__(self):
        self._items: list[PendingRequest] = []
        self._next_index = 0
        self._listeners: list[HeadListener] = []

    # === Observation ===

    def __len__(self) -> int:
        return len(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def peek(self) -> PendingRequest | None:
        """Return the head, the only request eligible for a decision."""
        return self._items[0] if self._items else None

    def get(self, request_id: str) -> PendingRequest | None:
        for item in self._items:
            if item.id == request_id:
                return item
        return None

    def pending(self) -> list[PendingRequest]:
        """Snapshot of the queue in arrival order."""
        return list(self._items)

    def add_listener(self, listener: HeadListener) -> None:
        """Register a callback invoked with the new head whenever it changes."""
        self._listeners.append(listener)

    def remove_listener(self, listener: HeadListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # === Mutation ===

    def enqueue(self, request: PendingRequest) -> PendingRequest:
        """
        Append a request at the tail.

        Raises:
            DuplicateRequestError: If a request with the same id is queued
        """
        if self.get(request.id) is not None:
            raise DuplicateRequestError(request.id)

        request.arrival_index = self._next_index
        self._next_index += 1

        was_empty = self.is_empty
        self._items.append(request)

        logger.info(
            f"Request {request.id} ({request.method}) queued for confirmation "
            f"(position={len(self._items)}, topic={request.topic})"
        )

        if was_empty:
            self._notify()
        return request

    def resolve_head(self, request_id: str) -> PendingRequest | None:
        """
        Remove the head if its id matches.

        Returns:
            The removed request, or None when the queue is empty or the id
            does not match the head (no mutation in that case)
        """
        head = self.peek()
        if head is None or head.id != request_id:
            logger.debug(
                f"Ignoring resolution of {request_id}: "
                f"head is {head.id if head else 'empty'}"
            )
            return None

        self._items.pop(0)
        self._notify()
        return head

    def evict_topic(self, topic: str) -> list[PendingRequest]:
        """
        Remove every request belonging to a session topic.

        Returns:
            The evicted requests in arrival order
        """
        evicted = [item for item in self._items if item.topic == topic]
        if not evicted:
            return []

        old_head = self.peek()
        self._items = [item for item in self._items if item.topic != topic]

        logger.info(f"Evicted {len(evicted)} queued request(s) for topic {topic}")

        if self.peek() is not old_head:
            self._notify()
        return evicted

    def discard(self, request: PendingRequest) -> bool:
        """Remove this exact request wherever it sits (its waiter went away)."""
        index = next(
            (i for i, item in enumerate(self._items) if item is request),
            None
        )
        if index is None:
            return False

        was_head = index == 0
        del self._items[index]
        if was_head:
            self._notify()
        return True

    def _notify(self) -> None:
        head = self.peek()
        for listener in list(self._listeners):
            try:
                listener(head)
            except Exception as e:
                logger.error(f"Queue listener failed: {e}")

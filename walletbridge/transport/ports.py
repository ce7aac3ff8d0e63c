"""
Relay Transport Port

Abstract interface for the pairing/relay client the bridge rides on. The
bridge never speaks the relay protocol itself; it consumes three inbound
events and issues a handful of outbound calls.

Inbound events (delivered to registered listeners as raw relay JSON):
- session_proposal: a peer wants to open a session
- session_request: a JSON-RPC call within an approved session
- session_delete: the peer tore the session down

Outbound calls: pair, approve, reject, respond, disconnect.

Exactly one RelayClient is created at startup and injected by reference into
the Session Manager and the Dispatcher.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from pydantic import Field

from walletbridge.protocol.envelope import (
    JsonRpcError,
    JsonRpcResponse,
    PeerMetadata,
    SessionNamespace,
    WireModel,
)

logger = logging.getLogger(__name__)


class RelayEvent(str, Enum):
    """Inbound relay events consumed by the bridge."""
    SESSION_PROPOSAL = "session_proposal"
    SESSION_REQUEST = "session_request"
    SESSION_DELETE = "session_delete"


RelayListener = Callable[[dict[str, Any]], Awaitable[None]]


@dataclass
class Approval:
    """
    Result of approving a proposal.

    The session is not usable until `acknowledged()` completes, i.e. the
    peer has confirmed the settlement.
    """
    topic: str
    acknowledged: Callable[[], Awaitable[None]]


class RelaySession(WireModel):
    """A settled session as known to the relay (used to restore on start)."""
    topic: str
    peer: PeerMetadata = Field(default_factory=PeerMetadata)
    namespaces: dict[str, SessionNamespace] = Field(default_factory=dict)


class RelayError(Exception):
    """Raised by a RelayClient when an outbound call fails."""
    pass


class RelayClient(ABC):
    """
    Pairing/relay client.

    Listener registration and event fan-out are implemented here; adapters
    call `emit()` when the relay delivers an event. Every listener runs as an
    independent task so requests are processed concurrently.
    """

    def __init__(self):
        self._listeners: dict[str, list[RelayListener]] = defaultdict(list)
        self._tasks: set[asyncio.Task] = set()

    # === Events ===

    def on(self, event: RelayEvent | str, listener: RelayListener) -> None:
        self._listeners[RelayEvent(event).value].append(listener)

    def off(self, event: RelayEvent | str, listener: RelayListener) -> None:
        listeners = self._listeners[RelayEvent(event).value]
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event: RelayEvent | str, payload: dict[str, Any]) -> list[asyncio.Task]:
        """
        Deliver an inbound event to every listener.

        Returns:
            The scheduled listener tasks
        """
        name = RelayEvent(event).value
        tasks = []
        for listener in list(self._listeners[name]):
            task = asyncio.create_task(listener(payload), name=f"relay:{name}")
            self._tasks.add(task)
            task.add_done_callback(self._task_done)
            tasks.append(task)
        if not tasks:
            logger.debug(f"No listener for relay event {name}")
        return tasks

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                f"Relay listener {task.get_name()} failed: {task.exception()!r}"
            )

    async def close(self) -> None:
        """Cancel in-flight listener tasks."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    # === Outbound ===

    @abstractmethod
    async def pair(self, uri: str) -> None:
        """
        Start pairing with a peer from a pairing URI.

        Raises:
            RelayError: If the relay refuses the URI
        """
        ...

    @abstractmethod
    async def approve(
        self,
        proposal_id: int,
        namespaces: dict[str, SessionNamespace]
    ) -> Approval:
        """Approve a session proposal with the granted namespaces."""
        ...

    @abstractmethod
    async def reject(self, proposal_id: int, reason: JsonRpcError) -> None:
        """Reject a session proposal."""
        ...

    @abstractmethod
    async def respond(self, topic: str, response: JsonRpcResponse) -> None:
        """Send the response to a session_request."""
        ...

    @abstractmethod
    async def disconnect(self, topic: str, reason: JsonRpcError) -> None:
        """Tear down a session and notify the peer."""
        ...

    @abstractmethod
    async def get_sessions(self) -> list[RelaySession]:
        """Sessions the relay currently holds."""
        ...

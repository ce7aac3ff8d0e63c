"""
In-Memory Relay Client

Process-local RelayClient for development, demos and tests.

Features:
- Records every outbound call (pairings, approvals, rejections, responses,
  disconnects) for inspection
- Helpers to emit inbound proposals, requests and deletions
- Optional held acknowledgements to observe the approve/ack window
- Injectable failures for pair, acknowledgement and respond
"""

import asyncio
import logging
from typing import Any
from uuid import uuid4

from walletbridge.protocol.envelope import (
    JsonRpcError,
    JsonRpcResponse,
    SessionNamespace,
)
from walletbridge.transport.ports import (
    Approval,
    RelayClient,
    RelayError,
    RelayEvent,
    RelaySession,
)

logger = logging.getLogger(__name__)


class InMemoryRelayClient(RelayClient):
    """
    In-memory relay.

    Args:
        auto_ack: Acknowledge approvals immediately; when False, acknowledgements
            wait for `release_acks()`
    """

    def __init__(self, auto_ack: bool = True):
        super().__init__()
        self._auto_ack = auto_ack
        self._ack_released = asyncio.Event()
        self._sessions: dict[str, RelaySession] = {}

        # Recorded outbound calls
        self.paired_uris: list[str] = []
        self.approvals: list[tuple[int, dict[str, SessionNamespace]]] = []
        self.rejections: list[tuple[int, JsonRpcError]] = []
        self.responses: list[tuple[str, JsonRpcResponse]] = []
        self.disconnects: list[tuple[str, JsonRpcError]] = []

        # Failure injection
        self.pair_error: Exception | None = None
        self.ack_error: Exception | None = None
        self.respond_error: Exception | None = None

    # === Outbound ===

    async def pair(self, uri: str) -> None:
        if self.pair_error is not None:
            raise self.pair_error
        if not uri.startswith("wc:"):
            raise RelayError(f"Invalid pairing URI: {uri}")
        self.paired_uris.append(uri)
        logger.debug(f"Paired with {uri}")

    async def approve(
        self,
        proposal_id: int,
        namespaces: dict[str, SessionNamespace]
    ) -> Approval:
        topic = uuid4().hex
        self.approvals.append((proposal_id, namespaces))

        async def acknowledged() -> None:
            if not self._auto_ack:
                await self._ack_released.wait()
            if self.ack_error is not None:
                raise self.ack_error
            self._sessions[topic] = RelaySession(topic=topic, namespaces=namespaces)

        return Approval(topic=topic, acknowledged=acknowledged)

    async def reject(self, proposal_id: int, reason: JsonRpcError) -> None:
        self.rejections.append((proposal_id, reason))

    async def respond(self, topic: str, response: JsonRpcResponse) -> None:
        if self.respond_error is not None:
            raise self.respond_error
        self.responses.append((topic, response))

    async def disconnect(self, topic: str, reason: JsonRpcError) -> None:
        self._sessions.pop(topic, None)
        self.disconnects.append((topic, reason))

    async def get_sessions(self) -> list[RelaySession]:
        return list(self._sessions.values())

    # === Test / demo helpers ===

    def release_acks(self) -> None:
        """Let held approval acknowledgements complete."""
        self._ack_released.set()

    def add_session(self, session: RelaySession) -> None:
        """Seed a session as if restored by the relay."""
        self._sessions[session.topic] = session

    def emit_proposal(
        self,
        proposal_id: int,
        chains: list[str],
        methods: list[str] | None = None,
        events: list[str] | None = None,
        pairing_topic: str | None = "pairing-topic",
        namespace: str = "chia",
        peer_name: str = "Test dApp",
    ) -> list[asyncio.Task]:
        payload: dict[str, Any] = {
            "id": proposal_id,
            "params": {
                "pairingTopic": pairing_topic,
                "proposer": {
                    "publicKey": uuid4().hex,
                    "metadata": {
                        "name": peer_name,
                        "description": "",
                        "url": "https://example.com",
                        "icons": [],
                    },
                },
                "requiredNamespaces": {
                    namespace: {
                        "chains": chains,
                        "methods": methods or [],
                        "events": events or [],
                    }
                },
            },
        }
        return self.emit(RelayEvent.SESSION_PROPOSAL, payload)

    def emit_request(
        self,
        topic: str,
        request_id: int | str,
        method: str,
        params: Any = None,
        chain_id: str | None = None,
    ) -> list[asyncio.Task]:
        payload = {
            "id": request_id,
            "topic": topic,
            "params": {
                "request": {"method": method, "params": params},
                "chainId": chain_id,
            },
        }
        return self.emit(RelayEvent.SESSION_REQUEST, payload)

    def emit_delete(self, topic: str) -> list[asyncio.Task]:
        self._sessions.pop(topic, None)
        return self.emit(RelayEvent.SESSION_DELETE, {"id": None, "topic": topic})

    def responses_for(self, request_id: int | str) -> list[JsonRpcResponse]:
        return [response for _, response in self.responses if response.id == request_id]

"""
Wallet Bridge

Wires the Session Manager, Confirmation Queue, Authentication Gate and
Dispatcher to one injected RelayClient and exposes the collaborator-facing
entrypoints used by the hosting UI.

Inbound relay events are parsed here; everything after parsing belongs to the
Session Manager (proposals, deletions) or the Dispatcher (requests).
"""

import logging
from typing import Any

from pydantic import ValidationError

from walletbridge.auth import AuthGate
from walletbridge.backend import WalletBackend
from walletbridge.commands import CommandRegistry
from walletbridge.commands.builtin import create_default_registry
from walletbridge.dispatch import Dispatcher, RejectMode
from walletbridge.events import BridgeEventType, EventHub
from walletbridge.protocol.envelope import (
    JsonRpcError,
    JsonRpcResponse,
    SessionDelete,
    SessionProposal,
    SessionRequest,
    create_error_response,
)
from walletbridge.queue import ConfirmationQueue, PendingRequest
from walletbridge.session import DEFAULT_SUPPORTED_CHAINS, Session, SessionManager
from walletbridge.transport import RelayClient, RelayEvent

logger = logging.getLogger(__name__)


class WalletBridge:
    """
    Command bridge between peer applications and the wallet backend.

    Usage:
        bridge = WalletBridge(relay, backend, auth=AuthGate(authenticator))
        await bridge.start()
        await bridge.pair("wc:...")
        ...
        head = bridge.pending_requests()[0]
        await bridge.approve(head.id)
    """

    def __init__(
        self,
        relay: RelayClient,
        backend: WalletBackend,
        auth: AuthGate | None = None,
        registry: CommandRegistry | None = None,
        supported_chains: tuple[str, ...] | list[str] = DEFAULT_SUPPORTED_CHAINS,
        reject_mode: RejectMode = RejectMode.RESULT,
    ):
        self.relay = relay
        self.backend = backend
        self.auth = auth or AuthGate()
        self.registry = registry or create_default_registry()
        self.queue = ConfirmationQueue()
        self.sessions = SessionManager(relay, backend, supported_chains)
        self.dispatcher = Dispatcher(
            registry=self.registry,
            relay=relay,
            backend=backend,
            auth=self.auth,
            queue=self.queue,
            sessions=self.sessions,
            reject_mode=reject_mode,
        )
        self.sessions.add_removed_listener(self.dispatcher.on_session_removed)

        self.events = EventHub()
        self.queue.add_listener(self._on_head_changed)
        self.sessions.add_removed_listener(self._on_session_removed)

        self._connecting = False
        self._started = False

    @property
    def connecting(self) -> bool:
        """True between `pair()` and the resulting proposal being handled."""
        return self._connecting

    def _set_connecting(self, connecting: bool) -> None:
        if connecting != self._connecting:
            self._connecting = connecting
            self.events.publish(BridgeEventType.CONNECTING, connecting)

    @property
    def started(self) -> bool:
        return self._started

    # === Lifecycle ===

    async def start(self) -> None:
        """Subscribe to relay events and restore persisted state."""
        if self._started:
            return

        self.relay.on(RelayEvent.SESSION_PROPOSAL, self._on_session_proposal)
        self.relay.on(RelayEvent.SESSION_REQUEST, self._on_session_request)
        self.relay.on(RelayEvent.SESSION_DELETE, self._on_session_delete)

        await self.auth.load()
        await self.sessions.restore()

        self._started = True
        logger.info(f"Wallet bridge started ({len(self.registry)} commands)")

    async def stop(self) -> None:
        """Unsubscribe from relay events and cancel in-flight processing."""
        if not self._started:
            return

        self.relay.off(RelayEvent.SESSION_PROPOSAL, self._on_session_proposal)
        self.relay.off(RelayEvent.SESSION_REQUEST, self._on_session_request)
        self.relay.off(RelayEvent.SESSION_DELETE, self._on_session_delete)
        await self.relay.close()

        self._started = False
        logger.info("Wallet bridge stopped")

    # === Relay callbacks ===

    async def _on_session_proposal(self, payload: dict[str, Any]) -> None:
        try:
            proposal = SessionProposal.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Malformed session proposal: {e}")
            proposal_id = payload.get("id")
            if isinstance(proposal_id, int):
                await self.relay.reject(
                    proposal_id,
                    JsonRpcError(message="Invalid session proposal")
                )
            self._set_connecting(False)
            return

        try:
            session = await self.sessions.on_session_proposal(proposal)
        finally:
            self._set_connecting(False)

        if session is not None:
            self._publish_sessions()

    async def _on_session_request(self, payload: dict[str, Any]) -> None:
        try:
            request = SessionRequest.model_validate(payload)
        except ValidationError as e:
            request_id = payload.get("id")
            topic = payload.get("topic")
            if request_id is None or not isinstance(topic, str):
                logger.error(f"Dropping unaddressable session request: {e}")
                return
            logger.warning(f"Malformed session request {request_id}: {e}")
            response = create_error_response(request_id, "Invalid request")
            try:
                await self.relay.respond(topic, response)
            except Exception as send_error:
                logger.error(f"Failed to send response {request_id}: {send_error}")
            return

        await self.dispatcher.handle(request)

    async def _on_session_delete(self, payload: dict[str, Any]) -> None:
        try:
            event = SessionDelete.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Malformed session_delete: {e}")
            return
        await self.sessions.on_session_delete(event.topic)

    # === Event publishing ===

    def _on_head_changed(self, head: PendingRequest | None) -> None:
        self.events.publish(
            BridgeEventType.QUEUE_HEAD,
            self.describe_request(head) if head else None,
        )

    async def _on_session_removed(self, session: Session) -> None:
        self._publish_sessions()

    def _publish_sessions(self) -> None:
        self.events.publish(
            BridgeEventType.SESSIONS,
            [s.to_summary() for s in self.sessions.list_sessions()],
        )

    def snapshot(self) -> dict[str, Any]:
        """Current UI-relevant state, sent to new event subscribers."""
        head = self.head_request()
        return {
            "connecting": self._connecting,
            "sessions": [s.to_summary() for s in self.sessions.list_sessions()],
            "head": self.describe_request(head) if head else None,
            "pending": len(self.queue),
        }

    # === Entrypoints ===

    async def pair(self, uri: str) -> None:
        """
        Initiate pairing from a URI.

        Raises:
            RelayError: If the relay refuses the URI
        """
        self._set_connecting(True)
        try:
            await self.sessions.pair(uri)
        except Exception:
            self._set_connecting(False)
            raise

    async def disconnect(self, topic: str) -> None:
        """
        Tear down a session; its queued requests are cancelled.

        Raises:
            SessionNotFoundError: If no Session exists for the topic
        """
        await self.sessions.disconnect(topic)

    async def approve(self, request_id: int | str) -> JsonRpcResponse | None:
        return await self.dispatcher.approve(request_id)

    async def reject(self, request_id: int | str) -> JsonRpcResponse | None:
        return await self.dispatcher.reject(request_id)

    def list_sessions(self) -> list[Session]:
        return self.sessions.list_sessions()

    def pending_requests(self) -> list[PendingRequest]:
        return self.queue.pending()

    def head_request(self) -> PendingRequest | None:
        return self.queue.peek()

    def describe_request(self, pending: PendingRequest) -> dict[str, Any]:
        """Presentation view of a queued request for the hosting UI."""
        spec = self.registry.get(pending.method)
        session = self.sessions.get_session(pending.topic)
        params = pending.params
        if hasattr(params, "model_dump"):
            params = params.model_dump(mode="json", by_alias=True, exclude_none=True)

        return {
            "id": pending.id,
            "topic": pending.topic,
            "method": pending.method,
            "title": spec.display_title,
            "description": spec.display_description,
            "params": params,
            "peer": session.peer_metadata.model_dump() if session else None,
            "queued": len(self.queue),
            "created_at": pending.created_at.isoformat(),
        }

    async def on_active_wallet_changed(self) -> int:
        """
        Disconnect every Session whose account no longer matches the active
        wallet.

        Returns:
            Number of sessions disconnected
        """
        active = await self.sessions.get_active_account()
        stale = [s for s in self.sessions.list_sessions() if s.account != active]
        for session in stale:
            await self.sessions.disconnect(session.topic, reason="Wallet changed")

        if stale:
            logger.info(
                f"Active wallet changed to {active}; "
                f"disconnected {len(stale)} session(s)"
            )
        return len(stale)

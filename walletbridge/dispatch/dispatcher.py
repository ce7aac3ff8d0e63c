"""
Command Dispatcher

Turns every inbound session_request into exactly one relay response.

Pipeline:
1. Look up the command (unknown method -> error response)
2. Validate parameters (failure -> error response, no side effects)
3. Confirmation-requiring commands are queued and suspended until the user
   approves or rejects the head of the Confirmation Queue
4. The handler runs with a HandlerContext (backend, Authentication Gate,
   Session); its result is checked against the declared return schema
5. One response, carrying the original request id, is sent back

Handler failures of any kind are converted to error responses at this
boundary; a peer never observes a missing response. Transport failures while
responding are logged, never raised into the relay callback.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, TYPE_CHECKING

from walletbridge.auth import AuthGate
from walletbridge.backend import WalletBackend
from walletbridge.commands import CommandRegistry, CommandSpec
from walletbridge.handlers import HandlerContext
from walletbridge.protocol.envelope import (
    JsonRpcResponse,
    SessionRequest,
    create_error_response,
    create_result_response,
)
from walletbridge.protocol.errors import (
    BridgeError,
    MethodNotGrantedError,
    SessionNotFoundError,
    WalletMismatchError,
)
from walletbridge.queue import ConfirmationQueue, Decision, PendingRequest
from walletbridge.transport import RelayClient

if TYPE_CHECKING:
    from walletbridge.session import Session, SessionManager

logger = logging.getLogger(__name__)

REJECTED_MESSAGE = "User rejected the request"
DISCONNECTED_MESSAGE = "Session disconnected"


class RejectMode(str, Enum):
    """How a user rejection is reported to the peer."""
    RESULT = "result"  # {result: null}
    ERROR = "error"    # {error: {code: 4001, message: ...}}


class Dispatcher:
    """
    Routes session requests through validation, confirmation and handlers.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        relay: RelayClient,
        backend: WalletBackend,
        auth: AuthGate,
        queue: ConfirmationQueue | None = None,
        sessions: "SessionManager | None" = None,
        reject_mode: RejectMode = RejectMode.RESULT,
    ):
        """
        Initialize the dispatcher.

        Args:
            registry: Command table
            relay: Transport used to send responses
            backend: Wallet backend passed to handlers
            auth: Authentication Gate passed to handlers
            queue: Confirmation Queue (a fresh one if omitted)
            sessions: Session Manager used to resolve the request's Session
                and check its account against the active wallet
            reject_mode: How user rejections are reported
        """
        self._registry = registry
        self._relay = relay
        self._backend = backend
        self._auth = auth
        self._queue = queue if queue is not None else ConfirmationQueue()
        self._sessions = sessions
        self._reject_mode = RejectMode(reject_mode)

    @property
    def queue(self) -> ConfirmationQueue:
        return self._queue

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    # === Inbound ===

    async def handle(self, request: SessionRequest) -> JsonRpcResponse:
        """
        Process a session_request and send its response.

        Suspends for confirmation-requiring commands until `approve`,
        `reject` or a session teardown resolves the queued request.

        Returns:
            The response that was sent
        """
        pending: PendingRequest | None = None
        response: JsonRpcResponse | None = None
        try:
            try:
                spec = self._registry.get(request.method)
                params = self._registry.validate(request.method, request.raw_params)
                session = await self._resolve_session(request.topic, request.method)

                if spec.requires_confirmation:
                    pending = self._enqueue(request, params)
                    decision = await pending.decision
                    response = await self._decided(request, spec, params, decision)
                else:
                    response = await self._execute(request, spec, params, session)
            except BridgeError as e:
                logger.warning(f"Request {request.id} ({request.method}) failed: {e.message}")
                response = create_error_response(request.id, e)
            except Exception as e:
                logger.exception(f"Unexpected error while handling request {request.id}")
                response = create_error_response(request.id, str(e) or "Request failed")

            await self._respond(request.topic, response)
            return response
        finally:
            if pending is not None:
                self._queue.discard(pending)
                if not pending.outcome.done():
                    pending.outcome.set_result(response)

    def _enqueue(self, request: SessionRequest, params: Any) -> PendingRequest:
        loop = asyncio.get_running_loop()
        pending = PendingRequest(
            id=str(request.id),
            topic=request.topic,
            method=request.method,
            params=params,
            decision=loop.create_future(),
            outcome=loop.create_future(),
        )
        return self._queue.enqueue(pending)

    async def _decided(
        self,
        request: SessionRequest,
        spec: CommandSpec,
        params: Any,
        decision: Decision,
    ) -> JsonRpcResponse:
        if decision == Decision.APPROVE:
            # The session may have gone away or switched wallets while queued
            session = await self._resolve_session(request.topic, request.method)
            return await self._execute(request, spec, params, session)

        if decision == Decision.CANCEL:
            return create_error_response(request.id, DISCONNECTED_MESSAGE)

        if self._reject_mode == RejectMode.ERROR:
            return create_error_response(request.id, REJECTED_MESSAGE)
        return create_result_response(request.id, None)

    async def _execute(
        self,
        request: SessionRequest,
        spec: CommandSpec,
        params: Any,
        session: "Session | None",
    ) -> JsonRpcResponse:
        context = HandlerContext(backend=self._backend, auth=self._auth, session=session)
        try:
            result = await spec.handler(params, context)
            payload = self._registry.serialize_result(spec.name, result)
        except BridgeError as e:
            logger.warning(f"Handler for {spec.name} failed: {e.message}")
            return create_error_response(request.id, e)
        except Exception as e:
            logger.exception(f"Unexpected error in handler for {spec.name}")
            return create_error_response(request.id, str(e) or "Request failed")

        logger.debug(f"Request {request.id} ({spec.name}) completed")
        return create_result_response(request.id, payload)

    async def _resolve_session(self, topic: str, method: str) -> "Session | None":
        """
        Find the request's Session and make sure it may call `method` with
        the wallet it was granted.

        Raises:
            SessionNotFoundError: If the topic has no (or no longer a) Session
            MethodNotGrantedError: If the Session was not granted the method
            WalletMismatchError: If the active wallet changed since approval
        """
        if self._sessions is None:
            return None

        session = self._sessions.get_session(topic)
        if session is None:
            raise SessionNotFoundError(topic)

        if method not in session.granted_methods:
            raise MethodNotGrantedError(method, topic)

        active = await self._sessions.get_active_account()
        if active != session.account:
            raise WalletMismatchError(session.account, active)
        return session

    async def _respond(self, topic: str, response: JsonRpcResponse) -> None:
        try:
            await self._relay.respond(topic, response)
        except Exception as e:
            logger.error(f"Failed to send response {response.id} on {topic}: {e}")

    # === User decisions ===

    async def approve(self, request_id: int | str) -> JsonRpcResponse | None:
        """
        Approve the head of the Confirmation Queue.

        Returns:
            The response sent to the peer, or None when the id is not the
            current head (no-op)
        """
        pending = self._queue.resolve_head(str(request_id))
        if pending is None:
            return None

        logger.info(f"Request {pending.id} ({pending.method}) approved")
        pending.decide(Decision.APPROVE)
        return await asyncio.shield(pending.outcome)

    async def reject(self, request_id: int | str) -> JsonRpcResponse | None:
        """
        Reject the head of the Confirmation Queue without running its handler.

        Returns:
            The response sent to the peer, or None when the id is not the
            current head (no-op)
        """
        pending = self._queue.resolve_head(str(request_id))
        if pending is None:
            return None

        logger.info(f"Request {pending.id} ({pending.method}) rejected")
        pending.decide(Decision.REJECT)
        return await asyncio.shield(pending.outcome)

    async def cancel_topic(self, topic: str) -> int:
        """
        Evict and cancel every queued request of a session.

        Returns:
            Number of requests cancelled
        """
        evicted = self._queue.evict_topic(topic)
        for pending in evicted:
            pending.decide(Decision.CANCEL)
        if evicted:
            await asyncio.gather(
                *(asyncio.shield(p.outcome) for p in evicted if p.outcome is not None),
                return_exceptions=True,
            )
        return len(evicted)

    async def on_session_removed(self, session: "Session") -> None:
        await self.cancel_topic(session.topic)

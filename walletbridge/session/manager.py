"""
Session Manager

Tracks active sessions, one per approved pairing, and owns the proposal,
approval and teardown flow.

Proposal acceptance (fails closed):
1. A pairing topic must be present
2. The required `chia` namespace must be present
3. A requested chain must be both supported by the bridge and the network the
   active wallet is on
4. A wallet must be active

On success the proposal is approved granting exactly the requested methods and
events, and the Session becomes visible only after the relay acknowledges the
approval. Any failure rejects the proposal with a descriptive reason and no
Session is created.
"""

import logging
from typing import Awaitable, Callable

from walletbridge.backend import WalletBackend
from walletbridge.protocol.envelope import (
    JsonRpcError,
    SessionNamespace,
    SessionProposal,
)
from walletbridge.protocol.errors import (
    BackendError,
    ProposalRejectedError,
    SessionNotFoundError,
)
from walletbridge.session.session import Session, format_account
from walletbridge.transport import RelayClient

logger = logging.getLogger(__name__)

CHIA_NAMESPACE = "chia"

DEFAULT_SUPPORTED_CHAINS = ("chia:mainnet", "chia:testnet")

# Invoked after a Session is removed, whatever the cause
SessionRemovedListener = Callable[[Session], Awaitable[None]]


class SessionManager:
    """
    Manages the lifecycle of relay sessions.

    The relay client and the wallet backend are injected; the manager keeps
    only the in-memory topic -> Session index.
    """

    def __init__(
        self,
        relay: RelayClient,
        backend: WalletBackend,
        supported_chains: tuple[str, ...] | list[str] = DEFAULT_SUPPORTED_CHAINS,
    ):
        """
        Initialize the session manager.

        Args:
            relay: Pairing/relay client
            backend: Wallet backend (active key and network)
            supported_chains: Chain identifiers the bridge will serve
        """
        self._relay = relay
        self._backend = backend
        self._supported_chains = tuple(supported_chains)

        # Primary index: topic -> Session
        self._sessions: dict[str, Session] = {}

        self._removed_listeners: list[SessionRemovedListener] = []

    def add_removed_listener(self, listener: SessionRemovedListener) -> None:
        self._removed_listeners.append(listener)

    # === Queries ===

    def list_sessions(self) -> list[Session]:
        """Current Session set (observability only)."""
        return list(self._sessions.values())

    def get_session(self, topic: str) -> Session | None:
        return self._sessions.get(topic)

    async def get_active_account(self) -> str | None:
        """
        Account identifier of the active wallet on the active network.

        Returns:
            e.g. `chia:mainnet:1234567890`, or None when no wallet is active
        """
        key = (await self._backend.get_key()).get("key")
        if not key:
            return None
        network = await self._backend.get_network()
        return format_account(CHIA_NAMESPACE, network.get("kind", "unknown"), key["fingerprint"])

    # === Pairing ===

    async def pair(self, uri: str) -> None:
        """
        Initiate pairing; the relay will follow up with a session_proposal.

        Raises:
            RelayError: The transport's error, unchanged
        """
        logger.info("Pairing with peer")
        await self._relay.pair(uri)

    async def restore(self) -> int:
        """
        Load sessions the relay restored across a restart.

        Returns:
            Number of sessions restored
        """
        restored = 0
        for relay_session in await self._relay.get_sessions():
            namespace = relay_session.namespaces.get(CHIA_NAMESPACE)
            if namespace is None or not namespace.accounts:
                continue
            self._sessions[relay_session.topic] = Session(
                topic=relay_session.topic,
                peer_metadata=relay_session.peer,
                account=namespace.accounts[0],
                granted_methods=frozenset(namespace.methods),
                granted_events=frozenset(namespace.events),
            )
            restored += 1

        if restored:
            logger.info(f"Restored {restored} session(s) from relay")
        return restored

    # === Proposal ===

    async def on_session_proposal(self, proposal: SessionProposal) -> Session | None:
        """
        Validate and approve a session proposal.

        Returns:
            The new Session, or None if the proposal was rejected or the
            relay failed to settle it
        """
        try:
            account, namespace = await self._evaluate_proposal(proposal)
        except ProposalRejectedError as e:
            logger.warning(f"Rejecting session proposal {proposal.id}: {e.message}")
            await self._reject(proposal.id, e.message)
            return None
        except Exception as e:
            logger.exception(f"Failed to evaluate session proposal {proposal.id}")
            await self._reject(proposal.id, str(e) or "Failed to connect")
            return None

        granted = {
            CHIA_NAMESPACE: SessionNamespace(
                accounts=[account],
                methods=list(namespace.methods),
                events=list(namespace.events),
            )
        }

        try:
            approval = await self._relay.approve(proposal.id, granted)
        except Exception as e:
            logger.error(f"Relay failed to approve proposal {proposal.id}: {e}")
            await self._reject(proposal.id, str(e) or "Failed to connect")
            return None

        try:
            await approval.acknowledged()
        except Exception as e:
            logger.error(
                f"Session {approval.topic} was not acknowledged by the peer: {e}"
            )
            return None

        session = Session(
            topic=approval.topic,
            peer_metadata=proposal.params.proposer.metadata,
            account=account,
            granted_methods=frozenset(namespace.methods),
            granted_events=frozenset(namespace.events),
        )
        self._sessions[session.topic] = session

        logger.info(
            f"Session {session.topic} approved for {session.peer_metadata.name or 'peer'} "
            f"(account={account}, methods={len(session.granted_methods)})"
        )
        return session

    async def _evaluate_proposal(self, proposal: SessionProposal):
        params = proposal.params

        if not params.pairing_topic:
            raise ProposalRejectedError("Pairing topic not found")

        namespace = params.required_namespaces.get(CHIA_NAMESPACE)
        if namespace is None:
            raise ProposalRejectedError("Missing required chia namespace")

        candidates = [
            chain for chain in namespace.chains
            if chain in self._supported_chains
        ]
        if not candidates:
            raise ProposalRejectedError("Chain not supported")

        try:
            network = await self._backend.get_network()
            key = (await self._backend.get_key()).get("key")
        except BackendError as e:
            raise ProposalRejectedError(e.message) from e

        # The wallet must actually be on one of the requested chains
        kind = network.get("kind", "unknown")
        if f"{CHIA_NAMESPACE}:{kind}" not in candidates:
            raise ProposalRejectedError("Chain not supported")

        if not key:
            raise ProposalRejectedError("No active wallet")

        account = format_account(CHIA_NAMESPACE, kind, key["fingerprint"])
        return account, namespace

    async def _reject(self, proposal_id: int, message: str) -> None:
        try:
            await self._relay.reject(proposal_id, JsonRpcError(message=message))
        except Exception as e:
            logger.error(f"Failed to reject proposal {proposal_id}: {e}")

    # === Teardown ===

    async def on_session_delete(self, topic: str) -> None:
        """Remove a Session deleted by the peer (idempotent)."""
        session = self._sessions.pop(topic, None)
        if session is None:
            logger.debug(f"session_delete for unknown topic {topic}")
            return

        logger.info(f"Session {topic} deleted by peer")
        await self._notify_removed(session)

    async def disconnect(self, topic: str, reason: str = "User disconnected") -> None:
        """
        Tear down a Session locally and notify the relay.

        Raises:
            SessionNotFoundError: If no Session exists for the topic
        """
        session = self._sessions.pop(topic, None)
        if session is None:
            raise SessionNotFoundError(topic)

        try:
            await self._relay.disconnect(topic, JsonRpcError(message=reason))
        except Exception as e:
            logger.error(f"Relay disconnect failed for {topic}: {e}")

        logger.info(f"Session {topic} disconnected ({reason})")
        await self._notify_removed(session)

    async def _notify_removed(self, session: Session) -> None:
        for listener in list(self._removed_listeners):
            try:
                await listener(session)
            except Exception as e:
                logger.error(f"Session removal listener failed for {session.topic}: {e}")

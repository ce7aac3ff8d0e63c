"""
Session Model

An approved, ongoing grant of methods/events to a peer application under one
wallet account. One Session exists per approved relay topic.

Session lifecycle:
1. Created after the relay acknowledges a proposal approval
2. Destroyed on session_delete or an explicit disconnect
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from walletbridge.protocol.envelope import PeerMetadata


def format_account(namespace: str, network_kind: str, fingerprint: int) -> str:
    """Build an account identifier, e.g. `chia:testnet:1234567890`."""
    return f"{namespace}:{network_kind}:{fingerprint}"


class Session(BaseModel):
    """
    Bridge-side view of an approved session.
    """
    topic: str = Field(
        ...,
        description="Relay topic identifying the session"
    )
    peer_metadata: PeerMetadata = Field(
        default_factory=PeerMetadata,
        description="Peer's self-declared name, url and icons"
    )
    account: str = Field(
        ...,
        description="Account granted at approval time (chain:network:fingerprint)"
    )
    granted_methods: frozenset[str] = Field(
        default_factory=frozenset,
        description="Methods granted exactly as requested"
    )
    granted_events: frozenset[str] = Field(
        default_factory=frozenset,
        description="Events granted exactly as requested"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def chain(self) -> str:
        """Chain part of the account, e.g. `chia:testnet`."""
        return self.account.rsplit(":", 1)[0]

    @property
    def fingerprint(self) -> int | None:
        try:
            return int(self.account.rsplit(":", 1)[1])
        except (IndexError, ValueError):
            return None

    def to_summary(self) -> dict:
        """JSON-friendly view for observability endpoints."""
        return {
            "topic": self.topic,
            "peer": self.peer_metadata.model_dump(),
            "account": self.account,
            "methods": sorted(self.granted_methods),
            "events": sorted(self.granted_events),
            "created_at": self.created_at.isoformat(),
        }

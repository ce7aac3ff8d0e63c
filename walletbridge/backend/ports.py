"""
Wallet Backend Port

Abstract interface for the wallet backend the bridge drives. Handlers call
these commands as opaque async operations; signing, coin selection and chain
sync all happen behind this port.

Request and response payloads are the backend's own JSON shapes (snake_case
keys) passed through as plain dicts. Handlers are responsible for translating
between bridge-shaped parameters and these payloads.

Every method raises BackendError when the backend fails; the reason is
forwarded verbatim to the peer.
"""

from abc import ABC, abstractmethod
from typing import Any

JSON = dict[str, Any]


class WalletBackend(ABC):
    """
    Asynchronous wallet backend commands used by the bridge.

    Implementations:
    - SageRpcBackend: HTTPS client for a running wallet RPC server
    - Test fakes: in-process doubles recording calls
    """

    # === Wallet / network ===

    @abstractmethod
    async def get_key(self) -> JSON:
        """
        Get the active wallet key.

        Returns:
            {"key": {"fingerprint": int, ...} | None}
        """
        ...

    @abstractmethod
    async def get_network(self) -> JSON:
        """
        Get the active network.

        Returns:
            {"network": {"name": str, "network_id": str | None, ...},
             "kind": "mainnet" | "testnet" | "unknown"}
        """
        ...

    @abstractmethod
    async def get_sync_status(self) -> JSON:
        """Get sync status, including `receive_address`."""
        ...

    # === Keys and coins ===

    @abstractmethod
    async def get_derivations(self, request: JSON) -> JSON:
        """Get derived keys: {"derivations": [{"public_key": str, ...}]}."""
        ...

    @abstractmethod
    async def filter_unlocked_coins(self, request: JSON) -> JSON:
        """Filter `coin_ids` down to the unlocked ones: {"coin_ids": [...]}."""
        ...

    @abstractmethod
    async def get_asset_coins(self, request: JSON) -> list[JSON]:
        """Get spendable coin records for an asset."""
        ...

    # === Signing and broadcast ===

    @abstractmethod
    async def sign_coin_spends(self, request: JSON) -> JSON:
        """Sign coin spends: {"spend_bundle": {"aggregated_signature": str, ...}}."""
        ...

    @abstractmethod
    async def sign_message_with_public_key(self, request: JSON) -> JSON:
        """Sign a message with a public key: {"signature": str}."""
        ...

    @abstractmethod
    async def sign_message_by_address(self, request: JSON) -> JSON:
        """Sign a message by address: {"publicKey": str, "signature": str}."""
        ...

    @abstractmethod
    async def send_transaction_immediately(self, request: JSON) -> JSON:
        """Broadcast a signed spend bundle: {"status": int, "error": str | None}."""
        ...

    # === Offers ===

    @abstractmethod
    async def make_offer(self, request: JSON) -> JSON:
        """Create an offer: {"offer": str, "offer_id": str}."""
        ...

    @abstractmethod
    async def take_offer(self, request: JSON) -> JSON:
        """Take an offer: {"transaction_id": str, ...}."""
        ...

    @abstractmethod
    async def cancel_offer(self, request: JSON) -> JSON:
        """Cancel an offer on-chain."""
        ...

    # === Assets ===

    @abstractmethod
    async def get_nfts(self, request: JSON) -> JSON:
        """List NFTs: {"nfts": [...]}."""
        ...

    @abstractmethod
    async def send_xch(self, request: JSON) -> JSON:
        """Send the native asset."""
        ...

    @abstractmethod
    async def send_cat(self, request: JSON) -> JSON:
        """Send a CAT."""
        ...

    @abstractmethod
    async def bulk_mint_nfts(self, request: JSON) -> JSON:
        """Mint a batch of NFTs: {"nft_ids": [...], ...}."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        pass

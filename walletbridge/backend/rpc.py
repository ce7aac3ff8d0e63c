"""
Wallet RPC Backend

WalletBackend implementation that talks to a running wallet RPC server over
HTTPS. Every command is a POST of a JSON body to `/<endpoint>`; a non-200
reply carries the failure reason as its body text.

The server authenticates clients with the wallet's own certificate/key pair
(mutual TLS) and presents a self-signed certificate, so server verification
is disabled and the client identity is loaded into the SSL context.
"""

import logging
import ssl
from typing import Any

import httpx

from walletbridge.backend.ports import JSON, WalletBackend
from walletbridge.protocol.errors import BackendError

logger = logging.getLogger(__name__)

DEFAULT_RPC_HOST = "127.0.0.1"
DEFAULT_RPC_PORT = 9257


def create_client_ssl_context(cert_path: str, key_path: str) -> ssl.SSLContext:
    """Build an SSL context presenting the wallet client identity."""
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    context.load_cert_chain(certfile=cert_path, keyfile=key_path)
    return context


class SageRpcBackend(WalletBackend):
    """
    HTTPS client for the wallet RPC server.

    Args:
        host: RPC server host
        port: RPC server port
        cert_path: Client certificate (PEM)
        key_path: Client private key (PEM)
        timeout_seconds: Per-request timeout
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        host: str = DEFAULT_RPC_HOST,
        port: int = DEFAULT_RPC_PORT,
        cert_path: str | None = None,
        key_path: str | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = f"https://{host}:{port}"

        verify: ssl.SSLContext | bool = False
        if cert_path and key_path:
            verify = create_client_ssl_context(cert_path, key_path)

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            verify=verify,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(self, endpoint: str, body: JSON | None = None) -> Any:
        """
        POST a command to the RPC server.

        Raises:
            BackendError: On connection failure, a non-200 reply or a body
                that is not JSON
        """
        try:
            response = await self._client.post(f"/{endpoint}", json=body or {})
        except httpx.HTTPError as e:
            logger.error(f"Wallet RPC {endpoint} failed: {e}")
            raise BackendError(f"Wallet backend unavailable: {e}") from e

        if response.status_code != httpx.codes.OK:
            reason = response.text or f"HTTP {response.status_code}"
            logger.warning(
                f"Wallet RPC {endpoint} returned {response.status_code}: {reason}"
            )
            raise BackendError(reason, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Wallet RPC {endpoint} returned a non-JSON body: {e}")
            raise BackendError("Invalid response from wallet") from e

    async def get_key(self) -> JSON:
        return await self._call("get_key")

    async def get_network(self) -> JSON:
        return await self._call("get_network")

    async def get_sync_status(self) -> JSON:
        return await self._call("get_sync_status")

    async def get_derivations(self, request: JSON) -> JSON:
        return await self._call("get_derivations", request)

    async def filter_unlocked_coins(self, request: JSON) -> JSON:
        return await self._call("filter_unlocked_coins", request)

    async def get_asset_coins(self, request: JSON) -> list[JSON]:
        return await self._call("get_asset_coins", request)

    async def sign_coin_spends(self, request: JSON) -> JSON:
        return await self._call("sign_coin_spends", request)

    async def sign_message_with_public_key(self, request: JSON) -> JSON:
        return await self._call("sign_message_with_public_key", request)

    async def sign_message_by_address(self, request: JSON) -> JSON:
        return await self._call("sign_message_by_address", request)

    async def send_transaction_immediately(self, request: JSON) -> JSON:
        return await self._call("send_transaction_immediately", request)

    async def make_offer(self, request: JSON) -> JSON:
        return await self._call("make_offer", request)

    async def take_offer(self, request: JSON) -> JSON:
        return await self._call("take_offer", request)

    async def cancel_offer(self, request: JSON) -> JSON:
        return await self._call("cancel_offer", request)

    async def get_nfts(self, request: JSON) -> JSON:
        return await self._call("get_nfts", request)

    async def send_xch(self, request: JSON) -> JSON:
        return await self._call("send_xch", request)

    async def send_cat(self, request: JSON) -> JSON:
        return await self._call("send_cat", request)

    async def bulk_mint_nfts(self, request: JSON) -> JSON:
        return await self._call("bulk_mint_nfts", request)

"""
Shared fixtures: an in-process wallet backend double, relay, auth gate and
request/proposal builders.
"""

import asyncio
from typing import Any

import pytest

from walletbridge.auth import AuthGate, AuthState
from walletbridge.backend import WalletBackend
from walletbridge.commands.builtin import create_default_registry
from walletbridge.protocol.envelope import SessionProposal, SessionRequest
from walletbridge.transport import InMemoryRelayClient

FINGERPRINT = 1234567890


def sample_nft() -> dict[str, Any]:
    return {
        "launcher_id": "nft1launcher",
        "collection_id": "col1",
        "collection_name": "Collection",
        "minter_did": None,
        "owner_did": "did:chia:owner",
        "name": "Sample",
        "created_height": 42,
        "coin_id": "0xcoin",
        "address": "xch1owner",
        "royalty_address": "xch1royalty",
        "royalty_ten_thousandths": 300,
        "data_uris": ["https://example.com/a.png"],
        "data_hash": "0xdata",
        "metadata_uris": [],
        "metadata_hash": None,
        "license_uris": [],
        "license_hash": None,
        "edition_number": 1,
        "edition_total": 1,
    }


def coin_record(amount: int, locked: bool, name: str = "0xcoin") -> dict[str, Any]:
    return {
        "coin": {"parent_coin_info": "0xparent", "puzzle_hash": "0xpuzzle", "amount": amount},
        "coin_name": name,
        "puzzle": "0xff",
        "confirmed_block_index": 10,
        "locked": locked,
        "lineage_proof": None,
    }


class FakeBackend(WalletBackend):
    """
    Wallet backend double.

    Records every call; `responses` holds a value (or a callable taking the
    request) per command, `failures` an exception to raise instead.
    """

    def __init__(self, fingerprint: int | None = FINGERPRINT, network_kind: str = "mainnet"):
        self.fingerprint = fingerprint
        self.network_kind = network_kind
        self.calls: list[tuple[str, Any]] = []
        self.failures: dict[str, Exception] = {}
        self.closed = False
        self.responses: dict[str, Any] = {
            "get_sync_status": {"receive_address": "xch1receive", "synced_coins": 10},
            "get_derivations": {"derivations": [{"public_key": "0xpk0"}, {"public_key": "0xpk1"}]},
            "filter_unlocked_coins": lambda request: {"coin_ids": request["coin_ids"][:1]},
            "get_asset_coins": [coin_record(100, False, "0xa"), coin_record(50, True, "0xb")],
            "sign_coin_spends": {
                "spend_bundle": {"coin_spends": [], "aggregated_signature": "0xsig"}
            },
            "sign_message_with_public_key": {"signature": "0xmsgsig"},
            "sign_message_by_address": {"publicKey": "0xpk", "signature": "0xaddrsig"},
            "send_transaction_immediately": {"status": 1, "error": None},
            "make_offer": {"offer": "offer1abc", "offer_id": "0xoffer"},
            "take_offer": {"transaction_id": "0xtx"},
            "cancel_offer": {},
            "get_nfts": {"nfts": [sample_nft()]},
            "send_xch": {},
            "send_cat": {},
            "bulk_mint_nfts": {"nft_ids": ["nft1minted"]},
        }

    def called(self, name: str) -> list[Any]:
        return [request for command, request in self.calls if command == name]

    async def _call(self, name: str, request: Any = None) -> Any:
        self.calls.append((name, request))
        if name in self.failures:
            raise self.failures[name]
        response = self.responses[name]
        return response(request) if callable(response) else response

    async def get_key(self):
        self.calls.append(("get_key", None))
        if "get_key" in self.failures:
            raise self.failures["get_key"]
        if self.fingerprint is None:
            return {"key": None}
        return {"key": {"fingerprint": self.fingerprint, "name": "Main"}}

    async def get_network(self):
        if "get_network" in self.responses:
            return await self._call("get_network")
        self.calls.append(("get_network", None))
        if "get_network" in self.failures:
            raise self.failures["get_network"]
        return {
            "network": {"name": self.network_kind, "network_id": self.network_kind},
            "kind": self.network_kind,
        }

    async def get_sync_status(self):
        return await self._call("get_sync_status")

    async def get_derivations(self, request):
        return await self._call("get_derivations", request)

    async def filter_unlocked_coins(self, request):
        return await self._call("filter_unlocked_coins", request)

    async def get_asset_coins(self, request):
        return await self._call("get_asset_coins", request)

    async def sign_coin_spends(self, request):
        return await self._call("sign_coin_spends", request)

    async def sign_message_with_public_key(self, request):
        return await self._call("sign_message_with_public_key", request)

    async def sign_message_by_address(self, request):
        return await self._call("sign_message_by_address", request)

    async def send_transaction_immediately(self, request):
        return await self._call("send_transaction_immediately", request)

    async def make_offer(self, request):
        return await self._call("make_offer", request)

    async def take_offer(self, request):
        return await self._call("take_offer", request)

    async def cancel_offer(self, request):
        return await self._call("cancel_offer", request)

    async def get_nfts(self, request):
        return await self._call("get_nfts", request)

    async def send_xch(self, request):
        return await self._call("send_xch", request)

    async def send_cat(self, request):
        return await self._call("send_cat", request)

    async def bulk_mint_nfts(self, request):
        return await self._call("bulk_mint_nfts", request)

    async def close(self):
        self.closed = True


class FakeAuthenticator:
    """Out-of-band challenge double counting prompts."""

    def __init__(self, result: bool = True, delay: float = 0.0):
        self.result = result
        self.delay = delay
        self.reasons: list[str] = []

    @property
    def prompts(self) -> int:
        return len(self.reasons)

    async def __call__(self, reason: str) -> bool:
        self.reasons.append(reason)
        if self.delay:
            await asyncio.sleep(self.delay)
        else:
            await asyncio.sleep(0)
        return self.result


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def advance(self, ms: float) -> None:
        self.now += ms

    def __call__(self) -> float:
        return self.now


def make_request(
    request_id: int | str,
    method: str,
    params: Any = None,
    topic: str = "topic-1",
) -> SessionRequest:
    return SessionRequest.model_validate({
        "id": request_id,
        "topic": topic,
        "params": {
            "request": {"method": method, "params": params},
            "chainId": "chia:mainnet",
        },
    })


def make_proposal(
    proposal_id: int = 1,
    chains: list[str] | None = None,
    methods: list[str] | None = None,
    events: list[str] | None = None,
    pairing_topic: str | None = "pairing-topic",
    namespace: str = "chia",
) -> SessionProposal:
    return SessionProposal.model_validate({
        "id": proposal_id,
        "params": {
            "pairingTopic": pairing_topic,
            "proposer": {
                "publicKey": "0xproposer",
                "metadata": {"name": "Test dApp", "url": "https://dapp.example", "icons": []},
            },
            "requiredNamespaces": {
                namespace: {
                    "chains": chains if chains is not None else ["chia:mainnet"],
                    "methods": methods if methods is not None else ["chip0002_chainId"],
                    "events": events if events is not None else [],
                }
            },
        },
    })


async def wait_until(predicate, attempts: int = 200) -> None:
    """Yield to the event loop until `predicate()` holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def relay():
    return InMemoryRelayClient()


@pytest.fixture
def registry():
    return create_default_registry()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def auth():
    return AuthGate()


@pytest.fixture
def authenticator():
    return FakeAuthenticator()


@pytest.fixture
def enabled_auth(authenticator, clock):
    return AuthGate(
        authenticator=authenticator,
        state=AuthState(enabled=True),
        clock=clock,
    )

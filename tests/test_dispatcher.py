"""
Tests for the Command Dispatcher

Confirmation routing, exactly-once responses and error conversion.
"""

import asyncio

import pytest

from conftest import FakeAuthenticator, make_proposal, make_request, wait_until
from walletbridge.auth import AuthGate, AuthState
from walletbridge.dispatch import Dispatcher, RejectMode
from walletbridge.protocol.errors import BackendError
from walletbridge.session import SessionManager

OFFER_PARAMS = {
    "offerAssets": [{"assetId": "", "amount": 1000}],
    "requestAssets": [{"assetId": "0xcat", "amount": "500"}],
}


@pytest.fixture
def dispatcher(registry, relay, backend, auth):
    return Dispatcher(registry=registry, relay=relay, backend=backend, auth=auth)


async def queue_request(dispatcher, request):
    """Start handling a confirmation-requiring request and wait until it is queued."""
    task = asyncio.create_task(dispatcher.handle(request))
    await wait_until(lambda: dispatcher.queue.get(str(request.id)) is not None)
    return task


class TestImmediateCommands:

    @pytest.mark.asyncio
    async def test_result_response(self, dispatcher, relay):
        response = await dispatcher.handle(make_request(1, "chip0002_chainId"))

        assert response.id == 1
        assert response.result == "mainnet"
        assert response.error is None
        assert relay.responses == [("topic-1", response)]

    @pytest.mark.asyncio
    async def test_result_serialized_with_aliases(self, dispatcher):
        response = await dispatcher.handle(make_request(
            2, "chip0002_getAssetBalance", {"type": "cat", "assetId": "0xcat"}
        ))
        assert response.result == {
            "confirmed": "150",
            "spendable": "100",
            "spendableCoinCount": 1,
        }

    @pytest.mark.asyncio
    async def test_unknown_method(self, dispatcher, relay, backend):
        response = await dispatcher.handle(make_request("abc", "chip0002_unknown"))

        assert response.id == "abc"
        assert response.error.code == 4001
        assert response.error.message == "Unsupported method: chip0002_unknown"
        assert backend.calls == []
        assert len(relay.responses) == 1

    @pytest.mark.asyncio
    async def test_validation_error_has_no_side_effects(self, dispatcher, relay, backend):
        response = await dispatcher.handle(make_request(
            3, "chip0002_filterUnlockedCoins", {"coinNames": []}
        ))

        assert response.is_error
        assert response.error.data == {"fields": ["coinNames"]}
        assert backend.calls == []
        assert dispatcher.queue.is_empty
        assert len(relay.responses_for(3)) == 1

    @pytest.mark.asyncio
    async def test_confirmation_command_with_invalid_params_is_not_queued(self, dispatcher):
        response = await dispatcher.handle(make_request(4, "chia_createOffer", {"offerAssets": []}))

        assert response.is_error
        assert dispatcher.queue.is_empty

    @pytest.mark.asyncio
    async def test_backend_error_forwarded(self, dispatcher, backend):
        backend.failures["get_sync_status"] = BackendError("Wallet is not synced")
        response = await dispatcher.handle(make_request(5, "chia_getAddress", {}))

        assert response.error.message == "Wallet is not synced"

    @pytest.mark.asyncio
    async def test_unexpected_handler_exception(self, dispatcher, relay, backend):
        backend.failures["get_derivations"] = RuntimeError("kaboom")
        response = await dispatcher.handle(make_request(6, "chip0002_getPublicKeys"))

        assert response.error.message == "kaboom"
        assert len(relay.responses_for(6)) == 1

    @pytest.mark.asyncio
    async def test_invalid_backend_result(self, dispatcher, backend):
        backend.responses["get_network"] = {"network": {"name": 5, "network_id": None}}
        response = await dispatcher.handle(make_request(7, "chip0002_chainId"))

        assert response.error.message == "Invalid response from wallet"

    @pytest.mark.asyncio
    async def test_transport_failure_is_logged_not_raised(self, dispatcher, relay):
        relay.respond_error = RuntimeError("relay offline")
        response = await dispatcher.handle(make_request(8, "chip0002_connect"))

        assert response.result is True
        assert relay.responses == []

    @pytest.mark.asyncio
    async def test_concurrent_immediate_requests(self, dispatcher, relay):
        responses = await asyncio.gather(*(
            dispatcher.handle(make_request(i, "chip0002_connect")) for i in range(5)
        ))
        assert [r.id for r in responses] == [0, 1, 2, 3, 4]
        assert len(relay.responses) == 5


class TestConfirmation:

    @pytest.mark.asyncio
    async def test_handler_waits_for_approval(self, dispatcher, relay, backend):
        task = await queue_request(dispatcher, make_request(10, "chia_createOffer", OFFER_PARAMS))

        assert backend.called("make_offer") == []
        assert relay.responses == []
        assert dispatcher.queue.peek().method == "chia_createOffer"

        response = await dispatcher.approve(10)

        assert response.result == {"id": "0xoffer", "offer": "offer1abc"}
        assert await task == response
        assert dispatcher.queue.is_empty
        assert relay.responses_for(10) == [response]

        request = backend.called("make_offer")[0]
        assert request["offered_assets"][0]["asset_id"] is None
        assert request["requested_assets"][0] == {
            "asset_id": "0xcat",
            "amount": "500",
            "hidden_puzzle_hash": None,
        }

    @pytest.mark.asyncio
    async def test_reject_returns_null_result(self, dispatcher, relay, backend):
        task = await queue_request(dispatcher, make_request(11, "chia_takeOffer", {"offer": "offer1"}))

        response = await dispatcher.reject(11)

        assert response.result is None
        assert response.error is None
        assert response.to_dict() == {"id": 11, "jsonrpc": "2.0", "result": None}
        assert await task == response
        assert backend.called("take_offer") == []
        assert len(relay.responses_for(11)) == 1

    @pytest.mark.asyncio
    async def test_reject_as_error(self, registry, relay, backend, auth):
        dispatcher = Dispatcher(
            registry=registry,
            relay=relay,
            backend=backend,
            auth=auth,
            reject_mode=RejectMode.ERROR,
        )
        await queue_request(dispatcher, make_request(12, "chia_cancelOffer", {"id": "0xoffer"}))

        response = await dispatcher.reject(12)

        assert response.error.code == 4001
        assert response.error.message == "User rejected the request"

    @pytest.mark.asyncio
    async def test_fifo_resolution(self, dispatcher, backend):
        first = await queue_request(dispatcher, make_request(
            20, "chip0002_signMessage", {"message": "first", "publicKey": "0xpk"}
        ))
        second = await queue_request(dispatcher, make_request(
            21, "chip0002_signMessage", {"message": "second", "publicKey": "0xpk"}
        ))

        # Only the head may be resolved
        assert await dispatcher.approve(21) is None
        assert await dispatcher.reject(21) is None
        assert len(dispatcher.queue) == 2

        await dispatcher.approve(20)
        await dispatcher.approve(21)
        await asyncio.gather(first, second)

        messages = [call["message"] for call in backend.called("sign_message_with_public_key")]
        assert messages == ["first", "second"]

    @pytest.mark.asyncio
    async def test_approve_on_empty_queue(self, dispatcher):
        assert await dispatcher.approve("missing") is None

    @pytest.mark.asyncio
    async def test_failed_handler_after_approval(self, dispatcher, relay, backend):
        backend.failures["send_xch"] = BackendError("Insufficient balance")
        task = await queue_request(dispatcher, make_request(
            30, "chia_send", {"address": "xch1dest", "amount": 1}
        ))

        response = await dispatcher.approve(30)

        assert response.error.message == "Insufficient balance"
        assert await task == response
        assert dispatcher.queue.is_empty
        assert len(relay.responses_for(30)) == 1

    @pytest.mark.asyncio
    async def test_authentication_failure_after_approval(self, registry, relay, backend):
        auth = AuthGate(
            authenticator=FakeAuthenticator(result=False),
            state=AuthState(enabled=True),
        )
        dispatcher = Dispatcher(registry=registry, relay=relay, backend=backend, auth=auth)
        await queue_request(dispatcher, make_request(
            31, "chip0002_signMessage", {"message": "hi", "publicKey": "0xpk"}
        ))

        response = await dispatcher.approve(31)

        assert response.error.message == "Authentication failed"
        assert backend.called("sign_message_with_public_key") == []

    @pytest.mark.asyncio
    async def test_duplicate_pending_id(self, dispatcher, relay):
        task = await queue_request(dispatcher, make_request(40, "chia_takeOffer", {"offer": "a"}))
        response = await dispatcher.handle(make_request(40, "chia_takeOffer", {"offer": "b"}))

        assert response.error.message == "Request 40 is already pending"
        assert dispatcher.queue.peek().params.offer == "a"

        await dispatcher.reject(40)
        assert (await task).result is None

    @pytest.mark.asyncio
    async def test_cancel_topic(self, dispatcher, relay, backend):
        task = await queue_request(dispatcher, make_request(
            50, "chia_takeOffer", {"offer": "offer1"}, topic="gone"
        ))
        other = await queue_request(dispatcher, make_request(
            51, "chia_takeOffer", {"offer": "offer2"}, topic="kept"
        ))

        assert await dispatcher.cancel_topic("gone") == 1

        response = await task
        assert response.error.message == "Session disconnected"
        assert backend.called("take_offer") == []
        assert [p.id for p in dispatcher.queue.pending()] == ["51"]

        await dispatcher.reject(51)
        await other


@pytest.fixture
def sessions(relay, backend):
    return SessionManager(relay, backend)


@pytest.fixture
def bound_dispatcher(registry, relay, backend, auth, sessions):
    return Dispatcher(
        registry=registry,
        relay=relay,
        backend=backend,
        auth=auth,
        sessions=sessions,
    )


class TestWalletBinding:

    @pytest.mark.asyncio
    async def test_wallet_change_blocks_handlers(self, bound_dispatcher, sessions, backend):
        session = await sessions.on_session_proposal(make_proposal(
            methods=["chip0002_chainId", "chip0002_getPublicKeys"]
        ))

        ok = await bound_dispatcher.handle(make_request(60, "chip0002_chainId", topic=session.topic))
        assert ok.result == "mainnet"

        backend.fingerprint = 999
        response = await bound_dispatcher.handle(
            make_request(61, "chip0002_getPublicKeys", topic=session.topic)
        )

        assert "does not match the active wallet" in response.error.message
        assert backend.called("get_derivations") == []

    @pytest.mark.asyncio
    async def test_wallet_change_while_queued(self, bound_dispatcher, sessions, backend):
        session = await sessions.on_session_proposal(make_proposal(
            methods=["chip0002_signMessage"]
        ))
        await queue_request(bound_dispatcher, make_request(
            62, "chip0002_signMessage", {"message": "hi", "publicKey": "0xpk"}, topic=session.topic
        ))

        backend.fingerprint = 999
        response = await bound_dispatcher.approve(62)

        assert response.is_error
        assert backend.called("sign_message_with_public_key") == []


class TestSessionResolution:

    @pytest.mark.asyncio
    async def test_unknown_topic(self, bound_dispatcher, relay, backend):
        response = await bound_dispatcher.handle(
            make_request(70, "chip0002_chainId", topic="never-approved")
        )

        assert response.error.code == 4001
        assert response.error.message == "Session not found: never-approved"
        assert backend.calls == []
        assert relay.responses == [("never-approved", response)]

    @pytest.mark.asyncio
    async def test_confirmation_command_on_unknown_topic_is_not_queued(self, bound_dispatcher, backend):
        response = await bound_dispatcher.handle(make_request(
            71, "chia_send", {"address": "xch1dest", "amount": 1}, topic="never-approved"
        ))

        assert response.error.message == "Session not found: never-approved"
        assert bound_dispatcher.queue.is_empty
        assert backend.called("send_xch") == []

    @pytest.mark.asyncio
    async def test_deleted_topic(self, bound_dispatcher, sessions, relay):
        session = await sessions.on_session_proposal(make_proposal())
        await sessions.on_session_delete(session.topic)

        response = await bound_dispatcher.handle(
            make_request(72, "chip0002_chainId", topic=session.topic)
        )

        assert response.error.message == f"Session not found: {session.topic}"
        assert len(relay.responses_for(72)) == 1

    @pytest.mark.asyncio
    async def test_method_not_granted(self, bound_dispatcher, sessions, backend):
        session = await sessions.on_session_proposal(make_proposal(methods=["chip0002_chainId"]))

        response = await bound_dispatcher.handle(make_request(
            73, "chia_send", {"address": "xch1dest", "amount": 1}, topic=session.topic
        ))

        assert response.error.message == "Method chia_send is not granted to this session"
        assert bound_dispatcher.queue.is_empty
        assert backend.called("send_xch") == []

    @pytest.mark.asyncio
    async def test_unexpected_error_outside_handler(self, bound_dispatcher, sessions, relay, backend):
        session = await sessions.on_session_proposal(make_proposal())
        backend.failures["get_key"] = RuntimeError("boom")

        response = await bound_dispatcher.handle(
            make_request(74, "chip0002_chainId", topic=session.topic)
        )

        assert response.error.code == 4001
        assert response.error.message == "boom"
        assert relay.responses_for(74) == [response]

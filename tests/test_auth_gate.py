"""
Tests for the Authentication Gate

Disabled / cached / prompt-required behaviour, failure handling and the
persisted enabled flag.
"""

import asyncio

import pytest

from conftest import FakeAuthenticator, FakeClock
from walletbridge.auth import AuthGate, AuthGateState, AuthState, DEFAULT_COOLDOWN_MS
from walletbridge.storage import InMemorySettingsStore


class TestCheckOrPrompt:

    @pytest.mark.asyncio
    async def test_disabled_gate_never_prompts(self, authenticator):
        gate = AuthGate(authenticator=authenticator)

        assert gate.state == AuthGateState.DISABLED
        assert await gate.check_or_prompt() is True
        assert authenticator.prompts == 0

    @pytest.mark.asyncio
    async def test_success_is_cached_within_cooldown(self, enabled_auth, authenticator, clock):
        assert enabled_auth.state == AuthGateState.PROMPT_REQUIRED

        assert await enabled_auth.check_or_prompt() is True
        clock.advance(60_000)
        assert await enabled_auth.check_or_prompt() is True

        assert authenticator.prompts == 1
        assert enabled_auth.state == AuthGateState.AUTHENTICATED_CACHED

    @pytest.mark.asyncio
    async def test_prompts_again_after_cooldown(self, enabled_auth, authenticator, clock):
        await enabled_auth.check_or_prompt()
        clock.advance(60_000)
        await enabled_auth.check_or_prompt()
        clock.advance(DEFAULT_COOLDOWN_MS)
        await enabled_auth.check_or_prompt()

        assert authenticator.prompts == 2

    @pytest.mark.asyncio
    async def test_failure_leaves_timestamp_untouched(self, clock):
        authenticator = FakeAuthenticator(result=False)
        gate = AuthGate(authenticator=authenticator, state=AuthState(enabled=True), clock=clock)

        assert await gate.check_or_prompt() is False
        assert gate.auth_state.last_successful_auth_at is None

        # Not cached: the next call prompts again
        assert await gate.check_or_prompt() is False
        assert authenticator.prompts == 2

    @pytest.mark.asyncio
    async def test_challenge_exception_counts_as_failure(self, clock):
        async def broken(reason):
            raise RuntimeError("sensor unavailable")

        gate = AuthGate(authenticator=broken, state=AuthState(enabled=True), clock=clock)
        assert await gate.check_or_prompt() is False

    @pytest.mark.asyncio
    async def test_enabled_without_authenticator_fails_closed(self, clock):
        gate = AuthGate(state=AuthState(enabled=True), clock=clock)
        assert await gate.check_or_prompt() is False

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_challenge(self, clock):
        authenticator = FakeAuthenticator(delay=0.01)
        gate = AuthGate(authenticator=authenticator, state=AuthState(enabled=True), clock=clock)

        results = await asyncio.gather(*(gate.check_or_prompt() for _ in range(3)))

        assert results == [True, True, True]
        assert authenticator.prompts == 1

    @pytest.mark.asyncio
    async def test_custom_cooldown(self, authenticator):
        clock = FakeClock()
        gate = AuthGate(
            authenticator=authenticator,
            state=AuthState(enabled=True, cooldown_ms=1_000),
            clock=clock,
        )
        await gate.check_or_prompt()
        clock.advance(1_000)
        await gate.check_or_prompt()
        assert authenticator.prompts == 2


class TestEnableDisable:

    @pytest.mark.asyncio
    async def test_enable_requires_authenticator(self):
        gate = AuthGate()
        assert gate.available is False
        assert await gate.enable_if_available() is False
        assert gate.enabled is False

    @pytest.mark.asyncio
    async def test_enable_persists_flag(self, authenticator, clock):
        store = InMemorySettingsStore()
        gate = AuthGate(authenticator=authenticator, settings_store=store, clock=clock)

        assert await gate.enable_if_available() is True
        assert gate.enabled is True
        assert authenticator.prompts == 1

        restored = AuthGate(authenticator=authenticator, settings_store=store, clock=clock)
        await restored.load()
        assert restored.enabled is True
        # The cached timestamp is not persisted
        assert restored.auth_state.last_successful_auth_at is None

    @pytest.mark.asyncio
    async def test_failed_enable_keeps_gate_off(self, clock):
        gate = AuthGate(authenticator=FakeAuthenticator(result=False), clock=clock)
        assert await gate.enable_if_available() is False
        assert gate.enabled is False

    @pytest.mark.asyncio
    async def test_disable_requires_challenge(self, clock):
        store = InMemorySettingsStore()
        authenticator = FakeAuthenticator(result=False)
        gate = AuthGate(
            authenticator=authenticator,
            state=AuthState(enabled=True),
            settings_store=store,
            clock=clock,
        )

        assert await gate.disable() is False
        assert gate.enabled is True

        authenticator.result = True
        assert await gate.disable() is True
        assert gate.enabled is False
        assert await store.get_value("auth.enabled") is False

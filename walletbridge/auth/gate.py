"""
Authentication Gate

Rate-limited re-authentication policy guarding sensitive handlers (signing,
offers, sends). It is a second, narrower gate layered underneath the
Confirmation Queue: a command can require both an explicit user approval and
a fresh authentication.

Gate states:
1. DISABLED - gate never blocks
2. AUTHENTICATED_CACHED - a successful challenge happened within the cooldown
3. PROMPT_REQUIRED - cooldown elapsed or no prior success

Only the `enabled` flag is persisted; the last successful authentication
time resets on every process restart.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from walletbridge.storage import SettingsStore

logger = logging.getLogger(__name__)

# Out-of-band challenge (biometric prompt, device credential, ...).
# Receives a human-readable reason; returns True on success.
Authenticator = Callable[[str], Awaitable[bool]]

DEFAULT_COOLDOWN_MS = 5 * 60 * 1000

ENABLED_SETTING_KEY = "auth.enabled"


class AuthGateState(str, Enum):
    """Conceptual gate states."""
    DISABLED = "disabled"
    AUTHENTICATED_CACHED = "authenticated_cached"
    PROMPT_REQUIRED = "prompt_required"


@dataclass
class AuthState:
    """
    Process-wide authentication state.

    Timestamps are milliseconds on a monotonic clock.
    """
    enabled: bool = False
    last_successful_auth_at: float | None = None
    cooldown_ms: int = DEFAULT_COOLDOWN_MS


class AuthGate:
    """
    Decides whether a sensitive operation may proceed.

    Concurrent callers are serialized so that one successful challenge
    satisfies every operation waiting on it.
    """

    def __init__(
        self,
        authenticator: Authenticator | None = None,
        state: AuthState | None = None,
        settings_store: "SettingsStore | None" = None,
        clock: Callable[[], float] | None = None,
    ):
        """
        Initialize the gate.

        Args:
            authenticator: Out-of-band challenge; None when the platform has none
            state: Initial state (defaults to disabled, 5 minute cooldown)
            settings_store: Optional store persisting the `enabled` flag
            clock: Millisecond clock (defaults to a monotonic clock)
        """
        self._authenticator = authenticator
        self._state = state or AuthState()
        self._settings = settings_store
        self._clock = clock or (lambda: time.monotonic() * 1000)
        self._lock = asyncio.Lock()

    @property
    def auth_state(self) -> AuthState:
        return self._state

    @property
    def available(self) -> bool:
        """Whether an out-of-band challenge is available on this platform."""
        return self._authenticator is not None

    @property
    def enabled(self) -> bool:
        return self._state.enabled

    @property
    def state(self) -> AuthGateState:
        if not self._state.enabled:
            return AuthGateState.DISABLED
        if self._is_cached(self._clock()):
            return AuthGateState.AUTHENTICATED_CACHED
        return AuthGateState.PROMPT_REQUIRED

    async def load(self) -> None:
        """Restore the persisted `enabled` flag."""
        if self._settings is None:
            return
        enabled = await self._settings.get_value(ENABLED_SETTING_KEY, False)
        self._state.enabled = bool(enabled)
        logger.info(f"Authentication gate loaded (enabled={self._state.enabled})")

    def _is_cached(self, now: float) -> bool:
        last = self._state.last_successful_auth_at
        return last is not None and now - last < self._state.cooldown_ms

    async def _challenge(self, reason: str) -> bool:
        if self._authenticator is None:
            logger.warning("Authentication required but no authenticator is available")
            return False
        try:
            return bool(await self._authenticator(reason))
        except Exception as e:
            logger.warning(f"Authentication challenge failed: {e}")
            return False

    async def check_or_prompt(self, reason: str = "Authenticate to continue") -> bool:
        """
        Allow a sensitive operation, prompting if required.

        Returns:
            True if the operation may proceed, False if the challenge failed
            or was cancelled (the cached timestamp is left untouched)
        """
        if not self._state.enabled:
            return True

        async with self._lock:
            if self._is_cached(self._clock()):
                return True

            if not await self._challenge(reason):
                logger.info("Authentication challenge rejected")
                return False

            self._state.last_successful_auth_at = self._clock()
            logger.debug("Authentication challenge succeeded")
            return True

    async def enable_if_available(self) -> bool:
        """
        Turn the gate on.

        Requires a successful challenge; a no-op when no authenticator exists.

        Returns:
            True if the gate is now enabled
        """
        if not self.available:
            return False

        async with self._lock:
            if not await self._challenge("Enable biometric authentication"):
                return False
            self._state.enabled = True
            self._state.last_successful_auth_at = self._clock()

        await self._persist()
        logger.info("Authentication gate enabled")
        return True

    async def disable(self) -> bool:
        """
        Turn the gate off.

        Requires a successful challenge when an authenticator exists.

        Returns:
            True if the gate is now disabled
        """
        async with self._lock:
            if self.available and not await self._challenge(
                "Disable biometric authentication"
            ):
                return False
            self._state.enabled = False
            self._state.last_successful_auth_at = None

        await self._persist()
        logger.info("Authentication gate disabled")
        return True

    async def _persist(self) -> None:
        if self._settings is not None:
            await self._settings.set(ENABLED_SETTING_KEY, self._state.enabled)

# Authentication Gate
# Rate-limited re-authentication guarding sensitive handlers

from walletbridge.auth.gate import (
    AuthGate,
    AuthGateState,
    AuthState,
    Authenticator,
    DEFAULT_COOLDOWN_MS,
)

__all__ = [
    "AuthGate",
    "AuthGateState",
    "AuthState",
    "Authenticator",
    "DEFAULT_COOLDOWN_MS",
]

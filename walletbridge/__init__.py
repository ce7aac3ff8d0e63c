# Wallet Bridge - peer-to-peer command bridge for the wallet
# Validates, confirms and dispatches peer requests to the wallet backend

__version__ = "0.1.0"

# Re-export commonly used components for convenience
from walletbridge.auth import AuthGate, AuthState
from walletbridge.backend import SageRpcBackend, WalletBackend
from walletbridge.bridge import WalletBridge
from walletbridge.commands import CommandRegistry, CommandSpec
from walletbridge.commands.builtin import create_default_registry
from walletbridge.dispatch import Dispatcher, RejectMode
from walletbridge.queue import ConfirmationQueue, PendingRequest
from walletbridge.session import Session, SessionManager
from walletbridge.transport import InMemoryRelayClient, RelayClient

__all__ = [
    "__version__",
    # Facade
    "WalletBridge",
    # Components
    "AuthGate",
    "AuthState",
    "CommandRegistry",
    "CommandSpec",
    "create_default_registry",
    "ConfirmationQueue",
    "PendingRequest",
    "Dispatcher",
    "RejectMode",
    "Session",
    "SessionManager",
    # Ports and adapters
    "WalletBackend",
    "SageRpcBackend",
    "RelayClient",
    "InMemoryRelayClient",
]

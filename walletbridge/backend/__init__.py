# Wallet Backend
# Port for the wallet commands the bridge drives, plus the RPC client adapter

from walletbridge.backend.ports import WalletBackend, JSON
from walletbridge.backend.rpc import (
    SageRpcBackend,
    DEFAULT_RPC_HOST,
    DEFAULT_RPC_PORT,
)

__all__ = [
    "WalletBackend",
    "JSON",
    "SageRpcBackend",
    "DEFAULT_RPC_HOST",
    "DEFAULT_RPC_PORT",
]

"""
Bridge Configuration

Environment-based settings for the bridge application. Variables are read
after `load_dotenv()`, so a `.env` file in the working directory works too.

Environment variables:
- BRIDGE_RELAY_CLIENT: "memory" or a "module:Class" RelayClient path
- BRIDGE_RELAY_PROJECT_ID / BRIDGE_RELAY_URL: relay credentials and endpoint
- BRIDGE_WALLET_NAME / _DESCRIPTION / _URL / _ICONS: metadata shown to peers
- BRIDGE_SUPPORTED_CHAINS: comma separated chain ids
- BRIDGE_AUTH_COOLDOWN_SECONDS: Authentication Gate cooldown
- BRIDGE_AUTHENTICATOR: optional "module:function" out-of-band challenge
- BRIDGE_REJECT_MODE: "result" (null result) or "error" (4001 error)
- BRIDGE_RPC_HOST / _PORT / _CERT / _KEY: wallet RPC server and client identity
- BRIDGE_STORAGE_BACKEND / BRIDGE_DATABASE_URL: settings store
- BRIDGE_LOG_LEVEL: logging level for the application entry point
"""

import importlib
import os
from dataclasses import dataclass, field
from typing import Any

from dotenv import load_dotenv

from walletbridge.backend import DEFAULT_RPC_HOST, DEFAULT_RPC_PORT
from walletbridge.dispatch import RejectMode
from walletbridge.protocol.envelope import PeerMetadata
from walletbridge.session import DEFAULT_SUPPORTED_CHAINS
from walletbridge.storage import StorageSettings
from walletbridge.storage import settings_from_env as storage_settings_from_env

DEFAULT_RELAY_URL = "wss://relay.walletconnect.com"


@dataclass
class BridgeSettings:
    """
    Configuration for the bridge application.

    Attributes:
        relay_client: "memory" or an importable "module:Class" path
        relay_project_id: Relay project id (required by hosted relays)
        relay_url: Relay endpoint
        wallet_name: Name presented to peers
        wallet_description: Description presented to peers
        wallet_url: URL presented to peers
        wallet_icons: Icon URLs presented to peers
        supported_chains: Chains the bridge will approve sessions for
        auth_cooldown_seconds: Authentication Gate cooldown
        authenticator: Optional "module:function" challenge
        reject_mode: How user rejections are reported to peers
        rpc_host: Wallet RPC server host
        rpc_port: Wallet RPC server port
        rpc_cert_path: Wallet client certificate
        rpc_key_path: Wallet client key
        storage: Settings store configuration
        log_level: Logging level
    """
    relay_client: str = "memory"
    relay_project_id: str | None = None
    relay_url: str = DEFAULT_RELAY_URL
    wallet_name: str = "Sage Wallet"
    wallet_description: str = "Sage Wallet"
    wallet_url: str = "https://sagewallet.net"
    wallet_icons: list[str] = field(default_factory=list)
    supported_chains: tuple[str, ...] = DEFAULT_SUPPORTED_CHAINS
    auth_cooldown_seconds: int = 300
    authenticator: str | None = None
    reject_mode: RejectMode = RejectMode.RESULT
    rpc_host: str = DEFAULT_RPC_HOST
    rpc_port: int = DEFAULT_RPC_PORT
    rpc_cert_path: str | None = None
    rpc_key_path: str | None = None
    storage: StorageSettings = field(default_factory=StorageSettings)
    log_level: str = "INFO"

    @property
    def wallet_metadata(self) -> PeerMetadata:
        return PeerMetadata(
            name=self.wallet_name,
            description=self.wallet_description,
            url=self.wallet_url,
            icons=self.wallet_icons,
        )

    @property
    def auth_cooldown_ms(self) -> int:
        return self.auth_cooldown_seconds * 1000


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def settings_from_env() -> BridgeSettings:
    """Create BridgeSettings from environment variables (and `.env`)."""
    load_dotenv()

    defaults = BridgeSettings()
    chains = _split(os.getenv("BRIDGE_SUPPORTED_CHAINS"))

    return BridgeSettings(
        relay_client=os.getenv("BRIDGE_RELAY_CLIENT", defaults.relay_client),
        relay_project_id=os.getenv("BRIDGE_RELAY_PROJECT_ID"),
        relay_url=os.getenv("BRIDGE_RELAY_URL", defaults.relay_url),
        wallet_name=os.getenv("BRIDGE_WALLET_NAME", defaults.wallet_name),
        wallet_description=os.getenv(
            "BRIDGE_WALLET_DESCRIPTION",
            defaults.wallet_description
        ),
        wallet_url=os.getenv("BRIDGE_WALLET_URL", defaults.wallet_url),
        wallet_icons=_split(os.getenv("BRIDGE_WALLET_ICONS")),
        supported_chains=tuple(chains) if chains else defaults.supported_chains,
        auth_cooldown_seconds=int(os.getenv("BRIDGE_AUTH_COOLDOWN_SECONDS", "300")),
        authenticator=os.getenv("BRIDGE_AUTHENTICATOR") or None,
        reject_mode=RejectMode(os.getenv("BRIDGE_REJECT_MODE", "result").lower()),
        rpc_host=os.getenv("BRIDGE_RPC_HOST", defaults.rpc_host),
        rpc_port=int(os.getenv("BRIDGE_RPC_PORT", str(defaults.rpc_port))),
        rpc_cert_path=os.getenv("BRIDGE_RPC_CERT") or None,
        rpc_key_path=os.getenv("BRIDGE_RPC_KEY") or None,
        storage=storage_settings_from_env(),
        log_level=os.getenv("BRIDGE_LOG_LEVEL", defaults.log_level).upper(),
    )


def load_object(path: str) -> Any:
    """
    Import an object from a "package.module:attribute" path.

    Raises:
        ValueError: If the path is malformed
        ImportError / AttributeError: If the target does not exist
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Expected 'module:attribute', got {path!r}")
    module = importlib.import_module(module_name)
    return getattr(module, attribute)

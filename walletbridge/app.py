"""
Wallet Bridge Application

FastAPI application exposing the bridge to the hosting UI over a local
control API. This is the main entry point for running the bridge.

Configuration is read from environment variables (see walletbridge.config);
a `.env` file in the working directory is loaded first.

The relay client is pluggable through BRIDGE_RELAY_CLIENT:
- memory: process-local relay (development/demos)
- module:Class: any RelayClient subclass, constructed with
  `project_id`, `relay_url` and `metadata` keyword arguments
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from walletbridge.auth import AuthGate, AuthState
from walletbridge.backend import SageRpcBackend, WalletBackend
from walletbridge.bridge import WalletBridge
from walletbridge.config import BridgeSettings, load_object, settings_from_env
from walletbridge.events import BridgeEvent, BridgeEventType
from walletbridge.protocol.errors import SessionNotFoundError
from walletbridge.storage import SettingsStore, create_settings_store
from walletbridge.transport import InMemoryRelayClient, RelayClient

logger = logging.getLogger(__name__)

# Global instances (created at startup)
settings: BridgeSettings | None = None
settings_store: SettingsStore | None = None
bridge: WalletBridge | None = None


def create_backend(config: BridgeSettings) -> WalletBackend:
    """Create the wallet backend client."""
    return SageRpcBackend(
        host=config.rpc_host,
        port=config.rpc_port,
        cert_path=config.rpc_cert_path,
        key_path=config.rpc_key_path,
    )


def create_relay_client(config: BridgeSettings) -> RelayClient:
    """Create the relay client named by BRIDGE_RELAY_CLIENT."""
    if config.relay_client == "memory":
        return InMemoryRelayClient()

    relay_class = load_object(config.relay_client)
    return relay_class(
        project_id=config.relay_project_id,
        relay_url=config.relay_url,
        metadata=config.wallet_metadata,
    )


def create_auth_gate(config: BridgeSettings, store: SettingsStore) -> AuthGate:
    """Create the Authentication Gate, with the configured challenge if any."""
    authenticator = load_object(config.authenticator) if config.authenticator else None
    return AuthGate(
        authenticator=authenticator,
        state=AuthState(cooldown_ms=config.auth_cooldown_ms),
        settings_store=store,
    )


def _require_bridge() -> WalletBridge:
    if bridge is None:
        raise HTTPException(status_code=503, detail="Bridge not initialized")
    return bridge


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Initializes and tears down all bridge components.
    """
    global settings, settings_store, bridge

    # Startup
    settings = settings_from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger.info("Starting wallet bridge...")

    settings_store = await create_settings_store(settings.storage)
    logger.info(f"Settings store initialized: {type(settings_store).__name__}")

    backend = create_backend(settings)
    relay = create_relay_client(settings)

    bridge = WalletBridge(
        relay=relay,
        backend=backend,
        auth=create_auth_gate(settings, settings_store),
        supported_chains=settings.supported_chains,
        reject_mode=settings.reject_mode,
    )
    await bridge.start()

    yield

    # Shutdown
    logger.info("Shutting down wallet bridge...")
    await bridge.stop()
    await backend.close()
    await settings_store.close()
    bridge = None
    logger.info("Wallet bridge stopped")


app = FastAPI(
    title="Wallet Bridge",
    description="Peer-to-peer command bridge between dApps and the wallet",
    version="0.1.0",
    lifespan=lifespan
)


class PairRequest(BaseModel):
    uri: str


@app.websocket("/ws")
async def events_endpoint(websocket: WebSocket):
    """
    Event stream for the hosting UI.

    The first message is a `bridge.snapshot`; afterwards every queue head,
    session and pairing change is pushed as it happens. Messages sent by the
    client are ignored.
    """
    if bridge is None:
        await websocket.close(code=1011, reason="Bridge not initialized")
        return

    current = bridge
    await websocket.accept()
    subscription = current.events.subscribe()

    async def forward() -> None:
        snapshot = BridgeEvent(type=BridgeEventType.SNAPSHOT, data=current.snapshot())
        await websocket.send_json(snapshot.model_dump(mode="json"))
        while True:
            event = await subscription.get()
            await websocket.send_json(event.model_dump(mode="json"))

    writer = asyncio.create_task(forward(), name=f"events_writer_{subscription.id}")
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Event subscriber {subscription.id} disconnected")
    finally:
        writer.cancel()
        try:
            await writer
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Event stream {subscription.id} failed: {e}")
        current.events.unsubscribe(subscription)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy" if bridge is not None and bridge.started else "starting",
        "sessions": len(bridge.list_sessions()) if bridge else 0,
        "pending_requests": len(bridge.pending_requests()) if bridge else 0,
        "connecting": bridge.connecting if bridge else False,
        "commands": len(bridge.registry) if bridge else 0,
        "subscribers": bridge.events.subscriber_count if bridge else 0,
    }


@app.get("/sessions")
async def list_sessions():
    current = _require_bridge()
    return {"sessions": [s.to_summary() for s in current.list_sessions()]}


@app.post("/pair", status_code=202)
async def pair(body: PairRequest):
    """Start pairing; the session appears once the proposal is approved."""
    current = _require_bridge()
    try:
        await current.pair(body.uri)
    except Exception as e:
        raise HTTPException(status_code=502, detail=str(e) or "Failed to pair")
    return {"connecting": current.connecting}


@app.delete("/sessions/{topic}")
async def disconnect(topic: str):
    current = _require_bridge()
    try:
        await current.disconnect(topic)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {"disconnected": topic}


@app.get("/requests/head")
async def request_head():
    """The only request currently eligible for a user decision."""
    current = _require_bridge()
    head = current.head_request()
    return {"request": current.describe_request(head) if head else None}


@app.post("/requests/{request_id}/approve")
async def approve_request(request_id: str):
    current = _require_bridge()
    response = await current.approve(request_id)
    if response is None:
        raise HTTPException(status_code=409, detail="Request is not at the head of the queue")
    return {"response": response.to_dict()}


@app.post("/requests/{request_id}/reject")
async def reject_request(request_id: str):
    current = _require_bridge()
    response = await current.reject(request_id)
    if response is None:
        raise HTTPException(status_code=409, detail="Request is not at the head of the queue")
    return {"response": response.to_dict()}


def _auth_summary(gate: AuthGate) -> dict:
    return {
        "available": gate.available,
        "enabled": gate.enabled,
        "state": gate.state.value,
        "cooldown_ms": gate.auth_state.cooldown_ms,
    }


@app.get("/auth")
async def auth_status():
    return _auth_summary(_require_bridge().auth)


@app.post("/auth/enable")
async def enable_auth():
    gate = _require_bridge().auth
    if not await gate.enable_if_available():
        raise HTTPException(status_code=403, detail="Authentication unavailable or failed")
    return _auth_summary(gate)


@app.post("/auth/disable")
async def disable_auth():
    gate = _require_bridge().auth
    if not await gate.disable():
        raise HTTPException(status_code=403, detail="Authentication failed")
    return _auth_summary(gate)

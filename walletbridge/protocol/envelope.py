"""
Bridge Message Models

Typed views of the messages exchanged with the pairing/relay transport:
- Inbound events: session_proposal, session_request, session_delete
- Outbound JSON-RPC 2.0 responses (exactly one per session_request)
- Namespaces granted on session approval

The relay speaks camelCase JSON; models accept either the wire alias or the
Python field name and dump with aliases when sent back to the relay.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from walletbridge.protocol.errors import BridgeError, USER_REJECTED_CODE


class WireModel(BaseModel):
    """Base model for relay payloads (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)


# === Peer / namespace models ===

class PeerMetadata(WireModel):
    """Self-declared metadata of a peer application."""
    name: str = ""
    description: str = ""
    url: str = ""
    icons: list[str] = Field(default_factory=list)


class ProposalNamespace(WireModel):
    """Chains, methods and events requested by a session proposal."""
    chains: list[str] = Field(default_factory=list)
    methods: list[str] = Field(default_factory=list)
    events: list[str] = Field(default_factory=list)


class SessionNamespace(WireModel):
    """Accounts, methods and events granted to an approved session."""
    accounts: list[str]
    methods: list[str]
    events: list[str]


# === Inbound events ===

class Proposer(WireModel):
    public_key: str = Field(default="", alias="publicKey")
    metadata: PeerMetadata = Field(default_factory=PeerMetadata)


class ProposalParams(WireModel):
    pairing_topic: str | None = Field(default=None, alias="pairingTopic")
    proposer: Proposer = Field(default_factory=Proposer)
    required_namespaces: dict[str, ProposalNamespace] = Field(
        default_factory=dict,
        alias="requiredNamespaces"
    )
    optional_namespaces: dict[str, ProposalNamespace] = Field(
        default_factory=dict,
        alias="optionalNamespaces"
    )


class SessionProposal(WireModel):
    """
    A peer's request to open a session.

    Delivered by the relay as the `session_proposal` event.
    """
    id: int
    params: ProposalParams


class RpcRequest(WireModel):
    method: str
    params: Any = None


class SessionRequestParams(WireModel):
    request: RpcRequest
    chain_id: str | None = Field(default=None, alias="chainId")


class SessionRequest(WireModel):
    """
    A JSON-RPC call from a peer within an approved session.

    Delivered by the relay as the `session_request` event.
    """
    id: int | str
    topic: str
    params: SessionRequestParams

    @property
    def method(self) -> str:
        return self.params.request.method

    @property
    def raw_params(self) -> Any:
        return self.params.request.params


class SessionDelete(WireModel):
    """Peer-initiated session teardown (`session_delete` event)."""
    id: int | None = None
    topic: str


# === Outbound responses ===

class JsonRpcError(BaseModel):
    code: int = USER_REJECTED_CODE
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """
    JSON-RPC 2.0 response sent back through the relay.

    Carries either `result` (which may legitimately be null) or `error`,
    never both. The `id` always equals the originating request's id.
    """
    id: int | str
    jsonrpc: Literal["2.0"] = "2.0"
    result: Any = None
    error: JsonRpcError | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the relay (drops whichever of result/error is unused)."""
        payload: dict[str, Any] = {"id": self.id, "jsonrpc": self.jsonrpc}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = self.result
        return payload


def create_result_response(request_id: int | str, result: Any) -> JsonRpcResponse:
    """Create a success response."""
    return JsonRpcResponse(id=request_id, result=result)


def create_error_response(
    request_id: int | str,
    error: BridgeError | str,
    code: int = USER_REJECTED_CODE
) -> JsonRpcResponse:
    """
    Create an error response.

    Accepts either a BridgeError (code/message/data taken from it) or a
    plain message string.
    """
    if isinstance(error, BridgeError):
        return JsonRpcResponse(
            id=request_id,
            error=JsonRpcError(**error.to_dict())
        )
    return JsonRpcResponse(
        id=request_id,
        error=JsonRpcError(code=code, message=error)
    )

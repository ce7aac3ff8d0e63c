# Protocol Layer
# Relay event models, JSON-RPC responses and the bridge error taxonomy

from walletbridge.protocol.envelope import (
    PeerMetadata,
    ProposalNamespace,
    SessionNamespace,
    SessionProposal,
    SessionRequest,
    SessionDelete,
    JsonRpcError,
    JsonRpcResponse,
    create_result_response,
    create_error_response,
)
from walletbridge.protocol.errors import (
    BridgeError,
    UnknownCommandError,
    CommandValidationError,
    AuthenticationError,
    BackendError,
    ProposalRejectedError,
    SessionNotFoundError,
    MethodNotGrantedError,
    WalletMismatchError,
    USER_REJECTED_CODE,
)

__all__ = [
    # Messages
    "PeerMetadata",
    "ProposalNamespace",
    "SessionNamespace",
    "SessionProposal",
    "SessionRequest",
    "SessionDelete",
    "JsonRpcError",
    "JsonRpcResponse",
    "create_result_response",
    "create_error_response",
    # Errors
    "BridgeError",
    "UnknownCommandError",
    "CommandValidationError",
    "AuthenticationError",
    "BackendError",
    "ProposalRejectedError",
    "SessionNotFoundError",
    "MethodNotGrantedError",
    "WalletMismatchError",
    "USER_REJECTED_CODE",
]

"""
Bridge Error Taxonomy

Every failure the bridge can report to a peer application is one of these
exceptions. The Dispatcher converts them into JSON-RPC error responses at its
boundary, so a peer never observes an unhandled failure.

Error kinds:
- UnknownCommandError: method is not in the Command Registry
- CommandValidationError: parameters failed the declared schema
- AuthenticationError: re-authentication challenge failed or was cancelled
- BackendError: the wallet backend command failed (reason forwarded verbatim)
- ProposalRejectedError: a session proposal did not meet requirements
"""

from typing import Any

# Error code used by the relay protocol for user/wallet side rejections
USER_REJECTED_CODE = 4001


class BridgeError(Exception):
    """Base exception for all bridge errors."""
    
    code: int = USER_REJECTED_CODE
    
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-RPC error object."""
        return {"code": self.code, "message": self.message}


class UnknownCommandError(BridgeError):
    """Method not present in the Command Registry."""
    
    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Unsupported method: {method}")


class CommandValidationError(BridgeError):
    """Parameters do not match the command's declared schema."""
    
    def __init__(self, method: str, message: str, fields: list[str] | None = None):
        self.method = method
        self.fields = fields or []
        super().__init__(message)
    
    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.fields:
            result["data"] = {"fields": self.fields}
        return result


class AuthenticationError(BridgeError):
    """The Authentication Gate challenge failed or was cancelled."""
    
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class BackendError(BridgeError):
    """The wallet backend rejected or failed a command."""
    
    def __init__(self, reason: str, status_code: int | None = None):
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)


class ProposalRejectedError(BridgeError):
    """A session proposal was rejected before any Session was created."""
    pass


class SessionNotFoundError(BridgeError):
    """No Session exists for the given topic."""
    
    def __init__(self, topic: str):
        self.topic = topic
        super().__init__(f"Session not found: {topic}")


class MethodNotGrantedError(BridgeError):
    """The Session was not granted the requested method."""

    def __init__(self, method: str, topic: str):
        self.method = method
        self.topic = topic
        super().__init__(f"Method {method} is not granted to this session")


class WalletMismatchError(BridgeError):
    """The active wallet no longer matches the account granted to a Session."""
    
    def __init__(self, account: str, active_account: str | None):
        self.account = account
        self.active_account = active_account
        super().__init__(
            f"Session account {account} does not match the active wallet"
        )

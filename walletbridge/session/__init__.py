# Session Manager
# Proposal approval, account mapping and teardown of relay sessions

from walletbridge.session.session import Session, format_account
from walletbridge.session.manager import (
    CHIA_NAMESPACE,
    DEFAULT_SUPPORTED_CHAINS,
    SessionManager,
    SessionRemovedListener,
)

__all__ = [
    "Session",
    "format_account",
    "CHIA_NAMESPACE",
    "DEFAULT_SUPPORTED_CHAINS",
    "SessionManager",
    "SessionRemovedListener",
]

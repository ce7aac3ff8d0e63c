"""
Handler Context

Everything a command handler may touch besides its parameters: the wallet
backend, the Authentication Gate and the Session the request arrived on.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from walletbridge.auth import AuthGate
from walletbridge.backend import WalletBackend
from walletbridge.protocol.errors import AuthenticationError

if TYPE_CHECKING:
    from walletbridge.session import Session


@dataclass
class HandlerContext:
    backend: WalletBackend
    auth: AuthGate
    session: "Session | None" = None

    async def require_auth(self, reason: str = "Authenticate to continue") -> None:
        """
        Consult the Authentication Gate.

        Raises:
            AuthenticationError: If the challenge failed or was cancelled
        """
        if not await self.auth.check_or_prompt(reason):
            raise AuthenticationError()

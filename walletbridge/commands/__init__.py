# Command Registry
# Schemas and declarations for every method the bridge serves.
# The built-in command table lives in walletbridge.commands.builtin.

from walletbridge.commands.registry import (
    CommandHandler,
    CommandRegistry,
    CommandSpec,
)

__all__ = [
    "CommandHandler",
    "CommandRegistry",
    "CommandSpec",
]

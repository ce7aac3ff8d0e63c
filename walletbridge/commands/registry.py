"""
Command Registry

Static table of every method the bridge serves. Each entry declares its
parameter schema, return schema, whether it needs an explicit user
confirmation, and the handler that executes it.

Why a registry instead of a dispatch switch?
- Adding a command is a data entry, not a new code path
- The confirmation flag lives in one place and cannot be overridden per call
- The full table is the bridge's capability surface, inspectable at runtime

Validation is pure: it never touches the backend or any queue, and it must
succeed before a handler runs.
"""

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Awaitable, Callable, Iterator, TYPE_CHECKING

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from walletbridge.protocol.errors import (
    BackendError,
    CommandValidationError,
    UnknownCommandError,
)

if TYPE_CHECKING:
    from walletbridge.handlers.context import HandlerContext

logger = logging.getLogger(__name__)

CommandHandler = Callable[[Any, "HandlerContext"], Awaitable[Any]]


@dataclass(frozen=True)
class CommandSpec:
    """
    Declaration of a single bridge command.

    Immutable once defined; `requires_confirmation` is authoritative for
    Dispatcher routing.
    """
    name: str
    params_model: type[BaseModel]
    return_type: Any
    requires_confirmation: bool
    handler: CommandHandler
    # Params may be omitted entirely (null/absent) by the peer
    params_optional: bool = False
    # Shown to the user when the request is at the head of the queue
    title: str | None = None
    description: str | None = None

    @property
    def display_title(self) -> str:
        return self.title or "WalletConnect Request"

    @property
    def display_description(self) -> str:
        if self.description:
            return self.description
        words = " ".join(self.name.split("_")[1:]) or self.name
        return f'Would you like to authorize the "{words}" request?'

    @cached_property
    def return_adapter(self) -> TypeAdapter:
        return TypeAdapter(self.return_type)


def _format_location(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


class CommandRegistry:
    """
    Lookup and validation for bridge commands.
    """

    def __init__(self, specs: list[CommandSpec] | None = None):
        self._specs: dict[str, CommandSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: CommandSpec) -> None:
        """
        Add a command to the table.

        Raises:
            ValueError: If the method name is already registered
        """
        if spec.name in self._specs:
            raise ValueError(f"Command already registered: {spec.name}")
        self._specs[spec.name] = spec
        logger.debug(
            f"Registered command {spec.name} "
            f"(confirm={spec.requires_confirmation})"
        )

    def get(self, method: str) -> CommandSpec:
        """
        Look up a command.

        Raises:
            UnknownCommandError: If the method is not registered
        """
        spec = self._specs.get(method)
        if spec is None:
            raise UnknownCommandError(method)
        return spec

    def requires_confirmation(self, method: str) -> bool:
        return self.get(method).requires_confirmation

    def validate(self, method: str, raw_params: Any) -> BaseModel | None:
        """
        Validate raw peer parameters against the command's schema.

        Args:
            method: Command name
            raw_params: Parameters exactly as received from the peer

        Returns:
            Typed parameters, or None for an omitted optional params object

        Raises:
            UnknownCommandError: If the method is not registered
            CommandValidationError: With a readable reason and offending fields
        """
        spec = self.get(method)

        if raw_params is None and spec.params_optional:
            return None

        try:
            return spec.params_model.model_validate(raw_params)
        except PydanticValidationError as e:
            errors = e.errors()
            fields = [_format_location(err["loc"]) for err in errors]
            reasons = "; ".join(
                f"{_format_location(err['loc']) or 'params'}: {err['msg']}"
                for err in errors
            )
            logger.warning(f"Invalid parameters for {method}: {reasons}")
            raise CommandValidationError(
                method,
                f"Invalid parameters for {method}: {reasons}",
                fields=[field for field in fields if field],
            ) from e

    def serialize_result(self, method: str, result: Any) -> Any:
        """
        Check a handler result against the declared return schema and
        convert it to wire JSON (camelCase).

        Raises:
            BackendError: If the result does not match the return schema
        """
        adapter = self.get(method).return_adapter
        try:
            value = adapter.validate_python(result)
        except PydanticValidationError as e:
            logger.error(f"Handler for {method} returned an invalid result: {e}")
            raise BackendError("Invalid response from wallet") from e
        return adapter.dump_python(value, mode="json", by_alias=True)

    @property
    def methods(self) -> list[str]:
        return list(self._specs)

    def __contains__(self, method: object) -> bool:
        return method in self._specs

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

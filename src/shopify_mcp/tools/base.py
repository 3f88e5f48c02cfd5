"""Base class and shared helpers for Shopify tools."""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Annotated, Any, ClassVar

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ..config import Config
from ..exceptions import ToolExecutionError, UserInputError
from ..models import ToolResult
from ..protocols import GraphQLExecutor
from ..utils import (
    extract_numeric_id,
    flatten_edges,
    is_valid_identifier,
    sanitize_metadata,
    to_gid,
)


def _check_identifier(value: str) -> str:
    value = value.strip()
    if not is_valid_identifier(value):
        raise ValueError(
            "must be a numeric id (e.g. '123') or a Shopify GID "
            "(e.g. 'gid://shopify/Product/123')"
        )
    return value


Identifier = Annotated[str, AfterValidator(_check_identifier)]


class ToolInput(BaseModel):
    """Base for tool argument models: camelCase on the wire, no unknown keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


@dataclass
class ToolContext:
    """Execution context shared by every tool instance in the process."""

    config: Config
    client: GraphQLExecutor
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("shopify-mcp.tools")
    )


class BaseTool(ABC):
    """A single MCP tool bound to the shared execution context.

    Subclasses declare ``name``, ``description`` and ``input_model`` and
    implement ``run``. ``execute`` never raises: every failure becomes a
    ``ToolResult`` with ``success=False``.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    input_model: ClassVar[type[ToolInput]]

    def __init__(self, context: ToolContext):
        self.context = context
        self.client = context.client
        self.logger = context.logger.getChild(self.name)

    @classmethod
    def input_schema(cls) -> dict[str, Any]:
        """JSON schema advertised to the MCP host."""
        return cls.input_model.model_json_schema(by_alias=True)

    def validate(self, arguments: dict[str, Any]) -> ToolInput:
        """Parse raw arguments into the tool's input model.

        Raises:
            ToolExecutionError: With one violation per invalid field.
        """
        try:
            return self.input_model.model_validate(arguments)
        except ValidationError as e:
            violations = [
                {
                    "field": ".".join(str(part) for part in err["loc"]) or "(root)",
                    "message": err["msg"],
                }
                for err in e.errors()
            ]
            raise ToolExecutionError(
                f"Invalid arguments for tool '{self.name}'",
                errors=[f"{v['field']}: {v['message']}" for v in violations],
                suggestions=["Check the tool's input schema and try again"],
                context={"violations": violations},
            ) from e

    async def execute(self, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Validate, run, and wrap the outcome."""
        arguments = arguments or {}
        started = time.monotonic()

        try:
            args = self.validate(arguments)
            data = await self.run(args)
        except Exception as e:
            duration_ms = _elapsed_ms(started)
            self._log_execution(arguments, False, duration_ms, error=str(e))
            return ToolResult.from_error(e, duration_ms=duration_ms)

        duration_ms = _elapsed_ms(started)
        self._log_execution(arguments, True, duration_ms)
        return ToolResult.ok(data, duration_ms=duration_ms)

    @abstractmethod
    async def run(self, args: Any) -> dict[str, Any]:
        """Build the GraphQL operation, execute it, and reshape the response."""

    # Helpers

    @staticmethod
    def to_gid(identifier: str, resource_type: str) -> str:
        return to_gid(identifier, resource_type)

    @staticmethod
    def extract_numeric_id(gid: str) -> str:
        return extract_numeric_id(gid)

    @staticmethod
    def flatten_edges(connection: dict | None) -> list:
        return flatten_edges(connection)

    @staticmethod
    def page_info(connection: dict | None) -> dict:
        info = (connection or {}).get("pageInfo") or {}
        return {
            "hasNextPage": info.get("hasNextPage", False),
            "hasPreviousPage": info.get("hasPreviousPage", False),
            "startCursor": info.get("startCursor"),
            "endCursor": info.get("endCursor"),
        }

    @staticmethod
    def payload(data: dict, key: str) -> dict:
        """Return ``data[key]`` or fail on an unexpected response shape."""
        value = data.get(key)
        if not isinstance(value, dict):
            raise ToolExecutionError(
                f"Invalid response from Shopify GraphQL API: missing '{key}'",
                context={"response_keys": sorted(data)},
            )
        return value

    @staticmethod
    def raise_for_user_errors(payload: dict, action: str) -> None:
        """Surface remote validation failures as a UserInputError."""
        user_errors = payload.get("userErrors") or []
        if user_errors:
            raise UserInputError.from_user_errors(action, user_errors)

    def _log_execution(
        self,
        arguments: dict[str, Any],
        success: bool,
        duration_ms: int,
        error: str | None = None,
    ) -> None:
        if self.context.config.debug_mode:
            args_repr = sanitize_metadata(arguments)
        else:
            args_repr = sorted(arguments)

        if success:
            self.logger.info(
                f"Tool '{self.name}' executed successfully in {duration_ms}ms "
                f"args={args_repr}"
            )
        else:
            self.logger.error(
                f"Tool '{self.name}' failed in {duration_ms}ms args={args_repr}: {error}"
            )


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)

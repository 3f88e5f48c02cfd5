"""Protocol definitions for dependency injection and interface contracts."""

from collections.abc import Callable
from typing import Any, Protocol


class TokenProvider(Protocol):
    """Protocol for Admin API access token providers."""

    async def initialize(self) -> str:
        """Obtain the first access token.

        Raises:
            AuthenticationError: If the credential exchange is rejected.
        """
        ...

    def get_access_token(self) -> str:
        """Return the current access token.

        Raises:
            RuntimeError: If called before initialize().
        """
        ...

    def on_refresh(self, callback: Callable[[str], None]) -> None:
        """Register a hook called with each newly issued token."""
        ...

    def destroy(self) -> None:
        """Cancel any background refresh."""
        ...


class GraphQLExecutor(Protocol):
    """What tools need from the RPC client."""

    async def query(self, document: str, variables: dict[str, Any] | None = None) -> dict:
        ...

    async def mutate(self, document: str, variables: dict[str, Any] | None = None) -> dict:
        ...

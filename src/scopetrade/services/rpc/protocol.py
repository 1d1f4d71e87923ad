"""Request/response RPC capability consumed by the trade services."""

from typing import Any, Protocol


class RpcCaller(Protocol):
    """Anything that can perform a named RPC call with positional params."""

    async def call(self, method: str, params: list[Any]) -> Any:
        """Perform ``method`` and return its ``result`` payload."""
        ...

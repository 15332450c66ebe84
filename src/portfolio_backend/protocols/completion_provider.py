"""AI completion provider protocol."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CompletionProvider(Protocol):
    """Protocol for text completion services."""

    async def complete(self, prompt: str, timeout: float) -> str | None:
        """Ask the provider for a reply.

        Args:
            prompt: The user message
            timeout: Seconds after which the request is abandoned

        Returns:
            The reply text, or None if the provider answered without one

        Raises:
            CompletionError: If the provider is unreachable, errors or is not configured
        """
        ...

    async def close(self) -> None:
        """Release the HTTP client."""
        ...

"""HTTP-based AI completion provider.

Calls a third-party chat endpoint with a GET request:

    GET {AI_API_URL}?prompt=...&search_enabled=false&thinking_enabled=false&imageUrl=&apikey=...

The provider answers in one of two shapes:

    {"result": {"message": "..."}}
    {"response": "..."}
"""

from typing import Any

import httpx

from portfolio_backend.config import Settings
from portfolio_backend.exceptions import CompletionError


class HttpCompletionProvider:
    """httpx-based implementation of CompletionProvider protocol.

    This class satisfies the CompletionProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = HttpCompletionProvider.create(settings)
        reply = await provider.complete("Halo!", timeout=10)
        ```
    """

    def __init__(
        self,
        api_url: str | None,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the completion provider.

        Args:
            api_url: Provider endpoint. None means "not configured".
            api_key: Sent as the ``apikey`` query parameter.
            transport: Optional httpx transport (used by tests).
        """
        self._api_url = api_url
        self._api_key = api_key or ""
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(cls, settings: Settings) -> "HttpCompletionProvider":
        """Factory method to create the provider from settings."""
        return cls(api_url=settings.ai_api_url, api_key=settings.ai_api_key)

    @property
    def is_configured(self) -> bool:
        return bool(self._api_url)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    async def complete(self, prompt: str, timeout: float) -> str | None:
        """Ask the provider for a reply.

        Args:
            prompt: The user message
            timeout: Request timeout in seconds

        Returns:
            The reply text, or None if neither known response field is present

        Raises:
            CompletionError: If the provider is not configured, unreachable,
                times out, returns a non-2xx status or invalid JSON
        """
        if not self._api_url:
            raise CompletionError("AI_API_URL is not configured")

        params = {
            "prompt": prompt,
            "search_enabled": "false",
            "thinking_enabled": "false",
            "imageUrl": "",
            "apikey": self._api_key,
        }

        try:
            response = await self.client.get(self._api_url, params=params, timeout=timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise CompletionError(f"AI API timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise CompletionError(f"AI API error: {e}") from e
        except ValueError as e:
            raise CompletionError(f"AI API returned invalid JSON: {e}") from e

        return extract_reply(data)

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def extract_reply(data: Any) -> str | None:
    """Pick the reply out of either response shape."""
    if not isinstance(data, dict):
        return None

    result = data.get("result")
    if isinstance(result, dict):
        message = result.get("message")
        if isinstance(message, str) and message.strip():
            return message

    response = data.get("response")
    if isinstance(response, str) and response.strip():
        return response

    return None

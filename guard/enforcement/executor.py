"""ConsoleExecutor — forwards approved code to the console bridge via HTTP."""

from typing import Any, Protocol

import httpx

from guard.config import Settings
from guard.enforcement.errors import ConsoleError, ConsoleTimeoutError


class CodeExecutor(Protocol):
    async def execute(self, code: str, echo: bool = True) -> str: ...


class ConsoleExecutor:
    def __init__(self, settings: Settings) -> None:
        self._base_url = settings.console_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=settings.console_timeout_seconds)

    async def execute(self, code: str, echo: bool = True) -> str:
        """POST code to the console bridge and return its printed output.

        Raises:
            ConsoleError: if the bridge is unreachable or returns non-2xx.
            ConsoleTimeoutError: if the request exceeds the configured timeout.
        """
        url = f"{self._base_url}/execute"
        try:
            response = await self._client.post(url, json={"code": code, "echo": echo})
        except httpx.TimeoutException as exc:
            raise ConsoleTimeoutError(f"Timeout sending code to {url}") from exc
        except httpx.TransportError as exc:
            raise ConsoleError(503, f"Console bridge unreachable: {exc}") from exc

        if response.status_code >= 300:
            raise ConsoleError(response.status_code, response.text)

        payload: dict[str, Any] = response.json()
        return str(payload.get("output", ""))

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

"""Unit tests for ConsoleExecutor.

HTTP is served by httpx.MockTransport. No real network required.
Covers: success, non-2xx error, timeout, unreachable bridge.
"""

import json

import httpx
import pytest

from guard.config import Settings
from guard.enforcement.errors import ConsoleError, ConsoleTimeoutError
from guard.enforcement.executor import ConsoleExecutor


def _executor(handler) -> ConsoleExecutor:
    executor = ConsoleExecutor(Settings(console_url="http://console.test/", console_timeout_seconds=5.0))
    executor._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return executor


# ---------------------------------------------------------------------------
# Successful execution
# ---------------------------------------------------------------------------


@pytest.mark.unit
async def test_execute_returns_output() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"output": "[1] 2"})

    executor = _executor(handler)
    assert await executor.execute("1 + 1", echo=False) == "[1] 2"

    assert len(seen) == 1
    assert str(seen[0].url) == "http://console.test/execute"
    assert json.loads(seen[0].content) == {"code": "1 + 1", "echo": False}
    await executor.aclose()


@pytest.mark.unit
async def test_missing_output_is_empty_string() -> None:
    executor = _executor(lambda request: httpx.Response(200, json={}))
    assert await executor.execute("invisible(1)") == ""
    await executor.aclose()


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


@pytest.mark.unit
async def test_non_2xx_raises_console_error() -> None:
    executor = _executor(lambda request: httpx.Response(500, text="object 'x' not found"))

    with pytest.raises(ConsoleError) as exc_info:
        await executor.execute("x")

    assert exc_info.value.status_code == 500
    assert "not found" in exc_info.value.body
    await executor.aclose()


@pytest.mark.unit
async def test_timeout_raises_console_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    executor = _executor(handler)
    with pytest.raises(ConsoleTimeoutError):
        await executor.execute("Sys.sleep(100)")
    await executor.aclose()


@pytest.mark.unit
async def test_unreachable_bridge_raises_503() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    executor = _executor(handler)
    with pytest.raises(ConsoleError) as exc_info:
        await executor.execute("1")
    assert exc_info.value.status_code == 503
    await executor.aclose()

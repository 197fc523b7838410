from __future__ import annotations

import asyncio
import json
import time
from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest
from structlog.testing import capture_logs

from cropadvisor.config import Settings
from cropadvisor.services.advisory_client import (
    AdvisoryClient,
    AdvisoryNotConfiguredError,
    AdvisoryPayloadError,
    AdvisoryStatusError,
    AdvisoryTimeoutError,
    AdvisoryTransportError,
    fetch_structured,
)
from cropadvisor.services.prompts import JSON_ONLY_SYSTEM_PROMPT


def _completion(content: object) -> dict:
    return {"id": "cmpl-1", "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


@pytest.mark.asyncio
async def test_complete_returns_generated_text(settings: Settings) -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion('[{"name": "Rice"}]'))

    client = AdvisoryClient(settings, transport=httpx.MockTransport(handler))
    text = await client.complete("pick crops")

    assert text == '[{"name": "Rice"}]'
    assert seen["url"] == settings.advisory_base_url
    assert seen["auth"] == "Bearer test-key"
    body = seen["body"]
    assert isinstance(body, dict)
    assert body["model"] == settings.advisory_model
    assert body["temperature"] == 0.0
    assert body["messages"][0] == {"role": "system", "content": JSON_ONLY_SYSTEM_PROMPT}
    assert body["messages"][1] == {"role": "user", "content": "pick crops"}


@pytest.mark.asyncio
async def test_complete_joins_content_parts(settings: Settings) -> None:
    parts = [{"type": "text", "text": "[{\"name\": "}, {"type": "text", "text": "\"Jute\"}]"}]
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=_completion(parts)))
    assert await AdvisoryClient(settings, transport=transport).complete("x") == '[{"name": "Jute"}]'


@pytest.mark.asyncio
async def test_missing_key_raises_without_network() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_completion("[]"))

    client = AdvisoryClient(Settings(advisory_api_key="", _env_file=None), transport=httpx.MockTransport(handler))
    assert client.configured is False
    with pytest.raises(AdvisoryNotConfiguredError):
        await client.complete("x")
    assert calls == []


@pytest.mark.asyncio
async def test_timeout_is_typed(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(AdvisoryTimeoutError) as excinfo:
        await AdvisoryClient(settings, transport=httpx.MockTransport(handler)).complete("x")
    assert excinfo.value.kind == "timeout"


@pytest.mark.asyncio
async def test_transport_failure_is_typed(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AdvisoryTransportError):
        await AdvisoryClient(settings, transport=httpx.MockTransport(handler)).complete("x")


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 429, 500, 503])
async def test_non_success_status_is_typed(settings: Settings, status_code: int) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(status_code, json={"error": "nope"}))
    with pytest.raises(AdvisoryStatusError) as excinfo:
        await AdvisoryClient(settings, transport=transport).complete("x")
    assert excinfo.value.status_code == status_code


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>gateway</html>"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": {"content": None}}]}),
        httpx.Response(200, json=["not", "an", "object"]),
    ],
)
async def test_malformed_payload_is_typed(settings: Settings, response: httpx.Response) -> None:
    transport = httpx.MockTransport(lambda request: response)
    with pytest.raises(AdvisoryPayloadError):
        await AdvisoryClient(settings, transport=transport).complete("x")


@pytest.mark.asyncio
async def test_total_deadline_bounds_a_trickling_body(settings: Settings) -> None:
    async def trickle() -> AsyncIterator[bytes]:
        yield b'{"choices": [{"message": {"content": "'
        for _ in range(200):
            await asyncio.sleep(0.05)
            yield b"x"
        yield b'"}}]}'

    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "application/json"}, content=trickle())

    # every chunk arrives well inside the per-read timeout; only the total deadline can stop this
    short = settings.model_copy(update={"advisory_timeout_seconds": 0.3})
    start = time.perf_counter()
    with pytest.raises(AdvisoryTimeoutError):
        await AdvisoryClient(short, transport=httpx.MockTransport(handler)).complete("x")
    assert time.perf_counter() - start < 3.0


def test_settings_bound_timeout_and_temperature() -> None:
    with pytest.raises(ValueError):
        Settings(advisory_timeout_seconds=5, _env_file=None)
    with pytest.raises(ValueError):
        Settings(advisory_temperature=0.9, _env_file=None)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [AdvisoryNotConfiguredError("no key"), AdvisoryStatusError(500), RuntimeError("client bug")],
)
async def test_fetch_structured_swallows_every_fault(fake_advisory_factory: Any, error: Exception) -> None:
    fake = fake_advisory_factory(error=error)
    with capture_logs() as logs:
        assert await fetch_structured(fake, "prompt", feature="irrigation") is None
    assert fake.prompts == ["prompt"]
    assert logs[-1]["feature"] == "irrigation"


@pytest.mark.asyncio
async def test_fetch_structured_parses_the_reply(fake_advisory_factory: Any) -> None:
    fake = fake_advisory_factory(text='Sure! ```json\n{"reason": "dry"}\n```')
    assert await fetch_structured(fake, "prompt", feature="irrigation") == {"reason": "dry"}
    assert await fetch_structured(fake_advisory_factory(text="no json here"), "p", feature="market") is None

from __future__ import annotations

import pytest
from httpx import AsyncClient

from cropadvisor.middleware.logging import redact_secrets


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "cropadvisor", "version": "0.1.0"}


@pytest.mark.asyncio
async def test_request_id_is_propagated(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"x-request-id": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_request_id_is_generated(client: AsyncClient) -> None:
    response = await client.get("/api/v1/crop/profiles/rice")
    assert response.status_code == 200
    assert len(response.headers["x-request-id"]) == 36


def test_secrets_are_redacted_from_log_events() -> None:
    event = redact_secrets(None, "info", {"event": "advisory_call", "authorization": "Bearer sk-1", "model": "m"})
    assert event["authorization"] == "***"
    assert event["model"] == "m"

"""Shared pytest fixtures: async test client, isolated settings, advisory fakes."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from contextlib import asynccontextmanager
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from cropadvisor.config import Settings, get_settings
from cropadvisor.main import app
from cropadvisor.schemas.recommend import InputConditions
from cropadvisor.services.advisory_client import AdvisoryError


class FakeAdvisoryClient:
	"""Stands in for AdvisoryClient: returns canned text or raises a canned error."""

	def __init__(self, text: str | None = None, error: Exception | None = None, configured: bool = True) -> None:
		self.text = text
		self.error = error
		self.configured = configured
		self.prompts: list[str] = []

	async def complete(self, user_prompt: str, system_prompt: str = "") -> str:
		self.prompts.append(user_prompt)
		if self.error is not None:
			raise self.error
		if self.text is None:
			raise AdvisoryError("no canned text")
		return self.text


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
	"""Never pick up a real advisory key from the environment."""
	monkeypatch.setenv("ADVISORY_API_KEY", "")
	get_settings.cache_clear()
	yield
	get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
	return Settings(advisory_api_key="test-key", _env_file=None)


@pytest.fixture
def rice_conditions() -> InputConditions:
	return InputConditions(
		ph=6.5,
		rainfall=1100,
		moisture=75,
		temperature=27,
		nitrogen=90,
		phosphorus=55,
		potassium=55,
		season="Kharif",
	)


@pytest.fixture
def fake_advisory_factory() -> Any:
	return FakeAdvisoryClient


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled."""
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan

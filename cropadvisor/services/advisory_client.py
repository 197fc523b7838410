"""Outbound client for the generative advisory service (chat-completions API)."""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
import structlog

from cropadvisor.config import Settings, get_settings
from cropadvisor.services.prompts import JSON_ONLY_SYSTEM_PROMPT
from cropadvisor.services.response_sanitizer import extract

_logger = structlog.get_logger("cropadvisor.advisory_client")


class AdvisoryError(RuntimeError):
	"""Raised when the advisory service yields no usable text."""

	kind = "advisory_error"


class AdvisoryNotConfiguredError(AdvisoryError):
	kind = "not_configured"


class AdvisoryTimeoutError(AdvisoryError):
	kind = "timeout"


class AdvisoryTransportError(AdvisoryError):
	kind = "transport_error"


class AdvisoryStatusError(AdvisoryError):
	kind = "non_success_status"

	def __init__(self, status_code: int, message: str | None = None):
		super().__init__(message or f"advisory service returned HTTP {status_code}")
		self.status_code = status_code


class AdvisoryPayloadError(AdvisoryError):
	kind = "payload_error"


def _message_text(payload: Any) -> str | None:
	if not isinstance(payload, dict):
		return None
	choices = payload.get("choices")
	if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
		return None
	message = choices[0].get("message")
	if not isinstance(message, dict):
		return None
	content = message.get("content")
	if isinstance(content, str):
		return content
	if isinstance(content, list):
		parts = [str(part.get("text") or "") for part in content if isinstance(part, dict)]
		return "".join(parts)
	return None


class AdvisoryClient:
	"""Single-shot, non-retrying chat-completions caller.

	One ``httpx.AsyncClient`` is opened per call and closed with it; the
	instance holds no connection state between calls.
	"""

	def __init__(
		self,
		settings: Settings | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self.settings = settings or get_settings()
		self._transport = transport

	@property
	def configured(self) -> bool:
		return bool(self.settings.advisory_api_key)

	def build_request_body(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
		return {
			"model": self.settings.advisory_model,
			"temperature": self.settings.advisory_temperature,
			"top_p": 1,
			"max_tokens": self.settings.advisory_max_tokens,
			"messages": [
				{"role": "system", "content": system_prompt},
				{"role": "user", "content": user_prompt},
			],
		}

	async def complete(self, user_prompt: str, system_prompt: str = JSON_ONLY_SYSTEM_PROMPT) -> str:
		"""Return the raw generated text, or raise a typed ``AdvisoryError``."""
		if not self.configured:
			raise AdvisoryNotConfiguredError("advisory API key is not configured")

		headers = {
			"Authorization": f"Bearer {self.settings.advisory_api_key}",
			"Content-Type": "application/json",
			"HTTP-Referer": self.settings.advisory_referer,
			"X-Title": self.settings.advisory_title,
		}
		body = self.build_request_body(system_prompt, user_prompt)

		start = time.perf_counter()
		try:
			# httpx bounds each connect/read step; the deadline bounds the whole exchange.
			async with asyncio.timeout(self.settings.advisory_timeout_seconds):
				async with httpx.AsyncClient(
					timeout=self.settings.advisory_timeout_seconds,
					transport=self._transport,
				) as client:
					response = await client.post(self.settings.advisory_base_url, headers=headers, json=body)
					response.raise_for_status()
					payload = response.json()
		except (httpx.TimeoutException, TimeoutError) as exc:
			self._log_call(start, ok=False, kind=AdvisoryTimeoutError.kind, error=str(exc))
			raise AdvisoryTimeoutError(f"advisory call timed out after {self.settings.advisory_timeout_seconds}s") from exc
		except httpx.HTTPStatusError as exc:
			status_code = exc.response.status_code
			self._log_call(start, ok=False, kind=AdvisoryStatusError.kind, error=str(exc), status_code=status_code)
			raise AdvisoryStatusError(status_code) from exc
		except httpx.HTTPError as exc:
			self._log_call(start, ok=False, kind=AdvisoryTransportError.kind, error=str(exc))
			raise AdvisoryTransportError(f"advisory transport failure: {exc}") from exc
		except ValueError as exc:
			self._log_call(start, ok=False, kind=AdvisoryPayloadError.kind, error=str(exc))
			raise AdvisoryPayloadError("advisory response body is not JSON") from exc

		text = _message_text(payload)
		if text is None:
			self._log_call(start, ok=False, kind=AdvisoryPayloadError.kind, error="missing choices[0].message.content")
			raise AdvisoryPayloadError("advisory response carries no generated text")

		self._log_call(start, ok=True, chars=len(text))
		return text

	def _log_call(self, start: float, *, ok: bool, **extra: Any) -> None:
		duration_ms = round((time.perf_counter() - start) * 1000.0, 2)
		if ok:
			_logger.info("advisory_call", model=self.settings.advisory_model, duration_ms=duration_ms, **extra)
		else:
			_logger.warning("advisory_call_failed", model=self.settings.advisory_model, duration_ms=duration_ms, **extra)


async def fetch_structured(client: AdvisoryClient, prompt: str, *, feature: str) -> Any | None:
	"""One advisory round trip; the parsed reply, or ``None`` when nothing usable came back.

	Faults of any kind are logged here and never propagate: callers always
	have a local answer to fall back on.
	"""
	try:
		raw_text = await client.complete(prompt)
	except AdvisoryNotConfiguredError:
		_logger.info("advisory_skipped", feature=feature, kind=AdvisoryNotConfiguredError.kind)
		return None
	except AdvisoryError as exc:
		_logger.warning("advisory_failed", feature=feature, kind=exc.kind, error=str(exc))
		return None
	except Exception as exc:
		_logger.exception("advisory_failed", feature=feature, kind="unexpected", error=str(exc))
		return None
	return extract(raw_text)

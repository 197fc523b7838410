"""Structured logging setup and per-request context for the recommendation API."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from cropadvisor.config import LogFormat, Settings, get_settings

REDACTED_KEYS = frozenset({"authorization", "api_key", "advisory_api_key", "headers"})
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

_configured = False


def redact_secrets(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
	"""Never let the advisory credential reach a log sink."""
	for key in REDACTED_KEYS.intersection(event_dict):
		event_dict[key] = "***"
	return event_dict


def _renderer(settings: Settings) -> Any:
	if settings.log_format == LogFormat.json:
		return structlog.processors.JSONRenderer()
	return structlog.dev.ConsoleRenderer()


def configure_structured_logging(settings: Settings | None = None) -> None:
	"""Configure stdlib + structlog once per process."""
	global _configured
	if _configured:
		return

	settings = settings or get_settings()
	log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
	if settings.log_format == LogFormat.json:
		logging.basicConfig(level=log_level, format="%(message)s")
	else:
		logging.basicConfig(level=log_level)

	structlog.configure(
		processors=[
			structlog.contextvars.merge_contextvars,
			structlog.processors.add_log_level,
			structlog.processors.TimeStamper(fmt="iso", utc=True),
			redact_secrets,
			structlog.processors.format_exc_info,
			_renderer(settings),
		],
		wrapper_class=structlog.make_filtering_bound_logger(log_level),
		logger_factory=structlog.PrintLoggerFactory(),
		cache_logger_on_first_use=True,
	)
	_configured = True


class RequestLoggingMiddleware(BaseHTTPMiddleware):
	"""Bind request id and path to every log line; echo the id on the response.

	Health and docs requests are logged at debug so they do not drown out
	recommendation traffic.
	"""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
		request.state.request_id = request_id

		structlog.contextvars.clear_contextvars()
		structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path)

		log = structlog.get_logger("cropadvisor.request").bind(method=request.method)
		start = time.perf_counter()

		try:
			response = await call_next(request)
		except Exception as exc:
			log.exception("http_request_failed", duration_ms=_elapsed_ms(start), error=str(exc))
			raise

		response.headers["x-request-id"] = request_id
		emit = log.debug if request.url.path in QUIET_PATHS else log.info
		emit("http_request", status_code=response.status_code, duration_ms=_elapsed_ms(start))
		return response


def _elapsed_ms(start: float) -> float:
	return round((time.perf_counter() - start) * 1000.0, 2)

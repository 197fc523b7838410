"""Tolerant extraction of structured data from free-form advisory text.

``extract`` never raises: each stage is tried only when the previous one
failed, and ``None`` means "no advisory data", not an error.

    1. parse the whole text
    2. strip wrappers (code fences, chatty openers/closers, NUL/BOM) and retry
    3. slice from the first ``[``/``{`` to the last matching closer and parse

``advisory_entries`` then validates the parsed value field by field; a field
that fails validation is dropped, the rest of the entry survives.
"""

from __future__ import annotations

import json
import math
import re
from enum import StrEnum
from typing import Any, TypeVar

import structlog

from cropadvisor.models.enums import ConfidenceEnum
from cropadvisor.schemas.recommend import AdvisoryEntry

_logger = structlog.get_logger("cropadvisor.response_sanitizer")

_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*")
_LEADING_CHATTER_RE = re.compile(
	r"^\s*(?:(?:sure|okay|ok|certainly|of course|absolutely)\b[^\[{\n]*?[!.,:]+\s*"
	r"|here(?:'s| is| are)\b[^\[{\n]*?:\s*|json\s*\n)+",
	re.IGNORECASE,
)
_TRAILING_CHATTER_RE = re.compile(
	r"(?:\s*(?:hope (?:this|that) helps|let me know|feel free)\b[^\]}]*)+$",
	re.IGNORECASE,
)
_CLOSERS = {"[": "]", "{": "}"}
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_LabelT = TypeVar("_LabelT", bound=StrEnum)

WRAPPER_KEYS = ("crops", "recommendations", "results", "data")
NAME_KEYS = ("name", "crop", "crop_name")
TEXT_FIELD_KEYS: dict[str, tuple[str, ...]] = {
	"reason": ("reason", "rationale"),
	"pros": ("pros", "advantages"),
	"cons": ("cons", "disadvantages", "risks"),
	"growth": ("growth", "growth_summary", "growth_notes"),
}


def _parse_structured(text: str) -> Any | None:
	try:
		value = json.loads(text)
	except (ValueError, TypeError, RecursionError):
		return None
	if isinstance(value, (dict, list)):
		return value
	return None


def strip_wrappers(text: str) -> str:
	cleaned = text.replace("\x00", "").replace("\ufeff", "")
	cleaned = _FENCE_RE.sub("", cleaned).strip()
	cleaned = _LEADING_CHATTER_RE.sub("", cleaned)
	cleaned = _TRAILING_CHATTER_RE.sub("", cleaned)
	return cleaned.strip()


def _slice_outer(text: str) -> str | None:
	positions = [idx for idx in (text.find("["), text.find("{")) if idx != -1]
	if not positions:
		return None
	start = min(positions)
	end = text.rfind(_CLOSERS[text[start]])
	if end <= start:
		return None
	return text[start : end + 1]


def extract(raw_text: str | None) -> Any | None:
	if not raw_text or not isinstance(raw_text, str):
		return None

	parsed = _parse_structured(raw_text)
	if parsed is not None:
		return parsed

	cleaned = strip_wrappers(raw_text)
	parsed = _parse_structured(cleaned)
	if parsed is not None:
		_logger.debug("advisory_text_unwrapped", stage=2)
		return parsed

	candidate = _slice_outer(cleaned)
	if candidate is not None:
		parsed = _parse_structured(candidate)
		if parsed is not None:
			_logger.debug("advisory_text_sliced", stage=3)
			return parsed

	_logger.warning("advisory_text_unparseable", chars=len(raw_text), preview=raw_text[:120])
	return None


def clean_text(value: Any) -> str | None:
	if isinstance(value, str):
		text = value.strip()
		return text or None
	if isinstance(value, list):
		parts = [item.strip() for item in value if isinstance(item, str) and item.strip()]
		return "; ".join(parts) or None
	return None


def clean_text_list(value: Any) -> list[str] | None:
	if isinstance(value, str):
		text = value.strip()
		return [text] if text else None
	if isinstance(value, list):
		items = [item.strip() for item in value if isinstance(item, str) and item.strip()]
		return items or None
	return None


def clean_number(value: Any) -> float | None:
	"""A finite number, or the first number written in a string such as ``"Rs 2,300"``."""
	if isinstance(value, bool):
		return None
	if isinstance(value, int | float):
		return float(value) if math.isfinite(value) else None
	if isinstance(value, str):
		match = _NUMBER_RE.search(value.replace(",", ""))
		return float(match.group()) if match else None
	return None


def clean_label(value: Any, labels: type[_LabelT]) -> _LabelT | None:
	"""Match the first word of ``value`` against an enum's values, ignoring case."""
	if not isinstance(value, str):
		return None
	words = value.strip().split()
	if not words:
		return None
	token = words[0].strip(".,;:()<>|").casefold()
	for label in labels:
		if label.value.casefold() == token:
			return label
	return None


def _first(item: dict[str, Any], keys: tuple[str, ...]) -> Any:
	for key in keys:
		if item.get(key) is not None:
			return item[key]
	return None


def _to_entry(item: dict[str, Any]) -> AdvisoryEntry:
	lowered = {str(key).strip().lower(): value for (key, value) in item.items()}
	fields: dict[str, Any] = {
		"name": clean_text(_first(lowered, NAME_KEYS)),
		"confidence": clean_label(lowered.get("confidence"), ConfidenceEnum),
	}
	for field_name, keys in TEXT_FIELD_KEYS.items():
		fields[field_name] = clean_text(_first(lowered, keys))
	thresholds = lowered.get("thresholds")
	fields["thresholds"] = thresholds if isinstance(thresholds, dict) else None
	return AdvisoryEntry(**fields)


def listed_objects(parsed: Any, wrapper_keys: tuple[str, ...] = WRAPPER_KEYS) -> list[dict[str, Any]]:
	"""The object items of a bare array, a wrapped array, or a single object."""
	if isinstance(parsed, dict):
		wrapped = next((parsed[key] for key in wrapper_keys if isinstance(parsed.get(key), list)), None)
		items = wrapped if wrapped is not None else [parsed]
	elif isinstance(parsed, list):
		items = parsed
	else:
		return []
	return [item for item in items if isinstance(item, dict)]


def advisory_entries(parsed: Any) -> list[AdvisoryEntry]:
	return [_to_entry(item) for item in listed_objects(parsed)]

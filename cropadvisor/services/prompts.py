"""Prompt text sent to the advisory service."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from cropadvisor.schemas.recommend import InputConditions, ScoredCandidate

JSON_ONLY_SYSTEM_PROMPT = "Return responses ONLY in valid JSON format. No prose, no markdown, no code fences."

RECOMMENDATION_ENTRY_SCHEMA: dict[str, str] = {
	"name": "<crop name copied exactly from the candidate list>",
	"reason": "<one-sentence primary reason>",
	"pros": "<2-3 pros separated by '; '>",
	"cons": "<2-3 cons separated by '; '>",
	"growth": "<short growth summary: sowing window, irrigation, cycle length>",
	"thresholds": "<object with pH, rainfall_mm, moisture_percent, temperature_c ranges>",
	"confidence": "<low|medium|high>",
}

HYBRID_RESPONSE_SCHEMA: dict[str, str] = {
	"fertilizer": "string",
	"pest_control": "string",
	"precautions": "string",
}


def build_recommendation_prompt(
	candidates: Sequence[ScoredCandidate],
	conditions: InputConditions,
	*,
	top_k: int = 7,
	count: int = 3,
) -> str:
	names = [item.name for item in candidates[:top_k]]
	conditions_payload: dict[str, Any] = conditions.model_dump(mode="json")
	return (
		"You are an agriculture expert advising an Indian grower.\n\n"
		f"Input parameters:\n{json.dumps(conditions_payload, indent=2)}\n\n"
		"Candidate crops, ranked best-first by a local suitability model:\n"
		f"{json.dumps(names)}\n\n"
		f"Pick the best {count} crops from the candidate list ONLY. "
		"Do not introduce crops that are not in the list.\n"
		f"Return a JSON array with exactly {count} objects. Each object MUST follow this exact schema:\n"
		f"{json.dumps(RECOMMENDATION_ENTRY_SCHEMA, indent=2)}\n\n"
		"Return ONLY that JSON array and nothing else. Be concise and avoid extra commentary."
	)


def build_hybrid_prompt(crop: str, growth_stage: str, soil: dict[str, float]) -> str:
	return (
		"You are a senior Indian agronomist.\n\n"
		f"Crop: {crop}\n"
		f"Growth stage: {growth_stage}\n\n"
		"Soil nutrients (kg/ha):\n"
		f"N: {soil.get('n')}\n"
		f"P: {soil.get('p')}\n"
		f"K: {soil.get('k')}\n\n"
		"TASK:\nProvide hybrid fertilizer and pest control advice.\n\n"
		"RULES:\n"
		"- Organic first, chemical only if required\n"
		"- Follow IPM principles\n"
		"- Indian farming context\n"
		"- Output ONLY JSON\n\n"
		f"FORMAT:\n{json.dumps(HYBRID_RESPONSE_SCHEMA, indent=2)}"
	)


IRRIGATION_RESPONSE_SCHEMA: dict[str, str] = {
	"reason": "<one or two sentences on why irrigation is or is not needed now>",
	"risk": "<main water-related risk to the crop>",
	"explanation": "<array of 3-5 short practical points>",
}

ROTATION_ENTRY_SCHEMA: dict[str, str] = {
	"next_crop": "<crop name copied exactly from the option list>",
	"benefit": "<one sentence on the agronomic benefit of this sequence>",
	"profit_expectation": "<High|Medium|Low>",
}

MARKET_ENTRY_SCHEMA: dict[str, str] = {
	"crop": "<crop name copied exactly from the list>",
	"market_price_per_quintal": "<current mandi price in INR per quintal, number>",
	"risk_level": "<Low|Medium|High>",
	"market_trend": "<Rising|Stable|Falling>",
	"demand_factors": "<array of short strings>",
	"supply_factors": "<array of short strings>",
	"pest_disease_risk": "<array of short strings>",
}


def build_irrigation_prompt(plan: dict[str, Any]) -> str:
	return (
		"You are an Indian irrigation specialist.\n\n"
		"A local water-balance model produced this plan. Do not change any number in it:\n"
		f"{json.dumps(plan, indent=2)}\n\n"
		"TASK:\nExplain the plan to the grower.\n\n"
		"RULES:\n"
		"- Indian farming context\n"
		"- Mention water saving where it applies\n"
		"- Output ONLY JSON\n\n"
		f"FORMAT:\n{json.dumps(IRRIGATION_RESPONSE_SCHEMA, indent=2)}"
	)


def build_rotation_prompt(current_crop: str, soil_type: str | None, options: Sequence[str]) -> str:
	return (
		"You are an Indian agronomist planning crop rotation.\n\n"
		f"Current crop: {current_crop}\n"
		f"Soil type: {soil_type or 'unknown'}\n\n"
		"Next-crop options chosen by a local rotation model:\n"
		f"{json.dumps(list(options))}\n\n"
		"Describe each option ONLY. Do not introduce crops that are not in the list.\n"
		"Return a JSON array with one object per option, following this exact schema:\n"
		f"{json.dumps(ROTATION_ENTRY_SCHEMA, indent=2)}\n\n"
		"Return ONLY that JSON array and nothing else."
	)


def build_market_prompt(crops: Sequence[str], location: dict[str, str | None]) -> str:
	place = ", ".join(part for part in (location.get("district"), location.get("state")) if part) or "India"
	return (
		"You are an Indian agricultural market analyst.\n\n"
		f"Location: {place}\n"
		f"Crops: {json.dumps(list(crops))}\n\n"
		"TASK:\nGive the current market outlook for each crop.\n\n"
		"Return a JSON array with one object per crop, following this exact schema:\n"
		f"{json.dumps(MARKET_ENTRY_SCHEMA, indent=2)}\n\n"
		"Return ONLY that JSON array and nothing else."
	)

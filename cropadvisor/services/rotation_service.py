"""Crop rotation: next-crop options picked from the knowledge base, described by the advisory service."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from cropadvisor.config import Settings, get_settings
from cropadvisor.models.crops import CropProfile
from cropadvisor.models.enums import LevelEnum, ProvenanceEnum, SeasonEnum
from cropadvisor.schemas.rotation import RotationOption, RotationRequest, RotationResponse
from cropadvisor.services.advisory_client import AdvisoryClient, fetch_structured
from cropadvisor.services.knowledge_base import LEGUMES, KnowledgeBase, crop_family, get_knowledge_base
from cropadvisor.services.market_service import baseline_profit
from cropadvisor.services.prompts import build_rotation_prompt
from cropadvisor.services.response_sanitizer import clean_label, clean_text, listed_objects
from cropadvisor.services.soils import resolve_soil

_logger = structlog.get_logger("cropadvisor.rotation")

NEXT_SEASONS: dict[SeasonEnum, tuple[SeasonEnum, ...]] = {
	SeasonEnum.kharif: (SeasonEnum.rabi,),
	SeasonEnum.rabi: (SeasonEnum.summer, SeasonEnum.kharif),
	SeasonEnum.summer: (SeasonEnum.kharif,),
	SeasonEnum.annual: (SeasonEnum.kharif, SeasonEnum.rabi),
	SeasonEnum.perennial: (SeasonEnum.kharif, SeasonEnum.rabi),
}

# Nitrogen optimum (kg/ha) at or above which a crop counts as a heavy feeder.
HEAVY_FEEDER_NITROGEN = 120.0
# Moisture optimum (%) at or above which a crop is kept off free-draining soils.
WATER_HUNGRY_MOISTURE = 80.0

ROTATION_WRAPPER_KEYS = ("rotation_options", "options", "crops")
OPTION_NAME_KEYS = ("next_crop", "crop", "name")

_IMPROVEMENT_ORDER = {LevelEnum.high: 0, LevelEnum.medium: 1, LevelEnum.low: 2}


@dataclass(frozen=True, slots=True)
class RotationCandidate:
	profile: CropProfile
	soil_improvement: LevelEnum
	profit_expectation: LevelEnum


def following_seasons(profile: CropProfile | None) -> set[SeasonEnum]:
	if profile is None:
		return {SeasonEnum.kharif, SeasonEnum.rabi}
	return {season for current in profile.seasons for season in NEXT_SEASONS[current]}


def soil_improvement(current: CropProfile | None, candidate: CropProfile) -> LevelEnum:
	current_is_legume = current is not None and current.name in LEGUMES
	if candidate.name in LEGUMES and not current_is_legume:
		return LevelEnum.high
	if candidate.nitrogen.opt >= HEAVY_FEEDER_NITROGEN and not current_is_legume:
		return LevelEnum.low
	return LevelEnum.medium


def profit_expectation(candidate: CropProfile) -> LevelEnum:
	profit = baseline_profit(candidate)
	if profit > 40000:
		return LevelEnum.high
	return LevelEnum.medium if profit > 15000 else LevelEnum.low


def rotation_candidates(
	current: CropProfile | None,
	soil_type: str | None,
	*,
	knowledge_base: KnowledgeBase,
	limit: int,
) -> list[RotationCandidate]:
	"""Seasonal successors from another family, best soil improvement first."""
	seasons = following_seasons(current)
	current_family = crop_family(current.name) if current is not None else None
	soil = resolve_soil(soil_type)

	candidates: list[RotationCandidate] = []
	for profile in knowledge_base:
		family = crop_family(profile.name)
		if current is not None and profile.name == current.name:
			continue
		if family == "plantation" or (current_family is not None and family == current_family):
			continue
		if not profile.seasons & seasons:
			continue
		if soil is not None and soil.free_draining and profile.moisture.opt >= WATER_HUNGRY_MOISTURE:
			continue
		candidates.append(
			RotationCandidate(
				profile=profile,
				soil_improvement=soil_improvement(current, profile),
				profit_expectation=profit_expectation(profile),
			)
		)

	# Stable sort: catalogue order breaks ties.
	candidates.sort(key=lambda item: (_IMPROVEMENT_ORDER[item.soil_improvement], -item.profile.priority))
	return candidates[:limit]


def fallback_benefit(current_name: str, current: CropProfile | None, candidate: RotationCandidate) -> str:
	name = candidate.profile.name
	if candidate.soil_improvement is LevelEnum.high:
		return f"{name} fixes atmospheric nitrogen and rebuilds fertility after {current_name}."
	if current is not None and current.name in LEGUMES:
		return f"{name} draws on the nitrogen left behind by {current_name}."
	if candidate.soil_improvement is LevelEnum.low:
		return f"{name} is a heavy feeder; add compost or green manure before sowing it after {current_name}."
	family = crop_family(name) or "different"
	return f"Moving from {current_name} to a {family} crop breaks pest and disease cycles."


class CropRotationService:
	def __init__(
		self,
		advisory_client: AdvisoryClient | None = None,
		settings: Settings | None = None,
		knowledge_base: KnowledgeBase | None = None,
	):
		self.settings = settings or get_settings()
		self.advisory_client = advisory_client or AdvisoryClient(self.settings)
		self.knowledge_base = knowledge_base if knowledge_base is not None else get_knowledge_base()

	async def plan(self, request: RotationRequest) -> RotationResponse:
		current = self.knowledge_base.profile(request.current_crop)
		current_name = current.name if current is not None else request.current_crop.strip()
		if current is None:
			_logger.warning("rotation_unknown_crop", crop=current_name)

		candidates = rotation_candidates(
			current,
			request.soil_type,
			knowledge_base=self.knowledge_base,
			limit=self.settings.rotation_option_count,
		)
		names = [item.profile.name for item in candidates]

		replies: dict[str, dict[str, Any]] = {}
		if candidates:
			parsed = await fetch_structured(
				self.advisory_client,
				build_rotation_prompt(current_name, request.soil_type, names),
				feature="rotation",
			)
			replies = self._replies_by_crop(parsed, names)

		options = [self._option(current_name, current, item, replies.get(item.profile.name)) for item in candidates]
		source = (
			ProvenanceEnum.advisory
			if any(option.provenance is ProvenanceEnum.advisory for option in options)
			else ProvenanceEnum.fallback
		)
		_logger.info("rotation_planned", crop=current_name, options=names, source=source.value)
		return RotationResponse(
			current_crop=current_name,
			soil_type=request.soil_type,
			rotation_options=options,
			source=source,
		)

	def _option(
		self,
		current_name: str,
		current: CropProfile | None,
		candidate: RotationCandidate,
		reply: dict[str, Any] | None,
	) -> RotationOption:
		reply = reply or {}
		benefit = clean_text(reply.get("benefit"))
		profit = clean_label(reply.get("profit_expectation"), LevelEnum)
		return RotationOption(
			next_crop=candidate.profile.name,
			seasons=candidate.profile.ordered_seasons(),
			benefit=benefit or fallback_benefit(current_name, current, candidate),
			soil_improvement=candidate.soil_improvement,
			profit_expectation=profit or candidate.profit_expectation,
			provenance=ProvenanceEnum.advisory if benefit or profit else ProvenanceEnum.fallback,
		)

	def _replies_by_crop(self, parsed: Any, names: Sequence[str]) -> dict[str, dict[str, Any]]:
		replies: dict[str, dict[str, Any]] = {}
		for item in listed_objects(parsed, ROTATION_WRAPPER_KEYS):
			raw_name = clean_text(next((item[key] for key in OPTION_NAME_KEYS if item.get(key) is not None), None))
			profile = self.knowledge_base.profile(raw_name)
			# Suggestions outside the local option list are dropped.
			if profile is not None and profile.name in names and profile.name not in replies:
				replies[profile.name] = item
		return replies

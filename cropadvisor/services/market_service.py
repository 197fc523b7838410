"""Market intelligence: per-crop revenue and profit projection with an advisory market outlook.

Yield, revenue, cost and profit are computed locally. The advisory reply may
supply a current mandi price (accepted only close to the reference price), the
risk and trend labels, and the demand, supply and pest notes.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from cropadvisor.config import Settings, get_settings
from cropadvisor.models.crops import CropProfile
from cropadvisor.models.enums import LevelEnum, MarketTrendEnum, ProvenanceEnum, SeasonEnum
from cropadvisor.schemas.market import (
	BestCropSuggestion,
	CropMarketAnalysis,
	MarketRequest,
	MarketResponse,
	SeasonOutlook,
)
from cropadvisor.services.advisory_client import AdvisoryClient, fetch_structured
from cropadvisor.services.knowledge_base import KnowledgeBase, get_knowledge_base
from cropadvisor.services.prompts import build_market_prompt
from cropadvisor.services.response_sanitizer import (
	NAME_KEYS,
	clean_label,
	clean_number,
	clean_text,
	clean_text_list,
	listed_objects,
)
from cropadvisor.services.yield_estimator import YieldCalibration, estimate_yield

_logger = structlog.get_logger("cropadvisor.market")


@dataclass(frozen=True, slots=True)
class MarketReference:
	price_per_quintal: int
	cost_per_ha: int


DEFAULT_REFERENCE = MarketReference(price_per_quintal=2000, cost_per_ha=25000)

# Reference mandi price (INR/quintal) and cultivation cost (INR/ha).
MARKET_REFERENCE: dict[str, MarketReference] = {
	"Wheat": MarketReference(2275, 25000),
	"Rice": MarketReference(2183, 30000),
	"Maize": MarketReference(2090, 28000),
	"Jowar": MarketReference(3180, 20000),
	"Bajra": MarketReference(2500, 16000),
	"Ragi": MarketReference(3846, 18000),
	"Barley": MarketReference(1735, 20000),
	"Gram": MarketReference(5440, 20000),
	"Tur": MarketReference(7000, 22000),
	"Moong": MarketReference(8558, 18000),
	"Urad": MarketReference(6950, 18000),
	"Masur": MarketReference(6425, 18000),
	"Cotton": MarketReference(6620, 35000),
	"Sugarcane": MarketReference(315, 60000),
	"Groundnut": MarketReference(6377, 30000),
	"Soybean": MarketReference(4600, 22000),
	"Mustard": MarketReference(5650, 18000),
	"Sunflower": MarketReference(6760, 22000),
	"Sesame": MarketReference(8635, 16000),
	"Potato": MarketReference(1500, 45000),
	"Onion": MarketReference(1500, 60000),
	"Tomato": MarketReference(2000, 50000),
}

DEFAULT_NOTES: dict[str, list[str]] = {
	"demand_factors": ["Local demand stable"],
	"supply_factors": ["Supply chain normal"],
	"pest_disease_risk": ["Standard seasonal risks"],
}

MARKET_WRAPPER_KEYS = ("crop_analysis", "crops", "analysis", "data")
OUTLOOK_SEASONS = (SeasonEnum.kharif, SeasonEnum.rabi, SeasonEnum.summer)


def reference_for(name: str) -> MarketReference:
	return MARKET_REFERENCE.get(name, DEFAULT_REFERENCE)


def baseline_profit(profile: CropProfile) -> int:
	"""Profit per hectare at the crop's baseline yield and reference price."""
	reference = reference_for(profile.name)
	return round(profile.base_yield * 10 * reference.price_per_quintal) - reference.cost_per_ha


def local_risk(profit: int, comfort: int) -> LevelEnum:
	if profit <= 0:
		return LevelEnum.high
	return LevelEnum.low if profit > comfort else LevelEnum.medium


def season_outlook(profile: CropProfile | None) -> list[SeasonOutlook]:
	if profile is None:
		return [
			SeasonOutlook(season=season, reason="Not in the crop catalogue; check locally")
			for season in OUTLOOK_SEASONS
		]
	if profile.seasons & {SeasonEnum.annual, SeasonEnum.perennial}:
		return [
			SeasonOutlook(season=season, recommended=True, reason="Standing crop across the year")
			for season in OUTLOOK_SEASONS
		]
	return [
		SeasonOutlook(
			season=season,
			recommended=season in profile.seasons,
			reason="Sowing season" if season in profile.seasons else "Off-season",
		)
		for season in OUTLOOK_SEASONS
	]


class MarketIntelligenceService:
	def __init__(
		self,
		advisory_client: AdvisoryClient | None = None,
		settings: Settings | None = None,
		knowledge_base: KnowledgeBase | None = None,
	):
		self.settings = settings or get_settings()
		self.advisory_client = advisory_client or AdvisoryClient(self.settings)
		self.knowledge_base = knowledge_base if knowledge_base is not None else get_knowledge_base()
		self.calibration = YieldCalibration.from_settings(self.settings)

	def canonical_crops(self, names: Sequence[str]) -> list[str]:
		"""Catalogue names where known, input order kept, duplicates dropped."""
		crops: list[str] = []
		for name in names:
			profile = self.knowledge_base.profile(name)
			canonical = profile.name if profile is not None else name.strip()
			if canonical.casefold() not in {crop.casefold() for crop in crops}:
				crops.append(canonical)
		return crops

	async def analyse(self, request: MarketRequest) -> MarketResponse:
		crops = self.canonical_crops(request.crops)
		parsed = await fetch_structured(
			self.advisory_client,
			build_market_prompt(crops, {"state": request.state, "district": request.district}),
			feature="market",
		)

		try:
			replies = self._replies_by_crop(parsed, crops)
			analysis = [self.analyse_crop(crop, request, replies.get(crop)) for crop in crops]
		except Exception as exc:
			_logger.exception("market_merge_failed", error=str(exc))
			analysis = [self.analyse_crop(crop, request, None) for crop in crops]

		# max keeps the first of equal profits, so input order breaks ties.
		best = max(analysis, key=lambda item: item.expected_profit_per_ha)
		source = (
			ProvenanceEnum.advisory
			if any(item.provenance is ProvenanceEnum.advisory for item in analysis)
			else ProvenanceEnum.fallback
		)
		_logger.info("market_analysed", crops=crops, best_crop=best.crop, source=source.value)
		return MarketResponse(
			state=request.state,
			district=request.district,
			crop_analysis=analysis,
			best_crop_suggestion=BestCropSuggestion(
				crop=best.crop,
				reason=f"Best projected return with ₹{best.expected_profit_per_ha:,}/ha profit.",
			),
			source=source,
		)

	def analyse_crop(
		self,
		crop: str,
		conditions: MarketRequest,
		reply: dict[str, Any] | None,
	) -> CropMarketAnalysis:
		profile = self.knowledge_base.profile(crop)
		reference = reference_for(crop)
		reply = reply or {}
		used_advisory = False

		price = reference.price_per_quintal
		price_source = ProvenanceEnum.fallback
		offered = clean_number(reply.get("market_price_per_quintal"))
		tolerance = self.settings.market_price_tolerance * reference.price_per_quintal
		if offered is not None and abs(offered - reference.price_per_quintal) <= tolerance:
			price = round(offered)
			price_source = ProvenanceEnum.advisory
			used_advisory = True
		elif offered is not None:
			_logger.info("market_price_rejected", crop=crop, offered=offered, reference=reference.price_per_quintal)

		expected_yield = estimate_yield(
			crop, conditions, knowledge_base=self.knowledge_base, calibration=self.calibration
		)
		revenue = round(expected_yield * 10 * price)
		profit = revenue - reference.cost_per_ha

		risk = clean_label(reply.get("risk_level"), LevelEnum)
		trend = clean_label(reply.get("market_trend"), MarketTrendEnum)
		used_advisory = used_advisory or risk is not None or trend is not None

		notes: dict[str, list[str]] = {}
		for field, default in DEFAULT_NOTES.items():
			value = clean_text_list(reply.get(field))
			used_advisory = used_advisory or value is not None
			notes[field] = value or list(default)

		return CropMarketAnalysis(
			crop=crop,
			market_price_per_quintal=price,
			price_source=price_source,
			expected_yield_t_per_ha=expected_yield,
			expected_revenue_per_ha=revenue,
			input_cost_per_ha=reference.cost_per_ha,
			expected_profit_per_ha=profit,
			risk_level=risk or local_risk(profit, self.settings.market_profit_comfort),
			market_trend=trend or MarketTrendEnum.stable,
			season_outlook=season_outlook(profile),
			provenance=ProvenanceEnum.advisory if used_advisory else ProvenanceEnum.fallback,
			**notes,
		)

	def _replies_by_crop(self, parsed: Any, crops: Sequence[str]) -> dict[str, dict[str, Any]]:
		"""Advisory items keyed by the requested crop they name; unknown names are ignored."""
		wanted = {crop.casefold(): crop for crop in crops}
		replies: dict[str, dict[str, Any]] = {}
		for item in listed_objects(parsed, MARKET_WRAPPER_KEYS):
			name = clean_text(next((item[key] for key in NAME_KEYS if item.get(key) is not None), None))
			if name is None:
				continue
			profile = self.knowledge_base.profile(name)
			crop = wanted.get((profile.name if profile is not None else name).casefold())
			if crop is not None and crop not in replies:
				replies[crop] = item
		return replies

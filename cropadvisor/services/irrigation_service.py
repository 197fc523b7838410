"""Irrigation planning: a local water balance, narrated by the advisory service when it answers.

The plan (need, depth, method, interval, run time) is always computed here from
the crop's moisture range and the soil's water behaviour. The advisory reply can
only replace the wording: ``reason``, ``risk`` and ``explanation``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from cropadvisor.config import Settings, get_settings
from cropadvisor.models.crops import CropProfile, OptimumRange
from cropadvisor.models.enums import IrrigationMethodEnum, ProvenanceEnum, SeasonEnum
from cropadvisor.schemas.irrigation import IrrigationAdvice, IrrigationRequest, MoistureThresholds, SoilBehavior
from cropadvisor.services.advisory_client import AdvisoryClient, fetch_structured
from cropadvisor.services.knowledge_base import KnowledgeBase, get_knowledge_base
from cropadvisor.services.prompts import build_irrigation_prompt
from cropadvisor.services.response_sanitizer import clean_text, clean_text_list
from cropadvisor.services.soils import SoilHydrology, resolve_soil, soil_or_default

_logger = structlog.get_logger("cropadvisor.irrigation")

# Used for crops outside the knowledge base.
DEFAULT_MOISTURE = OptimumRange(min=40, opt=60, max=80)

APPLICATION_RATE_MM_PER_HOUR: dict[IrrigationMethodEnum, float] = {
	IrrigationMethodEnum.drip: 4.0,
	IrrigationMethodEnum.micro_sprinkler: 6.0,
	IrrigationMethodEnum.sprinkler: 10.0,
	IrrigationMethodEnum.furrow: 30.0,
	IrrigationMethodEnum.flood: 40.0,
}

# Grown in standing water.
PONDED_CROPS = frozenset({"Rice"})

EXPLANATION_KEYS = ("explanation", "ai_explanation")


@dataclass(frozen=True, slots=True)
class IrrigationPlan:
	crop: str
	soil: SoilHydrology
	moisture: float
	thresholds: OptimumRange
	need_irrigation: bool
	recommended_mm: float
	method: IrrigationMethodEnum
	frequency_days: int
	duration_minutes: int

	def as_prompt_payload(self) -> dict[str, Any]:
		return {
			"crop": self.crop,
			"soil_class": self.soil.name,
			"soil_moisture_percent": self.moisture,
			"optimum_moisture_percent": self.thresholds.opt,
			"stress_below_percent": self.thresholds.min,
			"need_irrigation": self.need_irrigation,
			"recommended_mm": self.recommended_mm,
			"irrigation_mechanism": self.method.value,
			"frequency_days": self.frequency_days,
			"duration_minutes": self.duration_minutes,
		}


def choose_method(profile: CropProfile | None, soil: SoilHydrology) -> IrrigationMethodEnum:
	if profile is not None:
		if profile.name in PONDED_CROPS:
			return IrrigationMethodEnum.flood
		# Orchards and plantations are watered per plant.
		if SeasonEnum.perennial in profile.seasons and soil.method is not IrrigationMethodEnum.micro_sprinkler:
			return IrrigationMethodEnum.drip
	return soil.method


def plan_irrigation(
	crop: str,
	soil_type: str | None,
	moisture: float,
	*,
	knowledge_base: KnowledgeBase | None = None,
) -> IrrigationPlan:
	"""Water needed to bring the root zone back to the crop's optimum moisture."""
	if knowledge_base is None:
		knowledge_base = get_knowledge_base()
	profile = knowledge_base.profile(crop)
	thresholds = profile.moisture if profile is not None else DEFAULT_MOISTURE
	soil = soil_or_default(soil_type)

	need = moisture < thresholds.opt
	recommended = round((thresholds.opt - moisture) * soil.mm_per_moisture_point, 1) if need else 0.0
	method = choose_method(profile, soil)
	duration = round(recommended / APPLICATION_RATE_MM_PER_HOUR[method] * 60)

	return IrrigationPlan(
		crop=profile.name if profile is not None else crop.strip(),
		soil=soil,
		moisture=moisture,
		thresholds=thresholds,
		need_irrigation=need,
		recommended_mm=recommended,
		method=method,
		frequency_days=soil.interval_days,
		duration_minutes=duration,
	)


def fallback_narrative(plan: IrrigationPlan) -> dict[str, Any]:
	limits = plan.thresholds
	if plan.need_irrigation:
		reason = (
			f"Soil moisture at {plan.moisture:g}% is below the {limits.opt:g}% optimum for {plan.crop}; "
			f"apply about {plan.recommended_mm:g} mm."
		)
	else:
		reason = (
			f"Soil moisture at {plan.moisture:g}% meets the {limits.opt:g}% optimum for {plan.crop}; "
			"no irrigation is needed now."
		)

	if plan.moisture < limits.min:
		risk = f"Moisture is under the {limits.min:g}% stress point, so {plan.crop} is already short of water."
	elif plan.moisture > limits.max:
		risk = f"Moisture is over {limits.max:g}%; waterlogging can starve roots of oxygen. Improve drainage."
	elif plan.need_irrigation:
		risk = "Moisture will fall into the stress band within a few days without water."
	else:
		risk = "Low; keep monitoring soil moisture."

	soil = plan.soil
	explanation = [
		f"{soil.name.capitalize()} soil has {soil.water_holding_capacity.value.lower()} water holding capacity "
		f"and {soil.infiltration_rate.value.lower()} infiltration.",
		f"{plan.method.value.capitalize()} irrigation suits {plan.crop} on this soil.",
		f"Check soil moisture again in {plan.frequency_days} days.",
	]
	return {"reason": reason, "risk": risk, "explanation": explanation}


class IrrigationAdvisoryService:
	def __init__(
		self,
		advisory_client: AdvisoryClient | None = None,
		settings: Settings | None = None,
		knowledge_base: KnowledgeBase | None = None,
	):
		self.settings = settings or get_settings()
		self.advisory_client = advisory_client or AdvisoryClient(self.settings)
		self.knowledge_base = knowledge_base if knowledge_base is not None else get_knowledge_base()

	async def advise(self, request: IrrigationRequest) -> IrrigationAdvice:
		if resolve_soil(request.soil_type) is None:
			_logger.warning("irrigation_unknown_soil", soil_type=request.soil_type)
		plan = plan_irrigation(request.crop, request.soil_type, request.moisture, knowledge_base=self.knowledge_base)

		narrative = fallback_narrative(plan)
		source = ProvenanceEnum.fallback

		parsed = await fetch_structured(
			self.advisory_client,
			build_irrigation_prompt(plan.as_prompt_payload()),
			feature="irrigation",
		)
		if isinstance(parsed, dict):
			replies = {
				"reason": clean_text(parsed.get("reason")),
				"risk": clean_text(parsed.get("risk")),
				"explanation": clean_text_list(next((parsed[key] for key in EXPLANATION_KEYS if key in parsed), None)),
			}
			for field, value in replies.items():
				if value:
					narrative[field] = value
					source = ProvenanceEnum.advisory
		elif parsed is not None:
			_logger.warning("irrigation_advisory_unexpected_shape", crop=plan.crop, shape=type(parsed).__name__)

		_logger.info(
			"irrigation_planned",
			crop=plan.crop,
			soil_class=plan.soil.name,
			need_irrigation=plan.need_irrigation,
			recommended_mm=plan.recommended_mm,
			source=source.value,
		)
		return IrrigationAdvice(
			crop=plan.crop,
			soil_type=request.soil_type.strip(),
			moisture=plan.moisture,
			need_irrigation=plan.need_irrigation,
			recommended_mm=plan.recommended_mm,
			irrigation_mechanism=plan.method,
			frequency_days=plan.frequency_days,
			duration_minutes=plan.duration_minutes,
			moisture_thresholds=MoistureThresholds(
				ideal_min=round((plan.thresholds.min + plan.thresholds.opt) / 2, 1),
				ideal_max=round((plan.thresholds.opt + plan.thresholds.max) / 2, 1),
				stress_below=plan.thresholds.min,
				excess_above=plan.thresholds.max,
			),
			soil_behavior=SoilBehavior(
				soil_class=plan.soil.name,
				infiltration_rate=plan.soil.infiltration_rate,
				water_holding_capacity=plan.soil.water_holding_capacity,
				runoff_risk=plan.soil.runoff_risk,
			),
			source=source,
			**narrative,
		)

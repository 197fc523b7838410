"""Heuristic yield projection from a crop's baseline and measured conditions."""

from __future__ import annotations

import math
from dataclasses import dataclass

from cropadvisor.config import Settings, get_settings
from cropadvisor.schemas.recommend import InputConditions
from cropadvisor.services.knowledge_base import KnowledgeBase, get_knowledge_base


@dataclass(frozen=True, slots=True)
class YieldCalibration:
	default_base: float = 2.0
	temperature_optimum: float = 25.0
	temperature_spread: float = 12.0
	nutrient_default: float = 0.4
	nutrient_min: float = 0.6
	nutrient_max: float = 1.6
	moisture_default: float = 0.5
	moisture_min: float = 0.4
	moisture_max: float = 1.4

	@classmethod
	def from_settings(cls, settings: Settings | None = None) -> "YieldCalibration":
		settings = settings or get_settings()
		return cls(
			default_base=settings.yield_default_base,
			temperature_optimum=settings.yield_temperature_optimum,
			temperature_spread=settings.yield_temperature_spread,
			nutrient_default=settings.yield_nutrient_default,
			nutrient_min=settings.yield_nutrient_min,
			nutrient_max=settings.yield_nutrient_max,
			moisture_default=settings.yield_moisture_default,
			moisture_min=settings.yield_moisture_min,
			moisture_max=settings.yield_moisture_max,
		)


def _clamp(value: float, low: float, high: float) -> float:
	return max(low, min(high, value))


def _scaled(value: float | None, default: float) -> float:
	return default if value is None else value / 100.0


def nutrient_factor(conditions: InputConditions, calibration: YieldCalibration) -> float:
	levels = [
		_scaled(conditions.nitrogen, calibration.nutrient_default),
		_scaled(conditions.phosphorus, calibration.nutrient_default),
		_scaled(conditions.potassium, calibration.nutrient_default),
	]
	return _clamp(sum(levels) / len(levels), calibration.nutrient_min, calibration.nutrient_max)


def moisture_factor(conditions: InputConditions, calibration: YieldCalibration) -> float:
	level = _scaled(conditions.moisture, calibration.moisture_default)
	return _clamp(level, calibration.moisture_min, calibration.moisture_max)


def temperature_factor(conditions: InputConditions, calibration: YieldCalibration) -> float:
	# Gaussian around the optimum; 1.0 when temperature is unknown.
	temperature = conditions.temperature
	if temperature is None:
		temperature = calibration.temperature_optimum
	return math.exp(-(((temperature - calibration.temperature_optimum) / calibration.temperature_spread) ** 2))


def estimate_yield(
	crop_name: str,
	conditions: InputConditions,
	*,
	knowledge_base: KnowledgeBase | None = None,
	calibration: YieldCalibration | None = None,
) -> float:
	"""Projected yield in t/ha, rounded to two decimals; never negative."""
	if knowledge_base is None:
		knowledge_base = get_knowledge_base()
	calibration = calibration or YieldCalibration.from_settings()

	profile = knowledge_base.profile(crop_name)
	base = profile.base_yield if profile is not None else calibration.default_base

	estimate = (
		base
		* nutrient_factor(conditions, calibration)
		* moisture_factor(conditions, calibration)
		* temperature_factor(conditions, calibration)
	)
	return round(max(0.0, estimate), 2)

"""Soil water behaviour by texture class, shared by irrigation and rotation advice."""

from __future__ import annotations

from dataclasses import dataclass

from cropadvisor.models.enums import IrrigationMethodEnum, LevelEnum


@dataclass(frozen=True, slots=True)
class SoilHydrology:
	name: str
	infiltration_rate: LevelEnum
	water_holding_capacity: LevelEnum
	runoff_risk: LevelEnum
	# Water needed to lift root-zone moisture by one percentage point.
	mm_per_moisture_point: float
	interval_days: int
	method: IrrigationMethodEnum

	@property
	def free_draining(self) -> bool:
		return self.infiltration_rate is LevelEnum.high


_H = LevelEnum.high
_M = LevelEnum.medium
_L = LevelEnum.low

SOIL_TYPES: dict[str, SoilHydrology] = {
	"sandy": SoilHydrology("sandy", _H, _L, _L, 2.0, 2, IrrigationMethodEnum.drip),
	"red": SoilHydrology("red", _H, _L, _M, 2.2, 3, IrrigationMethodEnum.drip),
	"laterite": SoilHydrology("laterite", _H, _L, _M, 2.2, 3, IrrigationMethodEnum.micro_sprinkler),
	"loamy": SoilHydrology("loamy", _M, _M, _M, 3.0, 4, IrrigationMethodEnum.sprinkler),
	"alluvial": SoilHydrology("alluvial", _M, _M, _L, 3.0, 4, IrrigationMethodEnum.sprinkler),
	"silt": SoilHydrology("silt", _M, _H, _M, 3.2, 5, IrrigationMethodEnum.sprinkler),
	"clay": SoilHydrology("clay", _L, _H, _H, 3.5, 6, IrrigationMethodEnum.furrow),
	"black": SoilHydrology("black", _L, _H, _H, 3.5, 7, IrrigationMethodEnum.furrow),
}

SOIL_ALIASES: dict[str, str] = {
	"sand": "sandy",
	"loam": "loamy",
	"sandy loam": "loamy",
	"clay loam": "clay",
	"clayey": "clay",
	"silty": "silt",
	"black cotton": "black",
	"regur": "black",
	"lateritic": "laterite",
}

DEFAULT_SOIL = "loamy"


def resolve_soil(soil_type: str | None) -> SoilHydrology | None:
	"""Texture class for a free-text soil name, or ``None`` when unrecognized."""
	if not soil_type:
		return None
	key = " ".join(soil_type.strip().lower().split())
	key = key.removesuffix(" soils").removesuffix(" soil")
	key = SOIL_ALIASES.get(key, key)
	if key in SOIL_TYPES:
		return SOIL_TYPES[key]
	for word in key.split():
		word = SOIL_ALIASES.get(word, word)
		if word in SOIL_TYPES:
			return SOIL_TYPES[word]
	return None


def soil_or_default(soil_type: str | None) -> SoilHydrology:
	return resolve_soil(soil_type) or SOIL_TYPES[DEFAULT_SOIL]

"""Pydantic schemas for the crop recommendation endpoint."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cropadvisor.models.crops import CropProfile, OptimumRange
from cropadvisor.models.enums import AdvisoryStatusEnum, ConfidenceEnum, ProvenanceEnum, SeasonEnum

NUMERIC_FIELDS = ("nitrogen", "phosphorus", "potassium", "ph", "moisture", "temperature", "rainfall")


class InputConditions(BaseModel):
	"""Measured soil/climate conditions for one request; absent values stay ``None``."""

	model_config = ConfigDict(frozen=True)

	nitrogen: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
	phosphorus: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
	potassium: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
	ph: float | None = Field(default=None, ge=0.0, le=14.0, allow_inf_nan=False)
	moisture: float | None = Field(default=None, ge=0.0, le=100.0, allow_inf_nan=False)
	temperature: float | None = Field(default=None, ge=-50.0, le=70.0, allow_inf_nan=False)
	rainfall: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
	season: SeasonEnum = SeasonEnum.kharif

	@field_validator(*NUMERIC_FIELDS, mode="before")
	@classmethod
	def _unreadable_is_absent(cls, value: Any) -> float | None:
		# Anything that is not a finite number is treated as not measured.
		if isinstance(value, bool) or value is None:
			return None
		try:
			number = float(value.strip() if isinstance(value, str) else value)
		except (TypeError, ValueError, OverflowError):
			return None
		return number if math.isfinite(number) else None

	@field_validator("season", mode="before")
	@classmethod
	def _coerce_season(cls, value: Any) -> SeasonEnum:
		return SeasonEnum.coerce(value)

	def measured(self) -> dict[str, float]:
		"""Only the numeric fields that were actually supplied."""
		return {name: getattr(self, name) for name in NUMERIC_FIELDS if getattr(self, name) is not None}


class ScoredCandidate(BaseModel):
	name: str
	score: float
	seasons: list[SeasonEnum] = Field(default_factory=list)


class ThresholdBlock(BaseModel):
	ph: OptimumRange
	rainfall: OptimumRange
	moisture: OptimumRange
	temperature: OptimumRange
	nitrogen: OptimumRange
	phosphorus: OptimumRange
	potassium: OptimumRange

	@classmethod
	def from_profile(cls, profile: CropProfile) -> "ThresholdBlock":
		return cls(**profile.ranges())


class AdvisoryEntry(BaseModel):
	"""One crop entry as suggested by the advisory service (already field-validated)."""

	name: str | None = None
	reason: str | None = None
	pros: str | None = None
	cons: str | None = None
	growth: str | None = None
	thresholds: dict[str, Any] | None = None
	confidence: ConfidenceEnum | None = None

	def has_narrative(self) -> bool:
		"""True when at least one field could enrich a recommendation."""
		return self.confidence is not None or any((self.reason, self.pros, self.cons, self.growth))


class FinalRecommendation(BaseModel):
	rank: int = Field(ge=1)
	name: str
	score: float
	yield_estimate_t_per_ha: float = Field(ge=0.0)
	thresholds: ThresholdBlock
	reason: str = Field(min_length=1)
	pros: str = Field(min_length=1)
	cons: str = Field(min_length=1)
	growth: str = Field(min_length=1)
	confidence: ConfidenceEnum = ConfidenceEnum.medium
	provenance: ProvenanceEnum


class RecommendationResponse(BaseModel):
	input: InputConditions
	advisory_status: AdvisoryStatusEnum
	algorithm_selection: list[ScoredCandidate] = Field(default_factory=list)
	recommendations: list[FinalRecommendation] = Field(default_factory=list)


class CropProfileResponse(BaseModel):
	name: str
	seasons: list[SeasonEnum]
	priority: int
	base_yield_t_per_ha: float
	thresholds: ThresholdBlock

	@classmethod
	def from_profile(cls, profile: CropProfile) -> "CropProfileResponse":
		return cls(
			name=profile.name,
			seasons=profile.ordered_seasons(),
			priority=profile.priority,
			base_yield_t_per_ha=profile.base_yield,
			thresholds=ThresholdBlock.from_profile(profile),
		)

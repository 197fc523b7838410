"""Pydantic schemas for the market intelligence endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from cropadvisor.models.enums import LevelEnum, MarketTrendEnum, ProvenanceEnum, SeasonEnum
from cropadvisor.schemas.recommend import InputConditions


class MarketRequest(InputConditions):
	"""Conditions plus the crops to compare; unreadable numbers stay ``None`` as for recommendations."""

	crops: list[str] = Field(default_factory=lambda: ["Wheat", "Rice"], max_length=10)
	state: str | None = Field(default=None, max_length=100)
	district: str | None = Field(default=None, max_length=100)

	@field_validator("crops")
	@classmethod
	def _require_named_crops(cls, value: list[str]) -> list[str]:
		names = [name.strip() for name in value if name.strip()]
		if not names:
			raise ValueError("at least one crop name is required")
		return names


class SeasonOutlook(BaseModel):
	season: SeasonEnum
	recommended: bool | None = None
	reason: str


class CropMarketAnalysis(BaseModel):
	crop: str
	market_price_per_quintal: int = Field(ge=0)
	price_source: ProvenanceEnum
	expected_yield_t_per_ha: float = Field(ge=0.0)
	expected_revenue_per_ha: int = Field(ge=0)
	input_cost_per_ha: int = Field(ge=0)
	expected_profit_per_ha: int
	risk_level: LevelEnum
	market_trend: MarketTrendEnum
	demand_factors: list[str]
	supply_factors: list[str]
	pest_disease_risk: list[str]
	season_outlook: list[SeasonOutlook]
	provenance: ProvenanceEnum


class BestCropSuggestion(BaseModel):
	crop: str
	reason: str


class MarketResponse(BaseModel):
	state: str | None = None
	district: str | None = None
	crop_analysis: list[CropMarketAnalysis]
	best_crop_suggestion: BestCropSuggestion
	source: ProvenanceEnum

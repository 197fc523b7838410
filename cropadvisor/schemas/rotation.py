"""Pydantic schemas for the crop rotation endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field

from cropadvisor.models.enums import LevelEnum, ProvenanceEnum, SeasonEnum


class RotationRequest(BaseModel):
	current_crop: str = Field(min_length=1, max_length=100)
	soil_type: str | None = Field(default=None, max_length=50)


class RotationOption(BaseModel):
	next_crop: str
	seasons: list[SeasonEnum]
	benefit: str = Field(min_length=1)
	soil_improvement: LevelEnum
	profit_expectation: LevelEnum
	provenance: ProvenanceEnum


class RotationResponse(BaseModel):
	current_crop: str
	soil_type: str | None = None
	rotation_options: list[RotationOption]
	source: ProvenanceEnum

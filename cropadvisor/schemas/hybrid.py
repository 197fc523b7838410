"""Pydantic schemas for the hybrid fertilizer + pest advisory endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field

from cropadvisor.models.enums import ProvenanceEnum


class SoilNutrients(BaseModel):
	n: float = Field(ge=0.0, allow_inf_nan=False)
	p: float = Field(ge=0.0, allow_inf_nan=False)
	k: float = Field(ge=0.0, allow_inf_nan=False)


class HybridRequest(BaseModel):
	crop: str = Field(min_length=1, max_length=100)
	growth_stage: str = Field(min_length=1, max_length=100)
	soil: SoilNutrients


class HybridResponse(BaseModel):
	crop: str
	growth_stage: str
	fertilizer: str = Field(min_length=1)
	pest_control: str = Field(min_length=1)
	precautions: str = Field(min_length=1)
	source: ProvenanceEnum

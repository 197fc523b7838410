"""Pydantic schemas for the irrigation advice endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field

from cropadvisor.models.enums import IrrigationMethodEnum, LevelEnum, ProvenanceEnum


class IrrigationRequest(BaseModel):
	soil_type: str = Field(min_length=1, max_length=50)
	crop: str = Field(min_length=1, max_length=100)
	moisture: float = Field(ge=0.0, le=100.0, allow_inf_nan=False)


class MoistureThresholds(BaseModel):
	ideal_min: float
	ideal_max: float
	stress_below: float
	excess_above: float


class SoilBehavior(BaseModel):
	soil_class: str
	infiltration_rate: LevelEnum
	water_holding_capacity: LevelEnum
	runoff_risk: LevelEnum


class IrrigationAdvice(BaseModel):
	crop: str
	soil_type: str
	moisture: float
	need_irrigation: bool
	recommended_mm: float = Field(ge=0.0)
	irrigation_mechanism: IrrigationMethodEnum
	frequency_days: int = Field(ge=1)
	duration_minutes: int = Field(ge=0)
	moisture_thresholds: MoistureThresholds
	soil_behavior: SoilBehavior
	reason: str = Field(min_length=1)
	risk: str = Field(min_length=1)
	explanation: list[str] = Field(min_length=1)
	source: ProvenanceEnum

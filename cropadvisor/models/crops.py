"""CropProfile domain model: agronomic reference entry.

Each profile carries {min, opt, max} ranges for the soil and climate factors
scored by ``cropadvisor.services.scoring``:

    CropProfile(
        name="Rice",
        seasons=frozenset({SeasonEnum.kharif}),
        ph=OptimumRange(min=5, opt=6.5, max=7.5),
        rainfall=OptimumRange(min=800, opt=1200, max=2500),
        ...
        priority=2,
        base_yield=5.5,
    )

Profiles are frozen; the knowledge base hands out the same instances to
every request.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cropadvisor.models.enums import SeasonEnum


class OptimumRange(BaseModel):
    """Inclusive tolerance range with an optimum point inside it."""

    model_config = ConfigDict(frozen=True)

    min: float
    opt: float
    max: float

    @model_validator(mode="after")
    def _validate_order(self) -> "OptimumRange":
        if not self.min <= self.opt <= self.max:
            raise ValueError(f"expected min <= opt <= max, got {self.min}/{self.opt}/{self.max}")
        return self

    @property
    def half_range(self) -> float:
        return (self.max - self.min) / 2

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


class CropProfile(BaseModel):
    """Agronomic reference: seasons, factor optima, priority and baseline yield."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    seasons: frozenset[SeasonEnum]
    ph: OptimumRange
    rainfall: OptimumRange
    moisture: OptimumRange
    temperature: OptimumRange
    nitrogen: OptimumRange
    phosphorus: OptimumRange
    potassium: OptimumRange
    priority: int = 1
    base_yield: float = Field(ge=0.0)

    def ordered_seasons(self) -> list[SeasonEnum]:
        """Seasons in enum declaration order (stable for output)."""
        return sorted(self.seasons, key=list(SeasonEnum).index)

    def ranges(self) -> dict[str, OptimumRange]:
        """Factor name → range, in scoring order."""
        return {
            "ph": self.ph,
            "rainfall": self.rainfall,
            "moisture": self.moisture,
            "temperature": self.temperature,
            "nitrogen": self.nitrogen,
            "phosphorus": self.phosphorus,
            "potassium": self.potassium,
        }

    def __repr__(self) -> str:
        return (
            f"<CropProfile name={self.name!r} "
            f"seasons={sorted(s.value for s in self.seasons)} priority={self.priority}>"
        )

"""Domain model registry.

Application code can import every domain type from here::

    from cropadvisor.models import CropProfile, OptimumRange, SeasonEnum
"""

# ── Crop reference ──────────────────────────────────────────────────────────
from cropadvisor.models.crops import CropProfile, OptimumRange

# ── Enums ───────────────────────────────────────────────────────────────────
from cropadvisor.models.enums import (
    AdvisoryStatusEnum,
    ConfidenceEnum,
    ProvenanceEnum,
    RequestStageEnum,
    SeasonEnum,
)

__all__ = [
    "AdvisoryStatusEnum",
    "ConfidenceEnum",
    "CropProfile",
    "OptimumRange",
    "ProvenanceEnum",
    "RequestStageEnum",
    "SeasonEnum",
]

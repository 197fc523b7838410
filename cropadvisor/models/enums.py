"""Enumerations shared by the knowledge base, the engine and the API schemas.

These are separate from the Pydantic StrEnum in cropadvisor/config.py;
config enums validate settings, domain enums type engine values.
"""

from enum import StrEnum

# ── Agronomic enums ─────────────────────────────────────────────────────────


class SeasonEnum(StrEnum):
    """Cropping season of the Indian calendar (plus multi-year crops)."""

    kharif = "Kharif"
    rabi = "Rabi"
    summer = "Summer"
    annual = "Annual"
    perennial = "Perennial"

    @classmethod
    def coerce(cls, value: object) -> "SeasonEnum":
        """Case-insensitive match; anything unrecognized becomes Kharif."""
        if isinstance(value, cls):
            return value
        token = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == token:
                return member
        return cls.kharif


# ── Recommendation enums ────────────────────────────────────────────────────


class ConfidenceEnum(StrEnum):
    """Narrative confidence label attached to a recommendation."""

    low = "low"
    medium = "medium"
    high = "high"


class ProvenanceEnum(StrEnum):
    """Where the narrative fields of a recommendation came from."""

    advisory = "advisory"
    fallback = "fallback"


class AdvisoryStatusEnum(StrEnum):
    """Outcome of the advisory round-trip for one request."""

    ok = "ok"
    failed = "failed"
    unparseable = "unparseable"
    disabled = "disabled"


class RequestStageEnum(StrEnum):
    """Recommendation request lifecycle, in order."""

    received = "received"
    validated = "validated"
    scored = "scored"
    advisory_requested = "advisory_requested"
    advisory_ok = "advisory_ok"
    advisory_failed = "advisory_failed"
    merged = "merged"
    responded = "responded"


# ── Field advisory enums ────────────────────────────────────────────────────


class IrrigationMethodEnum(StrEnum):
    """Water delivery method suggested by the irrigation planner."""

    drip = "drip"
    micro_sprinkler = "micro-sprinkler"
    sprinkler = "sprinkler"
    furrow = "furrow"
    flood = "flood"


class LevelEnum(StrEnum):
    """Coarse qualitative rating used by rotation and market advice."""

    high = "High"
    medium = "Medium"
    low = "Low"


class MarketTrendEnum(StrEnum):
    rising = "Rising"
    stable = "Stable"
    falling = "Falling"

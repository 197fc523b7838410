"""Merge local scores with untrusted advisory narrative into final recommendations."""

from __future__ import annotations

from collections.abc import Sequence

from cropadvisor.models.crops import CropProfile
from cropadvisor.models.enums import ConfidenceEnum, ProvenanceEnum
from cropadvisor.schemas.recommend import (
	AdvisoryEntry,
	FinalRecommendation,
	InputConditions,
	ScoredCandidate,
	ThresholdBlock,
)
from cropadvisor.services.knowledge_base import KnowledgeBase, get_knowledge_base
from cropadvisor.services.yield_estimator import YieldCalibration, estimate_yield

NARRATIVE_FIELDS = ("reason", "pros", "cons", "growth")
FALLBACK_CONFIDENCE = ConfidenceEnum.medium


def fallback_narrative(profile: CropProfile, candidate: ScoredCandidate, conditions: InputConditions) -> dict[str, str]:
	season = conditions.season.value
	return {
		"reason": (
			f"{profile.name} scored {candidate.score:.1f} on the local suitability model "
			f"for the {season} season."
		),
		"pros": "Measured conditions fall close to the crop's optimum ranges; recommendation is computed locally",
		"cons": "Detailed advisory guidance is unavailable; confirm with a soil test and local extension advice",
		"growth": (
			f"Follow the standard {season} package of practices for {profile.name}: keep pH near "
			f"{profile.ph.opt:g}, soil moisture near {profile.moisture.opt:g}% and temperature near "
			f"{profile.temperature.opt:g}°C."
		),
	}


def _canonical_key(name: str, knowledge_base: KnowledgeBase) -> str:
	profile = knowledge_base.profile(name)
	return (profile.name if profile is not None else name.strip()).casefold()


def _pair_entries(
	candidates: Sequence[ScoredCandidate],
	entries: Sequence[AdvisoryEntry],
	knowledge_base: KnowledgeBase,
) -> list[AdvisoryEntry | None]:
	# Entry names resolve through the alias table, so "Paddy" claims Rice.
	by_name: dict[str, AdvisoryEntry] = {}
	for entry in entries:
		if entry.name:
			by_name.setdefault(_canonical_key(entry.name, knowledge_base), entry)

	claimed = {id(by_name[c.name.casefold()]) for c in candidates if c.name.casefold() in by_name}

	paired: list[AdvisoryEntry | None] = []
	for index, candidate in enumerate(candidates):
		entry = by_name.get(candidate.name.casefold())
		if entry is None and index < len(entries) and id(entries[index]) not in claimed:
			entry = entries[index]
		paired.append(entry)
	return paired


def _build(
	rank: int,
	candidate: ScoredCandidate,
	entry: AdvisoryEntry | None,
	conditions: InputConditions,
	knowledge_base: KnowledgeBase,
	calibration: YieldCalibration | None,
) -> FinalRecommendation:
	profile = knowledge_base.profile(candidate.name)
	if profile is None:
		raise LookupError(f"shortlisted crop {candidate.name!r} missing from knowledge base")

	narrative = fallback_narrative(profile, candidate, conditions)
	from_advisory = False
	if entry is not None:
		for field in NARRATIVE_FIELDS:
			value = getattr(entry, field)
			if isinstance(value, str) and value.strip():
				narrative[field] = value.strip()
				from_advisory = True

	confidence = FALLBACK_CONFIDENCE
	if entry is not None and entry.confidence is not None:
		confidence = entry.confidence
		from_advisory = True

	return FinalRecommendation(
		rank=rank,
		name=profile.name,
		score=candidate.score,
		yield_estimate_t_per_ha=estimate_yield(
			profile.name, conditions, knowledge_base=knowledge_base, calibration=calibration
		),
		thresholds=ThresholdBlock.from_profile(profile),
		confidence=confidence,
		provenance=ProvenanceEnum.advisory if from_advisory else ProvenanceEnum.fallback,
		**narrative,
	)


def reconcile(
	candidates: Sequence[ScoredCandidate],
	entries: Sequence[AdvisoryEntry],
	conditions: InputConditions,
	*,
	count: int = 3,
	knowledge_base: KnowledgeBase | None = None,
	calibration: YieldCalibration | None = None,
) -> list[FinalRecommendation]:
	"""Top ``count`` candidates with local numbers and advisory narrative where usable.

	Entries pair by case-insensitive name (aliases resolved) first, then by rank position among
	entries no top candidate claimed by name. Crop names always come from
	the shortlist, never from the advisory text.
	"""
	if knowledge_base is None:
		knowledge_base = get_knowledge_base()
	top = list(candidates[:count])
	paired = _pair_entries(top, entries, knowledge_base)
	return [
		_build(index + 1, candidate, entry, conditions, knowledge_base, calibration)
		for index, (candidate, entry) in enumerate(zip(top, paired))
	]


def synthesize_fallback(
	candidates: Sequence[ScoredCandidate],
	conditions: InputConditions,
	*,
	count: int = 3,
	knowledge_base: KnowledgeBase | None = None,
	calibration: YieldCalibration | None = None,
) -> list[FinalRecommendation]:
	"""Complete answer from local computation only (no advisory narrative)."""
	if knowledge_base is None:
		knowledge_base = get_knowledge_base()
	return [
		_build(index + 1, candidate, None, conditions, knowledge_base, calibration)
		for index, candidate in enumerate(candidates[:count])
	]

"""Multi-factor crop suitability scoring.

A crop's suitability score is the sum of a season term, one optimum-range
reward per measured factor (pH, rainfall, moisture, temperature, N, P, K) and
the crop's static priority weight. Scores are unbounded and only meaningful
relative to each other for the same input.
"""

from __future__ import annotations

from dataclasses import dataclass

from cropadvisor.config import Settings, get_settings
from cropadvisor.models.crops import CropProfile, OptimumRange
from cropadvisor.schemas.recommend import InputConditions, ScoredCandidate
from cropadvisor.services.knowledge_base import KnowledgeBase, get_knowledge_base

SCORED_FACTORS = ("ph", "rainfall", "moisture", "temperature", "nitrogen", "phosphorus", "potassium")


@dataclass(frozen=True, slots=True)
class ScoringCalibration:
	season_match_bonus: float = 10.0
	season_mismatch_penalty: float = -12.0
	out_of_range_penalty: float = -5.0
	optimum_reward: float = 5.0

	@classmethod
	def from_settings(cls, settings: Settings | None = None) -> "ScoringCalibration":
		settings = settings or get_settings()
		return cls(
			season_match_bonus=settings.season_match_bonus,
			season_mismatch_penalty=settings.season_mismatch_penalty,
			out_of_range_penalty=settings.out_of_range_penalty,
			optimum_reward=settings.optimum_reward,
		)


def score_by_optimum(
	value: float | None,
	bounds: OptimumRange,
	calibration: ScoringCalibration | None = None,
) -> float:
	"""Reward peaking at ``bounds.opt``, zero at the edges, fixed penalty outside."""
	calibration = calibration or ScoringCalibration()
	if value is None:
		return 0.0
	if not bounds.contains(value):
		return calibration.out_of_range_penalty

	half_range = bounds.half_range or 1.0
	reward = calibration.optimum_reward * (1.0 - abs(value - bounds.opt) / half_range)
	return max(0.0, min(calibration.optimum_reward, reward))


def score_crop(
	profile: CropProfile,
	conditions: InputConditions,
	calibration: ScoringCalibration | None = None,
) -> float:
	calibration = calibration or ScoringCalibration.from_settings()

	if conditions.season in profile.seasons:
		total = calibration.season_match_bonus
	else:
		total = calibration.season_mismatch_penalty

	ranges = profile.ranges()
	for factor in SCORED_FACTORS:
		total += score_by_optimum(getattr(conditions, factor), ranges[factor], calibration)

	return total + profile.priority


def shortlist(
	conditions: InputConditions,
	limit: int = 7,
	*,
	knowledge_base: KnowledgeBase | None = None,
	calibration: ScoringCalibration | None = None,
) -> list[ScoredCandidate]:
	"""Score every profile and keep the ``limit`` best.

	The sort is stable, so equal scores keep knowledge-base order.
	"""
	if limit < 1:
		raise ValueError("shortlist limit must be at least 1")
	if knowledge_base is None:
		knowledge_base = get_knowledge_base()
	calibration = calibration or ScoringCalibration.from_settings()

	scored = [
		ScoredCandidate(
			name=profile.name,
			score=score_crop(profile, conditions, calibration),
			seasons=profile.ordered_seasons(),
		)
		for profile in knowledge_base.profiles()
	]
	scored.sort(key=lambda item: item.score, reverse=True)
	return scored[:limit]

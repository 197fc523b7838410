"""Crop recommendation engine: scoring, advisory round-trip, merge or fallback."""

from __future__ import annotations

from typing import Any

import structlog

from cropadvisor.config import Settings, get_settings
from cropadvisor.models.enums import AdvisoryStatusEnum, RequestStageEnum
from cropadvisor.schemas.recommend import (
	AdvisoryEntry,
	FinalRecommendation,
	InputConditions,
	RecommendationResponse,
	ScoredCandidate,
)
from cropadvisor.services.advisory_client import AdvisoryClient, AdvisoryError, AdvisoryNotConfiguredError
from cropadvisor.services.knowledge_base import KnowledgeBase, get_knowledge_base
from cropadvisor.services.prompts import build_recommendation_prompt
from cropadvisor.services.reconciler import reconcile, synthesize_fallback
from cropadvisor.services.response_sanitizer import advisory_entries, extract
from cropadvisor.services.scoring import ScoringCalibration, shortlist
from cropadvisor.services.yield_estimator import YieldCalibration

_logger = structlog.get_logger("cropadvisor.recommendation")


class RecommendationService:
	def __init__(
		self,
		advisory_client: AdvisoryClient | None = None,
		settings: Settings | None = None,
		knowledge_base: KnowledgeBase | None = None,
	):
		self.settings = settings or get_settings()
		self.advisory_client = advisory_client or AdvisoryClient(self.settings)
		self.knowledge_base = knowledge_base if knowledge_base is not None else get_knowledge_base()
		self.scoring_calibration = ScoringCalibration.from_settings(self.settings)
		self.yield_calibration = YieldCalibration.from_settings(self.settings)

	async def recommend(self, conditions: InputConditions) -> RecommendationResponse:
		"""Run one request from validated conditions to a complete response.

		Field validation happens at the edge, so ``received`` and ``validated``
		are logged back to back here.
		"""
		log = _logger.bind(season=conditions.season.value, measured=sorted(conditions.measured()))
		log.info("recommendation_stage", stage=RequestStageEnum.received.value)
		log.info("recommendation_stage", stage=RequestStageEnum.validated.value)

		candidates = shortlist(
			conditions,
			self.settings.shortlist_limit,
			knowledge_base=self.knowledge_base,
			calibration=self.scoring_calibration,
		)
		log.info(
			"recommendation_stage",
			stage=RequestStageEnum.scored.value,
			top=[item.name for item in candidates[: self.settings.recommendation_count]],
		)

		# From here on the request always completes.
		status, entries = await self._request_advisory(candidates, conditions, log)
		recommendations = self._merge(candidates, entries, conditions, log)
		log.info("recommendation_stage", stage=RequestStageEnum.merged.value, advisory_status=status.value)

		response = RecommendationResponse(
			input=conditions,
			advisory_status=status,
			algorithm_selection=candidates,
			recommendations=recommendations,
		)
		log.info(
			"recommendation_stage",
			stage=RequestStageEnum.responded.value,
			provenance=[item.provenance.value for item in recommendations],
		)
		return response

	async def _request_advisory(
		self,
		candidates: list[ScoredCandidate],
		conditions: InputConditions,
		log: Any,
	) -> tuple[AdvisoryStatusEnum, list[AdvisoryEntry]]:
		prompt = build_recommendation_prompt(
			candidates,
			conditions,
			top_k=self.settings.prompt_top_k,
			count=self.settings.recommendation_count,
		)
		log.info("recommendation_stage", stage=RequestStageEnum.advisory_requested.value)
		try:
			raw_text = await self.advisory_client.complete(prompt)
		except AdvisoryNotConfiguredError:
			log.info("recommendation_stage", stage=RequestStageEnum.advisory_failed.value, kind="not_configured")
			return AdvisoryStatusEnum.disabled, []
		except AdvisoryError as exc:
			log.warning(
				"recommendation_stage",
				stage=RequestStageEnum.advisory_failed.value,
				kind=exc.kind,
				error=str(exc),
			)
			return AdvisoryStatusEnum.failed, []
		except Exception as exc:
			log.exception(
				"recommendation_stage",
				stage=RequestStageEnum.advisory_failed.value,
				kind="unexpected",
				error=str(exc),
			)
			return AdvisoryStatusEnum.failed, []

		parsed = extract(raw_text)
		entries = advisory_entries(parsed) if parsed is not None else []
		if not any(entry.has_narrative() for entry in entries):
			log.warning("recommendation_stage", stage=RequestStageEnum.advisory_failed.value, kind="unparseable")
			return AdvisoryStatusEnum.unparseable, []

		log.info("recommendation_stage", stage=RequestStageEnum.advisory_ok.value, entries=len(entries))
		return AdvisoryStatusEnum.ok, entries

	def _merge(
		self,
		candidates: list[ScoredCandidate],
		entries: list[AdvisoryEntry],
		conditions: InputConditions,
		log: Any,
	) -> list[FinalRecommendation]:
		count = self.settings.recommendation_count
		if entries:
			try:
				return reconcile(
					candidates,
					entries,
					conditions,
					count=count,
					knowledge_base=self.knowledge_base,
					calibration=self.yield_calibration,
				)
			except Exception as exc:
				log.exception("merge_failed", error=str(exc))
		return synthesize_fallback(
			candidates,
			conditions,
			count=count,
			knowledge_base=self.knowledge_base,
			calibration=self.yield_calibration,
		)

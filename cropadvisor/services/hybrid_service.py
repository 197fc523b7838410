"""Hybrid (organic-first) fertilizer and pest control advice for one crop stage."""

from __future__ import annotations

import structlog

from cropadvisor.config import Settings, get_settings
from cropadvisor.models.enums import ProvenanceEnum
from cropadvisor.schemas.hybrid import HybridRequest, HybridResponse
from cropadvisor.services.advisory_client import AdvisoryClient, fetch_structured
from cropadvisor.services.knowledge_base import KnowledgeBase, get_knowledge_base
from cropadvisor.services.prompts import build_hybrid_prompt

_logger = structlog.get_logger("cropadvisor.hybrid")

FALLBACK_ADVICE: dict[str, str] = {
	"fertilizer": "Apply balanced NPK as per soil test and crop growth stage.",
	"pest_control": (
		"Use neem oil or bio-pesticides first. Apply chemical pesticide only if pest level "
		"exceeds threshold."
	),
	"precautions": "Avoid spraying during rain, strong wind, or peak sunlight hours.",
}


class HybridAdvisoryService:
	def __init__(
		self,
		advisory_client: AdvisoryClient | None = None,
		settings: Settings | None = None,
		knowledge_base: KnowledgeBase | None = None,
	):
		self.settings = settings or get_settings()
		self.advisory_client = advisory_client or AdvisoryClient(self.settings)
		self.knowledge_base = knowledge_base if knowledge_base is not None else get_knowledge_base()

	async def recommend(self, request: HybridRequest) -> HybridResponse:
		profile = self.knowledge_base.profile(request.crop)
		crop = profile.name if profile is not None else request.crop.strip()
		soil = request.soil.model_dump()

		advice = dict(FALLBACK_ADVICE)
		source = ProvenanceEnum.fallback

		parsed = await fetch_structured(
			self.advisory_client,
			build_hybrid_prompt(crop, request.growth_stage, soil),
			feature="hybrid",
		)

		if isinstance(parsed, dict):
			for field in FALLBACK_ADVICE:
				value = parsed.get(field)
				if isinstance(value, str) and value.strip():
					advice[field] = value.strip()
					source = ProvenanceEnum.advisory
		elif parsed is not None:
			_logger.warning("hybrid_advisory_unexpected_shape", crop=crop, shape=type(parsed).__name__)

		return HybridResponse(
			crop=crop,
			growth_stage=request.growth_stage,
			source=source,
			**advice,
		)

"""Crop recommendation & knowledge-base routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from cropadvisor.schemas.recommend import CropProfileResponse, InputConditions, RecommendationResponse
from cropadvisor.services.knowledge_base import get_knowledge_base
from cropadvisor.services.recommendation_service import RecommendationService

router = APIRouter(prefix="/crop", tags=["crop"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="recommendation failure")


@router.post("/recommend", response_model=RecommendationResponse)
async def recommend_crops(payload: InputConditions) -> RecommendationResponse:
	service = RecommendationService()
	try:
		return await service.recommend(payload)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/profiles", response_model=list[CropProfileResponse])
async def list_profiles() -> list[CropProfileResponse]:
	return [CropProfileResponse.from_profile(profile) for profile in get_knowledge_base().profiles()]


@router.get("/profiles/{name}", response_model=CropProfileResponse)
async def get_profile(name: str) -> CropProfileResponse:
	try:
		return CropProfileResponse.from_profile(get_knowledge_base().require(name))
	except Exception as exc:
		raise _map_error(exc) from exc

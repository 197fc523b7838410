"""Hybrid fertilizer + pest advisory route."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from cropadvisor.schemas.hybrid import HybridRequest, HybridResponse
from cropadvisor.services.hybrid_service import HybridAdvisoryService

router = APIRouter(prefix="/hybrid", tags=["hybrid"])


@router.post("/recommend", response_model=HybridResponse)
async def hybrid_recommend(payload: HybridRequest) -> HybridResponse:
	service = HybridAdvisoryService()
	try:
		return await service.recommend(payload)
	except ValueError as exc:
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

"""Market intelligence and crop rotation routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from cropadvisor.schemas.market import MarketRequest, MarketResponse
from cropadvisor.schemas.rotation import RotationRequest, RotationResponse
from cropadvisor.services.market_service import MarketIntelligenceService
from cropadvisor.services.rotation_service import CropRotationService

router = APIRouter(prefix="/market", tags=["market"])


@router.post("/intelligence", response_model=MarketResponse)
async def market_intelligence(payload: MarketRequest) -> MarketResponse:
	service = MarketIntelligenceService()
	try:
		return await service.analyse(payload)
	except ValueError as exc:
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/rotation", response_model=RotationResponse)
async def crop_rotation(payload: RotationRequest) -> RotationResponse:
	service = CropRotationService()
	try:
		return await service.plan(payload)
	except ValueError as exc:
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

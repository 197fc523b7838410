"""Irrigation advice route."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from cropadvisor.schemas.irrigation import IrrigationAdvice, IrrigationRequest
from cropadvisor.services.irrigation_service import IrrigationAdvisoryService

router = APIRouter(prefix="/irrigation", tags=["irrigation"])


@router.post("/advice", response_model=IrrigationAdvice)
async def irrigation_advice(payload: IrrigationRequest) -> IrrigationAdvice:
	service = IrrigationAdvisoryService()
	try:
		return await service.advise(payload)
	except ValueError as exc:
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

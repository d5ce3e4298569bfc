from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status

from parish_api.schemas.liturgy import LiturgyOut
from parish_api.services.liturgy import LiturgyService, get_liturgy_service

router = APIRouter(prefix="/liturgy", tags=["liturgy"])


@router.get("/today", response_model=LiturgyOut)
async def get_today(service: LiturgyService = Depends(get_liturgy_service)) -> LiturgyOut:
    return await service.get_today()


@router.get("/{day}", response_model=LiturgyOut)
async def get_by_date(day: str, service: LiturgyService = Depends(get_liturgy_service)) -> LiturgyOut:
    try:
        parsed = date.fromisoformat(day)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid date format. Use YYYY-MM-DD"
        ) from exc
    if parsed.isoformat() != day:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid date format. Use YYYY-MM-DD")
    return await service.get_by_date(parsed)

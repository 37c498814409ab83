# backend/atc_booking/routes/v1/positions.py
"""Position catalog routes - API v1 (/api/v1/positions)."""

import asyncio
from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies import get_position_catalog_service
from ...core.exceptions import DomainException, ResourceNotFoundException
from ...schemas.position import PositionResponse
from ...services.position_catalog import PositionCatalogService
from .errors import handle_domain_exception

router = APIRouter(tags=["positions-v1"])


@router.get("", response_model=List[PositionResponse])
async def list_positions(
    service: PositionCatalogService = Depends(get_position_catalog_service),
) -> List[PositionResponse]:
    positions = await asyncio.to_thread(service.list_positions)
    return [PositionResponse.model_validate(p) for p in positions]


@router.get("/{code}", response_model=PositionResponse)
async def get_position(
    code: str,
    service: PositionCatalogService = Depends(get_position_catalog_service),
) -> PositionResponse:
    try:
        position = await asyncio.to_thread(service.get_by_code, code)
        if position is None:
            raise ResourceNotFoundException(code)
    except DomainException as e:
        handle_domain_exception(e)
    return PositionResponse.model_validate(position)

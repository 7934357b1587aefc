from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
import logging

from features.common.exceptions.forecast_exceptions import SourceUnavailableError, UnknownSpotError
from features.common.models.geo_types import SurfSpot
from features.conditions.models.condition_types import NormalizedConditions
from features.conditions.services.conditions_service import ConditionsService
from features.spots.services.spot_service import SpotService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/spots",
    tags=["Spots"]
)

def get_spot_service(request: Request) -> SpotService:
    """Dependency to get the SpotService instance."""
    return request.app.state.spot_service

def get_conditions_service(request: Request) -> ConditionsService:
    """Dependency to get the ConditionsService instance."""
    return request.app.state.conditions_service

@router.get(
    "",
    response_model=List[SurfSpot],
    summary="List surf spots",
    description="Returns every surf spot users can subscribe to"
)
async def list_spots(
    service: SpotService = Depends(get_spot_service)
):
    return service.get_spots()

@router.get(
    "/{spot_id}/conditions",
    response_model=NormalizedConditions,
    summary="Get normalized conditions for a spot",
    description="Merges marine, weather, buoy and tide data for the current local hour"
)
async def get_spot_conditions(
    spot_id: str,
    spots: SpotService = Depends(get_spot_service),
    service: ConditionsService = Depends(get_conditions_service)
):
    """Get current normalized conditions for a spot."""
    try:
        spot = spots.get_spot(spot_id)
        return await service.get_spot_conditions(spot)
    except UnknownSpotError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Error building conditions for {spot_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

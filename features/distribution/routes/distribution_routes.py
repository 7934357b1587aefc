from datetime import date as date_type
from typing import Dict, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
import logging

from features.distribution.models.distribution_types import Cohort, DistributionLock, RunResult
from features.distribution.services.distribution_coordinator import DistributionCoordinator

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/distribution",
    tags=["Distribution"]
)

class TriggerRequest(BaseModel):
    simulate_date: Optional[date_type] = None

def get_coordinators(request: Request) -> Dict[Cohort, DistributionCoordinator]:
    """Dependency to get the per-cohort coordinators."""
    return request.app.state.coordinators

def _coordinator(cohort: Cohort, coordinators: Dict[Cohort, DistributionCoordinator]) -> DistributionCoordinator:
    coordinator = coordinators.get(cohort)
    if not coordinator:
        raise HTTPException(status_code=404, detail=f"No coordinator for cohort {cohort.value}")
    return coordinator

@router.post(
    "/{cohort}/trigger",
    response_model=RunResult,
    summary="Run a cohort's daily distribution now",
    description="Idempotent per business date; a second call for the same date is a no-op"
)
async def trigger_distribution(
    cohort: Cohort,
    body: Optional[TriggerRequest] = None,
    coordinators: Dict[Cohort, DistributionCoordinator] = Depends(get_coordinators)
):
    coordinator = _coordinator(cohort, coordinators)
    run_date = body.simulate_date.isoformat() if body and body.simulate_date else None
    return await coordinator.run(run_date)

@router.get(
    "/{cohort}/lock",
    response_model=DistributionLock,
    summary="Inspect a distribution lock",
    description="Returns the lock document for a cohort and business date (defaults to today)"
)
async def get_lock(
    cohort: Cohort,
    date: Optional[date_type] = None,
    coordinators: Dict[Cohort, DistributionCoordinator] = Depends(get_coordinators)
):
    coordinator = _coordinator(cohort, coordinators)
    key_date = date.isoformat() if date else coordinator.business_date()
    lock = await coordinator.lock_store.get(cohort, key_date)
    if not lock:
        raise HTTPException(status_code=404, detail=f"No {cohort.value} lock for {key_date}")
    return lock

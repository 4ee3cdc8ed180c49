from fastapi import APIRouter, Depends, HTTPException, Request
from typing import List, Optional
import logging

from pump_control.models.pump_status import PumpMode
from pump_control.schemas.pump import PumpStatusView, PumpControlRequest, PumpControlResult
from pump_control.services.status_store import StoreError
from pump_control.services.sync_service import SyncService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/pumps", tags=["pumps"])

def get_sync_service(request: Request) -> SyncService:
    return request.app.state.sync_service

@router.get("", response_model=List[PumpStatusView])
async def list_pumps(service: SyncService = Depends(get_sync_service)):
    """Get all pump statuses ordered by area"""
    try:
        return await service.list_statuses()
    except StoreError as e:
        logger.error(f"Error fetching pump statuses: {e}")
        raise HTTPException(status_code=500, detail="Database error")

@router.get("/{area_name}", response_model=PumpStatusView)
async def get_pump(area_name: str, service: SyncService = Depends(get_sync_service)):
    """Get pump status for one area"""
    try:
        pump = await service.get_status(area_name)
    except StoreError as e:
        logger.error(f"Error fetching pump status for {area_name}: {e}")
        raise HTTPException(status_code=500, detail="Database error")

    if not pump:
        raise HTTPException(status_code=404, detail="No pump found for this area")
    return pump

@router.post("/{area_name}", response_model=PumpControlResult)
async def control_pump(
    area_name: str,
    payload: Optional[PumpControlRequest] = None,
    service: SyncService = Depends(get_sync_service)
):
    """Operator command: set status and mode for an area's pump"""
    if payload is None or payload.status is None or not payload.mode:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        mode = PumpMode(payload.mode)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid mode: {payload.mode}")

    ok = await service.apply_operator_command(area_name, payload.status, mode.value)
    if not ok:
        raise HTTPException(status_code=500, detail="Failed to update pump status")

    return PumpControlResult(success=True, message="Pump status updated successfully")

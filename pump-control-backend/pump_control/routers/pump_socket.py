"""
WebSocket endpoint for area nodes and live dashboards.

A client connects to ``/ws?area=<name>`` and becomes the area's registered
session until it disconnects or a newer connection for the same area takes
its place.
"""
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from typing import Optional, Union
import logging

from pump_control.schemas.messages import (
    PumpControlMessage,
    SoilMoistureUpdate,
    RequestOptimalMoisture,
    OptimalMoistureResponse,
    decode_inbound,
    to_wire,
)
from pump_control.services import control_engine
from pump_control.services.status_store import StoreError
from pump_control.services.sync_service import SyncService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["pump-socket"])

async def _send_optimal_moisture(websocket: WebSocket, service: SyncService, area_name: str):
    try:
        crop = await service.get_crop_settings(area_name)
    except StoreError as e:
        logger.error(f"Error sending optimal moisture settings for {area_name}: {e}")
        await websocket.send_json(to_wire(OptimalMoistureResponse(status="error", message="Database error")))
        return

    if not crop:
        response = OptimalMoistureResponse(status="error", message="No crop settings found")
    else:
        response = OptimalMoistureResponse(
            status="success",
            crop_name=crop.crop_name,
            optimal_moisture=crop.optimal_moisture,
            target_moisture=control_engine.target_moisture(crop.optimal_moisture),
        )
    await websocket.send_json(to_wire(response))

async def handle_message(websocket: WebSocket, service: SyncService, session_area: str, raw: Union[str, bytes]):
    """Decode one inbound text or binary frame and dispatch it"""
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        message = decode_inbound(raw)
    except UnicodeDecodeError:
        logger.warning(f"Ignoring binary frame from area {session_area}: not UTF-8")
        return
    except ValidationError as e:
        logger.warning(f"Ignoring malformed message from area {session_area}: {e.errors(include_url=False)}")
        return

    area_name = message.area_name or session_area
    logger.debug(f"Received {message.type} for area {area_name}")

    if isinstance(message, PumpControlMessage):
        await service.apply_operator_command(area_name, message.status, message.mode.value)
    elif isinstance(message, SoilMoistureUpdate):
        outcome = await service.apply_sensor_reading(area_name, message.soil_moisture)
        logger.debug(f"Soil moisture {message.soil_moisture} for area {area_name}: {outcome.value}")
    elif isinstance(message, RequestOptimalMoisture):
        await _send_optimal_moisture(websocket, service, area_name)

@router.websocket("/ws")
async def pump_socket(websocket: WebSocket, area: Optional[str] = Query(None)):
    if not area:
        await websocket.close(code=1008, reason="Missing area")
        return

    await websocket.accept()
    service: SyncService = websocket.app.state.sync_service
    registry = service.registry

    registry.register(area, websocket)
    logger.info(f"WebSocket client connected for area: {area}")

    try:
        await service.send_current(area, websocket)

        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes") or b""
            await handle_message(websocket, service, area, raw)
    except WebSocketDisconnect:
        pass
    finally:
        registry.unregister(area, websocket)
        logger.info(f"WebSocket client disconnected for area: {area}")

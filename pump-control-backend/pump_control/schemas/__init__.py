from .pump import PumpStatusView, CropSettingsView, PumpControlRequest, PumpControlResult
from .messages import (
    PumpControlMessage,
    SoilMoistureUpdate,
    RequestOptimalMoisture,
    PumpStatusUpdate,
    OptimalMoistureResponse,
    decode_inbound,
    status_update,
    to_wire,
)

__all__ = [
    "PumpStatusView",
    "CropSettingsView",
    "PumpControlRequest",
    "PumpControlResult",
    "PumpControlMessage",
    "SoilMoistureUpdate",
    "RequestOptimalMoisture",
    "PumpStatusUpdate",
    "OptimalMoistureResponse",
    "decode_inbound",
    "status_update",
    "to_wire"
]

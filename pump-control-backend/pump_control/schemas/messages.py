"""
WebSocket message envelopes exchanged with area nodes.

Every frame is a JSON object with a ``type`` discriminator. Inbound frames are
decoded into one of the ``InboundMessage`` variants before reaching the
synchronization service; outbound frames are built from the response models
and serialized with ``to_wire``.
"""
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from pump_control.models.pump_status import PumpMode
from pump_control.schemas.pump import PumpStatusView


class PumpControlMessage(BaseModel):
    type: Literal["pump_control"]
    area_name: Optional[str] = None
    pump_id: Optional[str] = None
    status: bool
    mode: PumpMode


class SoilMoistureUpdate(BaseModel):
    type: Literal["soil_moisture_update"]
    area_name: Optional[str] = None
    soil_moisture: float


class RequestOptimalMoisture(BaseModel):
    type: Literal["request_optimal_moisture"]
    area_name: Optional[str] = None


InboundMessage = Annotated[
    Union[PumpControlMessage, SoilMoistureUpdate, RequestOptimalMoisture],
    Field(discriminator="type"),
]

inbound_adapter: TypeAdapter = TypeAdapter(InboundMessage)


def decode_inbound(raw: str):
    """Decode a raw text frame; raises pydantic.ValidationError when malformed"""
    return inbound_adapter.validate_json(raw)


class PumpStatusUpdate(PumpStatusView):
    type: Literal["pump_status_update"] = "pump_status_update"


class OptimalMoistureResponse(BaseModel):
    type: Literal["optimal_moisture_response"] = "optimal_moisture_response"
    status: Literal["success", "error"]
    crop_name: Optional[str] = None
    optimal_moisture: Optional[float] = None
    target_moisture: Optional[float] = None
    message: Optional[str] = None


def status_update(view: PumpStatusView) -> PumpStatusUpdate:
    return PumpStatusUpdate(**view.model_dump())


def to_wire(message: BaseModel) -> Dict[str, Any]:
    return message.model_dump(mode="json", exclude_none=True)

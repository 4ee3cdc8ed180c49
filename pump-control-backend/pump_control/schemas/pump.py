from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from pump_control.models.pump_status import PumpMode

class PumpStatusView(BaseModel):
    id: Optional[int] = None
    area_name: str
    pump_id: str
    status: bool = False
    mode: PumpMode = PumpMode.AUTO
    last_updated: Optional[datetime] = None

    class Config:
        from_attributes = True

class CropSettingsView(BaseModel):
    area_name: str
    crop_name: str
    optimal_moisture: float

    class Config:
        from_attributes = True

class PumpControlRequest(BaseModel):
    # both optional so a missing field maps to 400 rather than 422
    status: Optional[bool] = None
    mode: Optional[str] = None

class PumpControlResult(BaseModel):
    success: bool
    message: str

from pump_control.database import Base
from .pump_status import PumpStatus, PumpMode, pump_id_for
from .crop_settings import CropSettings

__all__ = [
    "Base",
    "PumpStatus",
    "PumpMode",
    "pump_id_for",
    "CropSettings"
]

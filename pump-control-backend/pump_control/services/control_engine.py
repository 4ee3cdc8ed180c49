"""
Automatic pump control from soil moisture readings
"""
from typing import Optional

from pump_control.models.pump_status import PumpMode

# percentage points added on top of the crop's optimal moisture
MOISTURE_BUFFER = 10

def target_moisture(optimal_moisture: float) -> float:
    """Moisture level the pump waters up to for a crop"""
    return optimal_moisture + MOISTURE_BUFFER

def decide(current_mode: str, current_status: bool, target: float, observed: float) -> Optional[bool]:
    """
    Compute the next pump state for a moisture reading.

    Returns the desired status, or None when nothing should change: either
    the area is not in auto mode (operator owns the pump) or the reading
    leads to the state the pump is already in.
    """
    if current_mode != PumpMode.AUTO:
        return None

    desired = observed < target
    if desired == bool(current_status):
        return None
    return desired

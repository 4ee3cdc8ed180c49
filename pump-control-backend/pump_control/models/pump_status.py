import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from pump_control.database import Base

class PumpMode(str, enum.Enum):
    AUTO = "auto"
    MANUAL = "manual"

def pump_id_for(area_name: str) -> str:
    return f"pump_{area_name}"

class PumpStatus(Base):
    __tablename__ = "pump_status"

    id = Column(Integer, primary_key=True, index=True)
    area_name = Column(String, unique=True, index=True, nullable=False)
    pump_id = Column(String, nullable=False)  # "pump_<area_name>"
    status = Column(Boolean, default=False, nullable=False)  # True = running
    mode = Column(String, default=PumpMode.AUTO.value, nullable=False)  # "auto", "manual"
    last_updated = Column(DateTime(timezone=True), server_default=func.now())

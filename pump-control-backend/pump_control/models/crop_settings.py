from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func
from pump_control.database import Base

class CropSettings(Base):
    __tablename__ = "crop_settings"

    id = Column(Integer, primary_key=True, index=True)
    area_name = Column(String, unique=True, index=True, nullable=False)
    crop_name = Column(String, nullable=False)
    optimal_moisture = Column(Float, nullable=False)  # percentage
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

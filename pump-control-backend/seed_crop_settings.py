#!/usr/bin/env python3
"""
Create or update the crop settings of an area (development helper)

    python seed_crop_settings.py field1 tomato 40
"""
import argparse

from pump_control.database import SessionLocal
from pump_control.init_db import init_database
from pump_control.models.crop_settings import CropSettings
from pump_control.services.control_engine import target_moisture

def seed_crop_settings(area_name: str, crop_name: str, optimal_moisture: float):
    init_database()
    db = SessionLocal()
    try:
        crop = db.query(CropSettings).filter(CropSettings.area_name == area_name).first()
        if crop:
            print(f"Updating crop settings for area {area_name}")
            crop.crop_name = crop_name
            crop.optimal_moisture = optimal_moisture
        else:
            print(f"Creating crop settings for area {area_name}")
            db.add(CropSettings(area_name=area_name, crop_name=crop_name, optimal_moisture=optimal_moisture))

        db.commit()
        print(f"  {crop_name}: optimal {optimal_moisture}%, pump target {target_moisture(optimal_moisture)}%")

    except Exception as e:
        print(f"Error seeding crop settings: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("area_name")
    parser.add_argument("crop_name")
    parser.add_argument("optimal_moisture", type=float)
    args = parser.parse_args()
    seed_crop_settings(args.area_name, args.crop_name, args.optimal_moisture)

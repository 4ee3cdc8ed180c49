"""
Persistence helpers for pump status and crop settings.

All functions take an open SQLAlchemy session; database failures are turned
into StoreError after rolling the session back.
"""
from datetime import datetime, timezone
from typing import List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pump_control.models.pump_status import PumpStatus, PumpMode, pump_id_for
from pump_control.models.crop_settings import CropSettings

logger = logging.getLogger(__name__)

class StoreError(Exception):
    """Raised when the status store cannot be read or written"""

def _now() -> datetime:
    return datetime.now(timezone.utc)

def _dialect_insert(db: Session):
    """Return the dialect's INSERT ... ON CONFLICT construct, if it has one"""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert
    return None

def get_status(db: Session, area_name: str) -> Optional[PumpStatus]:
    try:
        return db.query(PumpStatus).filter(PumpStatus.area_name == area_name).first()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Failed to read pump status for {area_name}") from e

def list_statuses(db: Session) -> List[PumpStatus]:
    try:
        return db.query(PumpStatus).order_by(PumpStatus.area_name.asc()).all()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError("Failed to list pump statuses") from e

def get_crop_settings(db: Session, area_name: str) -> Optional[CropSettings]:
    try:
        return db.query(CropSettings).filter(CropSettings.area_name == area_name).first()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Failed to read crop settings for {area_name}") from e

def upsert_status(db: Session, area_name: str, pump_id: str, status: bool, mode: str) -> None:
    """
    Insert or update the single pump_status row of an area.
    pump_id is only written when the row is created.
    """
    now = _now()
    mode = PumpMode(mode).value
    insert = _dialect_insert(db)
    try:
        if insert is not None:
            stmt = insert(PumpStatus).values(
                area_name=area_name,
                pump_id=pump_id,
                status=bool(status),
                mode=mode,
                last_updated=now,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["area_name"],
                set_={"status": bool(status), "mode": mode, "last_updated": now},
            )
            db.execute(stmt)
        else:
            row = db.query(PumpStatus).filter(PumpStatus.area_name == area_name).with_for_update().first()
            if row:
                row.status = bool(status)
                row.mode = mode
                row.last_updated = now
            else:
                db.add(PumpStatus(area_name=area_name, pump_id=pump_id, status=bool(status), mode=mode, last_updated=now))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Failed to upsert pump status for {area_name}") from e

    logger.info(f"Pump {pump_id} in area {area_name} {'turned ON' if status else 'turned OFF'} in {mode} mode")

def ensure_status(db: Session, area_name: str) -> PumpStatus:
    """Return the area's row, creating it as off/auto when it does not exist yet"""
    row = get_status(db, area_name)
    if row:
        return row

    insert = _dialect_insert(db)
    try:
        values = dict(
            area_name=area_name,
            pump_id=pump_id_for(area_name),
            status=False,
            mode=PumpMode.AUTO.value,
            last_updated=_now(),
        )
        if insert is not None:
            db.execute(insert(PumpStatus).values(**values).on_conflict_do_nothing(index_elements=["area_name"]))
        else:
            db.add(PumpStatus(**values))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Failed to create pump status for {area_name}") from e

    logger.info(f"Created pump status for new area {area_name}")
    return get_status(db, area_name)

"""
Pump state synchronization service.

Every state change goes through here: the new state is committed to the
status store first, then the committed row is read back and pushed to the
area's live session. Operations on the same area are serialized with a
per-area lock; different areas never wait on each other.
"""
import asyncio
import contextlib
import enum
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from pump_control.models.pump_status import PumpMode, pump_id_for
from pump_control.schemas.pump import PumpStatusView, CropSettingsView
from pump_control.schemas.messages import status_update, to_wire
from pump_control.services import control_engine, status_store
from pump_control.services.connection_registry import ConnectionRegistry
from pump_control.services.status_store import StoreError

logger = logging.getLogger(__name__)

class SensorOutcome(str, enum.Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILURE = "failure"

class _AreaLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0

class SyncService:
    def __init__(self, session_factory: Callable[[], Session], registry: ConnectionRegistry):
        self._session_factory = session_factory
        self.registry = registry
        self._locks: Dict[str, _AreaLock] = {}

    @contextlib.asynccontextmanager
    async def _area_lock(self, area_name: str):
        """Exclusive section for one area; the entry is dropped once nobody holds or waits on it"""
        entry = self._locks.get(area_name)
        if entry is None:
            entry = self._locks[area_name] = _AreaLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._locks.get(area_name) is entry:
                del self._locks[area_name]

    async def _run(self, fn, *args):
        """Run a blocking store call with its own session in the default executor"""
        def _call():
            db = self._session_factory()
            try:
                return fn(db, *args)
            finally:
                db.close()

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _call)

    # ---------- Store reads (converted to views inside the session) ----------

    @staticmethod
    def _read_status(db: Session, area_name: str) -> Optional[PumpStatusView]:
        row = status_store.get_status(db, area_name)
        return PumpStatusView.model_validate(row) if row else None

    @staticmethod
    def _read_all(db: Session) -> List[PumpStatusView]:
        return [PumpStatusView.model_validate(r) for r in status_store.list_statuses(db)]

    @staticmethod
    def _read_crop(db: Session, area_name: str) -> Optional[CropSettingsView]:
        row = status_store.get_crop_settings(db, area_name)
        return CropSettingsView.model_validate(row) if row else None

    @staticmethod
    def _ensure_status(db: Session, area_name: str) -> PumpStatusView:
        return PumpStatusView.model_validate(status_store.ensure_status(db, area_name))

    # ---------- Queries ----------

    async def get_status(self, area_name: str) -> Optional[PumpStatusView]:
        """Persisted status of an area, None if the area was never written"""
        return await self._run(self._read_status, area_name)

    async def query_status(self, area_name: str) -> PumpStatusView:
        """Status of an area, with an unsaved off/auto default for new areas"""
        view = await self.get_status(area_name)
        if view is None:
            view = PumpStatusView(
                area_name=area_name,
                pump_id=pump_id_for(area_name),
                status=False,
                mode=PumpMode.AUTO,
                last_updated=datetime.now(timezone.utc),
            )
        return view

    async def send_current(self, area_name: str, session: Any) -> bool:
        """
        Send the current status of an area to a newly connected session.

        Runs inside the area's exclusive section so a write committed while
        the snapshot is being read is pushed after it, never before.
        """
        async with self._area_lock(area_name):
            try:
                view = await self.query_status(area_name)
            except StoreError as e:
                logger.error(f"Error sending pump status to area {area_name}: {e}")
                return False
            await session.send_json(to_wire(status_update(view)))
            return True

    async def list_statuses(self) -> List[PumpStatusView]:
        return await self._run(self._read_all)

    async def get_crop_settings(self, area_name: str) -> Optional[CropSettingsView]:
        return await self._run(self._read_crop, area_name)

    # ---------- State changes ----------

    async def apply_operator_command(self, area_name: str, status: bool, mode: str) -> bool:
        """Persist an operator command and push it; False if it could not be stored"""
        try:
            mode = PumpMode(mode).value
        except ValueError:
            logger.warning(f"Rejected pump command for {area_name}: invalid mode {mode!r}")
            return False

        async with self._area_lock(area_name):
            try:
                await self._run(status_store.upsert_status, area_name, pump_id_for(area_name), status, mode)
            except StoreError as e:
                logger.error(f"Error updating pump status for {area_name}: {e}")
                return False

            await self._broadcast_locked(area_name)
            return True

    async def apply_sensor_reading(self, area_name: str, soil_moisture: float) -> SensorOutcome:
        async with self._area_lock(area_name):
            try:
                crop = await self._run(self._read_crop, area_name)
                if crop is None:
                    logger.info(f"No crop settings found for area: {area_name}")
                    return SensorOutcome.SKIPPED

                current = await self._run(self._ensure_status, area_name)
                target = control_engine.target_moisture(crop.optimal_moisture)
                desired = control_engine.decide(current.mode, current.status, target, soil_moisture)
                if desired is None:
                    logger.debug(
                        f"Area {area_name}: moisture {soil_moisture} (target {target}) "
                        f"leaves pump {'ON' if current.status else 'OFF'} in {current.mode.value} mode"
                    )
                    return SensorOutcome.SKIPPED

                await self._run(status_store.upsert_status, area_name, current.pump_id, desired, PumpMode.AUTO.value)
            except StoreError as e:
                logger.error(f"Error handling soil moisture update for {area_name}: {e}")
                return SensorOutcome.FAILURE

            await self._broadcast_locked(area_name)
            return SensorOutcome.APPLIED

    # ---------- Broadcast ----------

    async def _broadcast_locked(self, area_name: str) -> bool:
        if self.registry.lookup(area_name) is None:
            return False

        try:
            view = await self._run(self._read_status, area_name)
        except StoreError as e:
            logger.error(f"Error broadcasting pump status for {area_name}: {e}")
            return False

        if view is None:
            return False
        return await self.registry.send(area_name, to_wire(status_update(view)))

    async def broadcast(self, area_name: str) -> bool:
        """Push the committed status of an area to its session, if any"""
        async with self._area_lock(area_name):
            return await self._broadcast_locked(area_name)

    async def resync_all(self) -> int:
        """Re-broadcast every area that has a live session; returns pushes delivered"""
        delivered = 0
        for area_name in self.registry.areas():
            if await self.broadcast(area_name):
                delivered += 1
        logger.debug(f"Resync delivered {delivered} status updates")
        return delivered

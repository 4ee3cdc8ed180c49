# pump_control/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pump_control.database import settings, engine as default_engine, SessionLocal
from pump_control.init_db import init_database
from pump_control.services.connection_registry import ConnectionRegistry
from pump_control.services.sync_service import SyncService
from pump_control.services.scheduler import create_scheduler, start_scheduler, stop_scheduler

# Routers
from pump_control.routers import pumps_router, pump_socket_router, health_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(session_factory=None, engine=None, resync_interval_seconds=None) -> FastAPI:
    app = FastAPI(
        title="Pump Control API",
        description="Real-time pump state synchronization for irrigation areas",
        version="1.0.0",
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One registry and one service per app; no module globals
    registry = ConnectionRegistry(send_timeout=settings.send_timeout_seconds)
    sync_service = SyncService(session_factory or SessionLocal, registry)
    app.state.sync_service = sync_service

    if resync_interval_seconds is None:
        resync_interval_seconds = settings.resync_interval_seconds

    # Mount router
    app.include_router(health_router)            # /healthz, /api/health
    app.include_router(pumps_router)             # /api/pumps/...
    app.include_router(pump_socket_router)       # /ws?area=...

    # Startup: tables + resync scheduler (idempotent)
    @app.on_event("startup")
    async def _startup():
        init_database(engine or default_engine)
        app.state.scheduler = create_scheduler(sync_service, resync_interval_seconds)
        start_scheduler(app.state.scheduler)

    @app.on_event("shutdown")
    async def _shutdown():
        stop_scheduler(getattr(app.state, "scheduler", None))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Pump control server running on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())

"""Shared pytest fixtures for testing."""
import os
import shutil
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from starlette.websockets import WebSocketState

from pump_control.models import Base, CropSettings
from pump_control.main import create_app
from pump_control.services.connection_registry import ConnectionRegistry
from pump_control.services.sync_service import SyncService


class FakeSession:
    """Stand-in for a connected WebSocket that records what it was sent."""

    def __init__(self, connected=True):
        state = WebSocketState.CONNECTED if connected else WebSocketState.DISCONNECTED
        self.client_state = state
        self.application_state = state
        self.sent = []

    async def send_json(self, payload):
        self.sent.append(payload)


@pytest.fixture(scope='function')
def test_engine():
    """Create a temporary SQLite database for testing."""
    temp_dir = tempfile.mkdtemp()
    db_path = os.path.join(temp_dir, 'test_pump_control.db')

    engine = create_engine(f'sqlite:///{db_path}', connect_args={'check_same_thread': False})
    Base.metadata.create_all(bind=engine)

    yield engine

    engine.dispose()
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_crop(session_factory):
    """Insert a crop_settings row for an area."""
    def _add(area_name, optimal_moisture, crop_name="tomato"):
        session = session_factory()
        try:
            session.add(CropSettings(area_name=area_name, crop_name=crop_name, optimal_moisture=optimal_moisture))
            session.commit()
        finally:
            session.close()
    return _add


@pytest.fixture
def registry():
    return ConnectionRegistry(send_timeout=1.0)


@pytest.fixture
def sync_service(session_factory, registry):
    return SyncService(session_factory, registry)


@pytest.fixture
def app(session_factory, test_engine):
    return create_app(session_factory=session_factory, engine=test_engine, resync_interval_seconds=0)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c

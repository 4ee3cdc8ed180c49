"""Tests for the area WebSocket endpoint."""
import pytest
from starlette.websockets import WebSocketDisconnect

from pump_control.models.pump_status import PumpStatus


def _row_count(session_factory):
    db = session_factory()
    try:
        return db.query(PumpStatus).count()
    finally:
        db.close()


class TestPumpSocket:

    def test_missing_area_is_rejected(self, client):
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect("/ws"):
                pass
        assert exc.value.code == 1008

    def test_new_area_gets_default_status_without_row(self, client, session_factory):
        with client.websocket_connect("/ws?area=field9") as ws:
            data = ws.receive_json()

        assert data["type"] == "pump_status_update"
        assert data["area_name"] == "field9"
        assert data["pump_id"] == "pump_field9"
        assert data["status"] is False
        assert data["mode"] == "auto"
        assert "last_updated" in data
        assert _row_count(session_factory) == 0

    def test_session_is_registered_while_open(self, client):
        with client.websocket_connect("/ws?area=field1") as ws:
            ws.receive_json()
            assert client.get("/api/health").json()["sessions"] == 1
        assert client.get("/api/health").json()["sessions"] == 0

    def test_soil_moisture_updates_drive_pump(self, client, add_crop):
        add_crop("field1", 40)
        with client.websocket_connect("/ws?area=field1") as ws:
            ws.receive_json()

            ws.send_json({"type": "soil_moisture_update", "area_name": "field1", "soil_moisture": 45})
            update = ws.receive_json()
            assert update["type"] == "pump_status_update"
            assert update["status"] is True
            assert update["mode"] == "auto"

            # wet enough: pump switches off again
            ws.send_json({"type": "soil_moisture_update", "soil_moisture": 50})
            assert ws.receive_json()["status"] is False

    def test_manual_mode_blocks_sensor_control(self, client, add_crop):
        add_crop("field1", 40)
        with client.websocket_connect("/ws?area=field1") as ws:
            ws.receive_json()

            ws.send_json({"type": "pump_control", "area_name": "field1", "pump_id": "pump_field1",
                          "status": True, "mode": "manual"})
            update = ws.receive_json()
            assert (update["status"], update["mode"]) == (True, "manual")

            # skipped reading produces no push; the next frame is the moisture response
            ws.send_json({"type": "soil_moisture_update", "soil_moisture": 48})
            ws.send_json({"type": "request_optimal_moisture"})
            assert ws.receive_json()["type"] == "optimal_moisture_response"

        data = client.get("/api/pumps/field1").json()
        assert (data["status"], data["mode"]) == (True, "manual")

    def test_optimal_moisture_response(self, client, add_crop):
        add_crop("field1", 40, crop_name="lettuce")
        with client.websocket_connect("/ws?area=field1") as ws:
            ws.receive_json()
            ws.send_json({"type": "request_optimal_moisture", "area_name": "field1"})
            data = ws.receive_json()

        assert data == {
            "type": "optimal_moisture_response",
            "status": "success",
            "crop_name": "lettuce",
            "optimal_moisture": 40.0,
            "target_moisture": 50.0,
        }

    def test_optimal_moisture_without_settings(self, client):
        with client.websocket_connect("/ws?area=field2") as ws:
            ws.receive_json()
            ws.send_json({"type": "request_optimal_moisture"})
            data = ws.receive_json()

        assert data["status"] == "error"
        assert data["message"] == "No crop settings found"

    def test_malformed_messages_are_ignored(self, client):
        with client.websocket_connect("/ws?area=field2") as ws:
            ws.receive_json()
            ws.send_text("not json")
            ws.send_json({"type": "self_destruct"})
            ws.send_json({"type": "pump_control", "status": True})
            ws.send_json({"type": "request_optimal_moisture"})
            assert ws.receive_json()["type"] == "optimal_moisture_response"

    def test_operator_command_over_http_reaches_session(self, client):
        with client.websocket_connect("/ws?area=field1") as ws:
            ws.receive_json()
            client.post("/api/pumps/field1", json={"status": True, "mode": "manual"})
            update = ws.receive_json()
            assert update["status"] is True
            assert update["mode"] == "manual"

    def test_stale_session_close_keeps_newer_session(self, client):
        old = client.websocket_connect("/ws?area=field1").__enter__()
        old.receive_json()

        with client.websocket_connect("/ws?area=field1") as new:
            new.receive_json()

            # the superseded connection finishes closing after the new one registered
            old.__exit__(None, None, None)
            assert client.get("/api/health").json()["sessions"] == 1

            client.post("/api/pumps/field1", json={"status": True, "mode": "auto"})
            assert new.receive_json()["status"] is True

    def test_binary_frames_are_decoded(self, client):
        with client.websocket_connect("/ws?area=field2") as ws:
            ws.receive_json()
            ws.send_bytes(b'{"type": "request_optimal_moisture"}')
            assert ws.receive_json()["type"] == "optimal_moisture_response"

            # session is still open for text frames afterwards
            ws.send_json({"type": "request_optimal_moisture"})
            assert ws.receive_json()["type"] == "optimal_moisture_response"

    def test_undecodable_binary_frame_is_ignored(self, client):
        with client.websocket_connect("/ws?area=field2") as ws:
            ws.receive_json()
            ws.send_bytes(b"\xff\xfe\x00garbage")
            ws.send_bytes(b"not json either")
            ws.send_json({"type": "request_optimal_moisture"})
            assert ws.receive_json()["message"] == "No crop settings found"

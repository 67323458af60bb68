"""Tests for the FastAPI adapter."""

import pytest
from fastapi.testclient import TestClient

from web.app import app, MAX_PROGRAM_SIZE


@pytest.fixture
def client():
    return TestClient(app)


class TestRunEndpoint:
    """POST /api/run tests."""

    def test_run_ok(self, client):
        response = client.post("/api/run", json={"program": "6005 7003 1204"})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["halted"] is True
        assert data["final_state"]["v"][0] == 8
        assert len(data["display"]) == 32
        assert data["trace"][0]["instr_text"] == "LD V0, 0x05"

    def test_run_with_options(self, client):
        payload = {
            "program": "7001 1200",
            "options": {"max_steps": 4, "trace": False},
        }
        data = client.post("/api/run", json=payload).json()
        assert data["steps_executed"] == 4
        assert data["trace"] == []

    def test_fault_reported_in_body(self, client):
        data = client.post("/api/run", json={"program": "FFFF"}).json()
        assert data["status"] == "error"
        assert data["error"]["type"] == "DecodeError"
        assert data["error"]["opcode"] == 0xFFFF
        assert data["error"]["snapshot"]["pc"] == 0x200

    def test_malformed_image(self, client):
        response = client.post("/api/run", json={"program": "00E0 nope"})
        assert response.status_code == 400

    def test_program_too_large(self, client):
        response = client.post("/api/run", json={"program": "0" * (MAX_PROGRAM_SIZE + 1)})
        assert response.status_code == 400

    def test_invalid_collision_mode(self, client):
        payload = {"program": "00E0", "options": {"collision_mode": "sometimes"}}
        response = client.post("/api/run", json=payload)
        assert response.status_code == 422

    def test_image_larger_than_memory(self, client):
        """Well-formed text that cannot fit in program memory is rejected."""
        response = client.post("/api/run", json={"program": " ".join(["00E0"] * 2000)})
        assert response.status_code == 400
        assert "3584" in response.json()["detail"]

    def test_image_filling_memory_is_accepted(self, client):
        payload = {"program": " ".join(["00E0"] * 1792), "options": {"trace": False}}
        response = client.post("/api/run", json=payload)
        assert response.status_code == 200
        assert response.json()["steps_executed"] == 1792

"""Tests for the FastAPI adapter."""

import pytest
from fastapi.testclient import TestClient

from web.app import app, MAX_PROGRAM_SIZE


@pytest.fixture
def client():
    return TestClient(app)


class TestAssembleEndpoint:
    """POST /api/assemble"""

    def test_assemble(self, client):
        response = client.post("/api/assemble", json={"program": "loop:\nMOV R1,10\nfoo"})
        assert response.status_code == 200
        data = response.json()
        assert data["instructions"] == ["MOV R1, 10", "UNKNOWN: foo"]
        assert data["binary"] == ["0001001100001010", "0000000000000000"]
        assert data["labels"] == {"loop": 0}

    def test_program_too_large(self, client):
        response = client.post("/api/assemble", json={"program": "x" * (MAX_PROGRAM_SIZE + 1)})
        assert response.status_code == 400


class TestStepEndpoint:
    """POST /api/step"""

    def test_step(self, client):
        response = client.post("/api/step", json={
            "state": {"registers": {"R1": 10, "R2": 5}, "ip": 2},
            "instruction": "ADD R3, R1, R2",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["state"]["registers"]["R3"] == 15
        assert data["state"]["ip"] == 3
        assert data["description"] == "Added R1 (10) and R2 (5), stored result 15 in R3"

    def test_step_default_state(self, client):
        response = client.post("/api/step", json={"instruction": "MOV [7], R1"})
        assert response.status_code == 200
        assert response.json()["state"]["memory"] == {"7": 0}

    def test_invalid_register(self, client):
        response = client.post("/api/step", json={
            "state": {"registers": {"R42": 1}},
            "instruction": "MOV R1, 1",
        })
        assert response.status_code == 400

    def test_invalid_memory_key(self, client):
        response = client.post("/api/step", json={
            "state": {"memory": {"abc": 1}},
            "instruction": "MOV R1, 1",
        })
        assert response.status_code == 400


class TestRunEndpoint:
    """POST /api/run"""

    def test_run(self, client):
        response = client.post("/api/run", json={"program": "MOV R1, 2\nMOV R2, 3\nMUL R3, R1, R2"})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["final_state"]["registers"]["R3"] == 6
        assert len(data["history"]) == 3

    def test_run_step_limit(self, client):
        response = client.post("/api/run", json={
            "program": "JMP 0",
            "options": {"max_steps": 3},
        })
        data = response.json()
        assert data["status"] == "error"
        assert data["error"]["type"] == "StepLimitExceeded"

    def test_run_initial_memory(self, client):
        response = client.post("/api/run", json={
            "program": "MOV R1, [80]",
            "options": {"initial_memory": {"80": 12}},
        })
        assert response.json()["final_state"]["registers"]["R1"] == 12

    def test_run_bad_memory_key(self, client):
        response = client.post("/api/run", json={
            "program": "MOV R1, [80]",
            "options": {"initial_memory": {"x": 12}},
        })
        assert response.status_code == 400

    def test_run_bad_max_steps(self, client):
        response = client.post("/api/run", json={
            "program": "MOV R1, 1",
            "options": {"max_steps": 0},
        })
        assert response.status_code == 422

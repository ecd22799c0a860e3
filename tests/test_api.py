"""
Tests for the HTTP and WebSocket endpoints.
"""

import base64

import numpy as np
import pytest
from fastapi.testclient import TestClient

import main
from core.config import Settings
from services import Audio2FaceService, set_audio2face_service

from conftest import FakeRunner
from test_service import make_wav


def pcm16_b64(num_samples: int, value: float = 0.0) -> str:
    pcm = np.full(num_samples, int(value * 32767), dtype="<i2").tobytes()
    return base64.b64encode(pcm).decode("utf-8")


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def client(runner):
    service = Audio2FaceService(Settings(warmup_on_start=False), runner=runner)
    set_audio2face_service(service)
    with TestClient(main.app) as test_client:
        yield test_client
    set_audio2face_service(None)


@pytest.fixture
def unavailable_client():
    service = Audio2FaceService(Settings(onnx_model_path="/nonexistent.onnx", warmup_on_start=False))
    set_audio2face_service(service)
    with TestClient(main.app) as test_client:
        yield test_client
    set_audio2face_service(None)


class TestHttp:

    def test_root(self, client):
        data = client.get("/").json()
        assert data["name"] == "Audio2Face Server"
        assert data["sampleRate"] == 16000

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["services"]["audio2face"] == "available"
        assert data["services"]["backend"] == "fake"

    def test_process_file(self, client):
        wav = make_wav(np.zeros(12480), 16000)
        response = client.post("/api/process", files={"file": ("speech.wav", wav, "audio/wav")})

        assert response.status_code == 200
        data = response.json()
        assert data["frameCount"] == 2
        assert data["jaw"] == 0.5
        assert len(data["blendshapes"]) == 52
        assert data["eyes"] == {"leftX": 0.0, "leftY": 0.0, "rightX": 0.0, "rightY": 0.0}

    def test_process_invalid_file(self, client):
        response = client.post("/api/process", files={"file": ("junk.wav", b"junk", "audio/wav")})
        assert response.status_code == 400

    def test_process_empty_file(self, client):
        response = client.post("/api/process", files={"file": ("empty.wav", b"", "audio/wav")})
        assert response.status_code == 400

    def test_process_without_model(self, unavailable_client):
        wav = make_wav(np.zeros(12480), 16000)
        response = unavailable_client.post("/api/process", files={"file": ("speech.wav", wav, "audio/wav")})
        assert response.status_code == 503


class TestWebSocket:

    def test_config_sent_on_connect(self, client):
        with client.websocket_connect("/ws") as ws:
            config = ws.receive_json()
        assert config["type"] == "config"
        assert config["audio"]["inputSampleRate"] == 24000
        assert config["windowLength"] == 8320
        assert config["backend"] == "fake"

    def test_frames_streamed_per_chunk(self, client, runner):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()

            # 6000 samples at 24kHz -> 4000 at 16kHz, still filling
            ws.send_json({"type": "audio", "data": pcm16_b64(6000)})
            filling = ws.receive_json()
            assert filling["type"] == "frame"
            assert filling["frameIndex"] == 0
            assert filling["jaw"] == 0.0
            assert filling["eyes"] is None

            # Total 12480 samples at 24kHz -> 8320 at 16kHz, one full window
            ws.send_json({"type": "audio", "data": pcm16_b64(6480)})
            frame = ws.receive_json()
            assert frame["frameIndex"] == 1
            assert frame["jaw"] == 0.5

        assert len(runner.calls) == 1

    def test_config_message_sets_smoothing(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "config", "smoothing": 3.0})
            assert ws.receive_json() == {"type": "config", "smoothing": 1.0}

    def test_ping(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "ping"})
            assert ws.receive_json()["type"] == "pong"

    def test_invalid_messages_report_errors(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_text("not json")
            assert ws.receive_json()["type"] == "error"
            ws.send_json({"type": "dance"})
            assert ws.receive_json()["type"] == "error"
            ws.send_json({"type": "audio", "data": "***"})
            assert ws.receive_json()["type"] == "error"

    def test_inference_failure_reported(self, client, runner):
        runner.fail = True
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "audio", "data": pcm16_b64(12480)})
            error = ws.receive_json()
        assert error["type"] == "error"
        assert "inference exploded" in error["message"]

    def test_model_unavailable_reported(self, unavailable_client):
        with unavailable_client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "audio", "data": pcm16_b64(100)})
            assert ws.receive_json()["type"] == "error"

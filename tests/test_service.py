"""
Tests for the Audio2Face service layer: model bootstrap, audio decoding and
pipeline creation.
"""

import asyncio
import io
import time
import wave

import numpy as np
import pytest

from audio2face import AudioDecodeError, ModelNotLoadedError
from core.config import Settings
from services.audio2face_service import Audio2FaceService, decode_audio

from conftest import FakeRunner


def make_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Encode float samples as a 16-bit mono WAV file."""
    pcm = (np.clip(samples, -1, 1) * 32767).astype("<i2").tobytes()
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buffer.getvalue()


@pytest.fixture
def settings():
    return Settings(onnx_model_path="/nonexistent/audio2face.onnx", warmup_on_start=False)


class TestDecodeAudio:

    def test_decodes_wav_at_native_rate(self):
        samples, rate = decode_audio(make_wav(np.zeros(2400), 24000))
        assert rate == 24000
        assert samples.dtype == np.float32
        assert samples.shape == (2400,)

    def test_invalid_data_raises(self):
        with pytest.raises(AudioDecodeError):
            decode_audio(b"definitely not audio")


class TestAudio2FaceService:

    def test_missing_model_leaves_service_unavailable(self, settings):
        service = Audio2FaceService(settings)

        assert not service.is_available
        assert service.backend is None
        assert not service.create_pipeline().is_ready

    def test_process_file_without_model_raises(self, settings):
        service = Audio2FaceService(settings)
        with pytest.raises(ModelNotLoadedError):
            asyncio.run(service.process_file(make_wav(np.zeros(100), 16000)))

    def test_process_file_resamples_and_aggregates(self, settings):
        runner = FakeRunner()
        service = Audio2FaceService(settings, runner=runner)

        # 12480 samples at 16kHz once resampled
        result = asyncio.run(service.process_file(make_wav(np.zeros(18720), 24000)))

        assert result.frame_count == 2
        assert result.jaw == 0.5

    def test_decoding_does_not_block_event_loop(self, settings, monkeypatch):
        def slow_decode(data):
            time.sleep(0.5)
            return np.zeros(8320, dtype=np.float32), 16000

        monkeypatch.setattr("services.audio2face_service.decode_audio", slow_decode)
        service = Audio2FaceService(settings, runner=FakeRunner())

        async def run():
            ticks = []
            done = asyncio.Event()

            async def heartbeat():
                while not done.is_set():
                    ticks.append(time.monotonic())
                    await asyncio.sleep(0.05)

            beat = asyncio.create_task(heartbeat())
            result = await service.process_file(b"x")
            done.set()
            await beat
            return result, ticks

        result, ticks = asyncio.run(run())

        assert result.frame_count == 1
        assert len(ticks) >= 5
        assert max(b - a for a, b in zip(ticks, ticks[1:])) < 0.2

    def test_pipelines_share_runner_but_not_state(self, settings):
        runner = FakeRunner()
        service = Audio2FaceService(settings, runner=runner)
        first = service.create_pipeline()
        second = service.create_pipeline()

        asyncio.run(first.process_chunk(np.zeros(100)))
        assert first.engine.buffered == 100
        assert second.engine.buffered == 0

        first.dispose()
        assert not runner.released
        assert service.is_available

    def test_pipeline_uses_configured_parameters(self):
        settings = Settings(window_length=400, hop_length=100, smoothing_factor=0.8, warmup_on_start=False)
        pipeline = Audio2FaceService(settings, runner=FakeRunner()).create_pipeline()

        assert pipeline.engine.window_length == 400
        assert pipeline.engine.hop_length == 100
        assert pipeline.smoothing_factor == 0.8

    def test_warmup_scores_one_window(self, settings):
        runner = FakeRunner()
        service = Audio2FaceService(settings, runner=runner)
        asyncio.run(service.warmup())
        assert len(runner.calls) == 1

    def test_warmup_failure_is_not_fatal(self, settings):
        service = Audio2FaceService(settings, runner=FakeRunner(fail=True))
        asyncio.run(service.warmup())
        assert service.is_available

    def test_shutdown_releases_runner(self, settings):
        runner = FakeRunner()
        service = Audio2FaceService(settings, runner=runner)
        service.shutdown()
        assert runner.released
        assert not service.is_available

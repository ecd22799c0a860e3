"""
Audio2Face Service

Service layer for Audio2Face model inference.
Loads the ONNX model once, decodes uploaded audio and hands out
pipelines that share the loaded session.
"""

import asyncio
import io
from pathlib import Path

import numpy as np

from audio2face import (
    Audio2FacePipeline,
    AudioDecodeError,
    InferenceRunner,
    ModelNotLoadedError,
    OnnxInferenceRunner,
)
from audio2face.types import AggregateResult
from core.config import Settings, get_settings
from core.logger import get_logger

logger = get_logger(__name__)


def decode_audio(data: bytes) -> tuple[np.ndarray, int]:
    """
    Decode an audio container (wav, flac, ogg, ...) to mono float samples.

    The native sample rate is kept; resampling to the model rate is the
    pipeline's job.

    Args:
        data: Encoded audio file contents

    Returns:
        Tuple of (float32 mono samples, sample rate)

    Raises:
        AudioDecodeError: If the data cannot be decoded
    """
    import librosa

    try:
        samples, sample_rate = librosa.load(io.BytesIO(data), sr=None, mono=True)
    except Exception as e:
        raise AudioDecodeError(f"Failed to decode audio: {e}") from e

    return samples.astype(np.float32), int(sample_rate)


class Audio2FaceService:
    """
    Service for Audio2Face blendshape inference.

    Owns the shared inference runner. Every audio stream gets its own
    pipeline from create_pipeline(); pipelines never release the shared
    runner, shutdown() does.
    """

    def __init__(self, settings: Settings, runner: InferenceRunner | None = None):
        """
        Initialize the Audio2Face service.

        Args:
            settings: Application settings
            runner: Pre-built inference runner (skips model loading)
        """
        self.settings = settings
        self._runner: InferenceRunner | None = runner

        if self._runner is None:
            self._initialize_model()

    def _initialize_model(self) -> None:
        """Load the ONNX model, preferring the GPU when configured."""
        model_path = Path(self.settings.onnx_model_path)
        if not model_path.exists():
            logger.warning(f"Audio2Face model not found at: {model_path}")
            logger.warning("Audio2Face will be unavailable")
            return

        try:
            self._runner = OnnxInferenceRunner.load(model_path, use_gpu=self.settings.use_gpu)
            logger.info(f"Audio2Face model loaded (backend: {self._runner.backend})")
        except ImportError as e:
            logger.warning(f"ONNX Runtime not available: {e}")
            logger.warning("Install onnxruntime: pip install onnxruntime")
        except Exception as e:
            logger.warning(f"Failed to load Audio2Face model: {e}")

    async def warmup(self) -> None:
        """
        Run one window of silence through the model.

        This moves ONNX Runtime's first-run overhead out of the first real
        request. Failures are logged and ignored.
        """
        if not self.is_available:
            return

        try:
            logger.info("Running model warmup pass...")
            pipeline = self.create_pipeline()
            dummy_audio = np.zeros(self.settings.window_length, dtype=np.float32)
            result = await pipeline.process_file(dummy_audio, self.settings.model_sample_rate)
            logger.info(f"Model warmup complete - {result.frame_count} window(s) scored")
        except Exception as e:
            logger.warning(f"Model warmup failed (non-critical): {e}")

    @property
    def is_available(self) -> bool:
        """Check if Audio2Face inference is available."""
        return self._runner is not None

    @property
    def backend(self) -> str | None:
        """Execution provider of the loaded session."""
        return self._runner.backend if self._runner is not None else None

    def create_pipeline(self) -> Audio2FacePipeline:
        """
        Create a pipeline for one audio stream.

        Returns:
            Pipeline sharing the service's runner (or not ready, when the
            model is unavailable)
        """
        return Audio2FacePipeline(
            self._runner,
            owns_runner=False,
            sample_rate=self.settings.model_sample_rate,
            window_length=self.settings.window_length,
            hop_length=self.settings.hop_length,
            smoothing_factor=self.settings.smoothing_factor,
            debug=self.settings.debug,
        )

    async def process_file(self, data: bytes) -> AggregateResult:
        """
        Decode an audio file and aggregate its blendshapes.

        Args:
            data: Encoded audio file contents

        Returns:
            Aggregated result for the whole file

        Raises:
            ModelNotLoadedError: If the model is unavailable
            AudioDecodeError: If the file cannot be decoded
        """
        if not self.is_available:
            raise ModelNotLoadedError("Audio2Face model not available")

        # librosa decoding blocks; keep it off the event loop
        samples, sample_rate = await asyncio.to_thread(decode_audio, data)
        logger.debug(f"Decoded {samples.shape[0]} samples at {sample_rate}Hz")
        return await self.create_pipeline().process_file(samples, sample_rate)

    def shutdown(self) -> None:
        """Release the shared runner."""
        if self._runner is not None:
            self._runner.release()
            self._runner = None


# Singleton instance (created on first use)
_audio2face_service: Audio2FaceService | None = None


def get_audio2face_service(settings: Settings | None = None) -> Audio2FaceService:
    """
    Get or create the Audio2FaceService singleton.

    Args:
        settings: Application settings (uses defaults if not provided)

    Returns:
        Audio2FaceService instance
    """
    global _audio2face_service

    if _audio2face_service is None:
        settings = settings or get_settings()
        _audio2face_service = Audio2FaceService(settings)

    return _audio2face_service


def set_audio2face_service(service: Audio2FaceService | None) -> None:
    """Replace the singleton (used by tests and custom bootstraps)."""
    global _audio2face_service
    _audio2face_service = service

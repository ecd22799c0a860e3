"""
Inference capability used by the Audio2Face pipeline.

The pipeline only depends on the InferenceRunner protocol. The ONNX
Runtime implementation below handles model loading and backend selection:
GPU (CUDA) is a preference, and session creation falls back to the CPU
provider when it fails.
"""

import asyncio
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

import numpy as np

from core.logger import get_logger

logger = get_logger(__name__)

AUDIO_INPUT_NAMES = ("audio", "input")
EMOTION_INPUT_NAME = "emotion"
EMOTION_DIM = 26

CPU_PROVIDER = "CPUExecutionProvider"
GPU_PROVIDER = "CUDAExecutionProvider"


class InferenceRunner(Protocol):
    """Anything that maps named input tensors to named output tensors."""

    @property
    def input_names(self) -> Sequence[str]: ...

    @property
    def output_names(self) -> Sequence[str]: ...

    @property
    def backend(self) -> str: ...

    async def run(self, inputs: Mapping[str, np.ndarray]) -> Mapping[str, np.ndarray]: ...

    def release(self) -> None: ...


def build_inputs(window: np.ndarray, input_names: Sequence[str]) -> dict[str, np.ndarray]:
    """
    Build the input feed for one audio window.

    The window goes under "audio", else "input", else the first advertised
    name, shaped [1, 1, len(window)]. An all-zero emotion vector of shape
    [1, 1, 26] is added only when the model advertises an "emotion" input.

    Args:
        window: Audio samples of one window
        input_names: Input names advertised by the runner

    Returns:
        Mapping of input name to float32 tensor
    """
    if not input_names:
        raise ValueError("Model advertises no inputs")

    audio = np.asarray(window, dtype=np.float32).reshape(1, 1, -1)

    audio_name = next((name for name in AUDIO_INPUT_NAMES if name in input_names), input_names[0])
    feeds = {audio_name: audio}

    if EMOTION_INPUT_NAME in input_names:
        feeds[EMOTION_INPUT_NAME] = np.zeros((1, 1, EMOTION_DIM), dtype=np.float32)

    return feeds


def first_output(outputs: Mapping[str, np.ndarray], output_names: Sequence[str]) -> np.ndarray:
    """Flatten the first advertised output tensor into the raw output vector."""
    name = output_names[0] if output_names else next(iter(outputs))
    return np.asarray(outputs[name], dtype=np.float32).reshape(-1)


class OnnxInferenceRunner:
    """
    ONNX Runtime session wrapped as an InferenceRunner.

    session.run is blocking, so it is moved to a worker thread to keep the
    event loop responsive while a window is being scored.
    """

    def __init__(self, session: Any, backend: str):
        self._session = session
        self._backend = backend
        self._input_names = [node.name for node in session.get_inputs()]
        self._output_names = [node.name for node in session.get_outputs()]

    @classmethod
    def load(cls, model: str | Path | bytes, use_gpu: bool = False) -> "OnnxInferenceRunner":
        """
        Create an inference session for a model file or serialized model.

        Args:
            model: Path to the .onnx file, or the model bytes
            use_gpu: Try the CUDA provider first

        Returns:
            Runner bound to the created session
        """
        import onnxruntime as ort

        if isinstance(model, Path):
            model = str(model)

        options = ort.SessionOptions()
        options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL

        providers = [GPU_PROVIDER, CPU_PROVIDER] if use_gpu else [CPU_PROVIDER]

        try:
            session = ort.InferenceSession(model, sess_options=options, providers=providers)
        except Exception as e:
            if not use_gpu:
                raise
            logger.warning(f"GPU initialization failed, falling back to CPU: {e}")
            session = ort.InferenceSession(model, sess_options=options, providers=[CPU_PROVIDER])

        backend = session.get_providers()[0]
        logger.info(f"ONNX session created (backend: {backend})")
        return cls(session, backend)

    @property
    def input_names(self) -> list[str]:
        return self._input_names

    @property
    def output_names(self) -> list[str]:
        return self._output_names

    @property
    def backend(self) -> str:
        return self._backend

    @property
    def is_released(self) -> bool:
        return self._session is None

    async def run(self, inputs: Mapping[str, np.ndarray]) -> dict[str, np.ndarray]:
        """Run the session on the given feeds, returning outputs by name."""
        if self._session is None:
            raise RuntimeError("ONNX session has been released")

        outputs = await asyncio.to_thread(self._session.run, self._output_names, dict(inputs))
        return dict(zip(self._output_names, outputs))

    def release(self) -> None:
        """Drop the session so its memory can be reclaimed."""
        if self._session is not None:
            logger.info("Releasing ONNX session")
        self._session = None

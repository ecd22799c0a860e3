"""
Audio2Face - Streaming audio to facial blendshape conversion.

This module turns 16kHz mono audio into ARKit-style blendshape weights,
jaw openness and eye gaze, using an externally supplied inference runner
(ONNX Runtime by default).
"""

from .aggregator import aggregate, empty_result
from .blendshapes import ARKIT_BLENDSHAPES, DEFAULT_OUTPUT_LAYOUT, NUM_BLENDSHAPES, OutputLayout
from .decoder import OutputDecoder, clamp01, sigmoid
from .errors import Audio2FaceError, AudioDecodeError, ModelNotLoadedError
from .inference import InferenceRunner, OnnxInferenceRunner, build_inputs
from .pipeline import MODEL_SAMPLE_RATE, Audio2FacePipeline
from .resampler import resample
from .smoother import TemporalSmoother
from .types import AggregateResult, Blendshape, EyeGaze, Frame
from .windowing import WindowingEngine

__all__ = [
    "Audio2FacePipeline",
    "MODEL_SAMPLE_RATE",
    "InferenceRunner",
    "OnnxInferenceRunner",
    "build_inputs",
    "OutputDecoder",
    "sigmoid",
    "clamp01",
    "TemporalSmoother",
    "WindowingEngine",
    "aggregate",
    "empty_result",
    "resample",
    "ARKIT_BLENDSHAPES",
    "NUM_BLENDSHAPES",
    "DEFAULT_OUTPUT_LAYOUT",
    "OutputLayout",
    "Blendshape",
    "EyeGaze",
    "Frame",
    "AggregateResult",
    "Audio2FaceError",
    "AudioDecodeError",
    "ModelNotLoadedError",
]

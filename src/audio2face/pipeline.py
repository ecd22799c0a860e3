"""
Audio2Face pipeline facade.

Wires the windowing engine, output decoder, temporal smoother and
aggregator around an injected inference runner, for two usage modes:

- process_file(): whole recording, resampled to the model rate, every full
  window scored and averaged into one AggregateResult.
- process_chunk(): incremental streaming, one window per call once the
  buffer is full, smoothed against the previous frame.

One pipeline serves one audio stream. Callers must not run calls on the
same instance concurrently; use one instance per stream.
"""

import time
from collections.abc import Sequence

import numpy as np

from core.logger import get_logger

from .aggregator import aggregate, empty_result
from .blendshapes import ARKIT_BLENDSHAPES, DEFAULT_OUTPUT_LAYOUT, OutputLayout
from .decoder import OutputDecoder
from .errors import ModelNotLoadedError
from .inference import InferenceRunner, build_inputs, first_output
from .resampler import resample
from .smoother import DEFAULT_SMOOTHING_FACTOR, TemporalSmoother
from .types import AggregateResult, Frame
from .windowing import DEFAULT_HOP_LENGTH, DEFAULT_WINDOW_LENGTH, WindowingEngine

logger = get_logger(__name__)

MODEL_SAMPLE_RATE = 16000


def _now_ms() -> float:
    return time.time() * 1000


class Audio2FacePipeline:
    """
    Streaming and batch audio to blendshape conversion.

    Owns the inference runner (when owns_runner is set), the sample buffer
    and the last emitted frame.
    """

    def __init__(
        self,
        runner: InferenceRunner | None = None,
        *,
        owns_runner: bool = True,
        sample_rate: int = MODEL_SAMPLE_RATE,
        window_length: int = DEFAULT_WINDOW_LENGTH,
        hop_length: int = DEFAULT_HOP_LENGTH,
        smoothing_factor: float = DEFAULT_SMOOTHING_FACTOR,
        names: Sequence[str] = ARKIT_BLENDSHAPES,
        layout: OutputLayout = DEFAULT_OUTPUT_LAYOUT,
        debug: bool = False,
    ):
        """
        Initialize the pipeline.

        Args:
            runner: Inference capability, may be attached later
            owns_runner: Release the runner on dispose()
            sample_rate: Rate the model expects
            window_length: Samples per inference window
            hop_length: Stride between windows
            smoothing_factor: Weight of the previous frame when streaming
            names: Canonical blendshape names
            layout: Raw model output layout
            debug: Enable per-window debug logging
        """
        self.sample_rate = sample_rate
        self.names = tuple(names)
        self.debug = debug

        self.engine = WindowingEngine(window_length=window_length, hop_length=hop_length)
        self.decoder = OutputDecoder(names=self.names, layout=layout)
        self.smoother = TemporalSmoother(smoothing_factor)

        self._runner: InferenceRunner | None = None
        self._owns_runner = owns_runner
        self._last_frame: Frame | None = None

        if runner is not None:
            self.attach(runner, owns_runner=owns_runner)

    def attach(self, runner: InferenceRunner, owns_runner: bool = True) -> None:
        """Attach the inference capability used for every window."""
        self._runner = runner
        self._owns_runner = owns_runner
        if self.debug:
            logger.debug(
                f"Runner attached: inputs={list(runner.input_names)}, "
                f"outputs={list(runner.output_names)}, backend={runner.backend}"
            )

    @property
    def is_ready(self) -> bool:
        """True once an inference runner is attached."""
        return self._runner is not None

    @property
    def backend(self) -> str | None:
        """Execution backend reported by the runner, if attached."""
        return self._runner.backend if self._runner is not None else None

    @property
    def smoothing_factor(self) -> float:
        return self.smoother.smoothing_factor

    @property
    def last_frame(self) -> Frame | None:
        """Most recent streaming frame, or None before the first window."""
        return self._last_frame

    def set_smoothing_factor(self, factor: float) -> None:
        """Set the streaming smoothing factor, clamped to [0, 1]."""
        self.smoother.smoothing_factor = factor

    def empty_frame(self) -> Frame:
        """All-zero frame over the canonical names, without eye gaze."""
        result = empty_result(self.names)
        return Frame(blendshapes=result.blendshapes, jaw=0.0, eyes=None, timestamp=result.timestamp)

    def _require_runner(self) -> InferenceRunner:
        if self._runner is None:
            raise ModelNotLoadedError()
        return self._runner

    async def _infer(self, runner: InferenceRunner, window: np.ndarray) -> Frame:
        """Score one window and decode the raw output."""
        outputs = await runner.run(build_inputs(window, runner.input_names))
        raw = first_output(outputs, runner.output_names)
        if self.debug:
            logger.debug(f"Window of {window.shape[0]} samples -> {raw.shape[0]} raw values")
        return self.decoder.decode(raw, _now_ms())

    async def process_file(self, samples: np.ndarray, source_rate: int) -> AggregateResult:
        """
        Convert a complete recording into one aggregated result.

        Args:
            samples: Mono float samples
            source_rate: Sample rate of samples

        Returns:
            Mean blendshapes and jaw over all full windows, eye gaze of the
            last window, and the window count

        Raises:
            ModelNotLoadedError: If no runner is attached
        """
        runner = self._require_runner()

        samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        if source_rate != self.sample_rate:
            samples = resample(samples, source_rate, self.sample_rate)

        num_windows = self.engine.count_windows(samples.shape[0])
        if num_windows == 0:
            logger.warning(
                f"Recording of {samples.shape[0]} samples is shorter than one window "
                f"({self.engine.window_length}); returning empty result"
            )
        else:
            logger.info(f"Processing {samples.shape[0]} samples as {num_windows} windows")

        frames = []
        for window in self.engine.iter_windows(samples):
            frames.append(await self._infer(runner, window))
        return aggregate(frames, self.names)

    async def process_chunk(self, samples: np.ndarray) -> Frame:
        """
        Feed a streaming chunk already at the model rate.

        Until a full window is buffered, the last frame (or the empty
        frame) is returned without running inference. Afterwards each call
        scores exactly one window, smooths it against the previous frame
        and shifts the buffer by one hop. If inference fails the buffer and
        last frame are left as they were.

        Args:
            samples: Mono float samples at the model rate

        Returns:
            The current, possibly smoothed, frame

        Raises:
            ModelNotLoadedError: If no runner is attached
        """
        runner = self._require_runner()

        window = self.engine.feed(samples)
        if window is None:
            return self._last_frame if self._last_frame is not None else self.empty_frame()

        try:
            frame = await self._infer(runner, window)
        except BaseException:
            self.engine.discard()
            raise

        if self._last_frame is not None:
            smoothed = self.smoother.smooth(self._last_frame.blendshapes, frame.blendshapes)
            frame = Frame(blendshapes=smoothed, jaw=frame.jaw, eyes=frame.eyes, timestamp=frame.timestamp)

        self.engine.consume()
        self._last_frame = frame
        return frame

    def reset(self) -> None:
        """Clear the sample buffer and last frame, keeping the runner."""
        self.engine.reset()
        self._last_frame = None

    def dispose(self) -> None:
        """Detach the runner (releasing it when owned) and clear all state."""
        if self._runner is not None and self._owns_runner:
            self._runner.release()
        self._runner = None
        self.reset()

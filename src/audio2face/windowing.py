"""
Fixed-length overlapping windowing of audio.

Two modes share one engine:

- Batch: iter_windows() walks a complete recording with a fixed hop and
  drops the trailing samples that do not fill a whole window.
- Streaming: feed() appends to a rolling buffer. Once the buffer holds a
  full window, the window is handed out and the buffer is held pending
  until the caller reports the inference result with consume() (shift by
  one hop) or discard() (leave the buffer as it was before the call).

Buffer states: Empty -> Filling -> Ready -> Filling (with overlap residual).
"""

from collections.abc import Iterator

import numpy as np

from core.logger import get_logger

logger = get_logger(__name__)

DEFAULT_WINDOW_LENGTH = 8320
DEFAULT_HOP_LENGTH = 4160


class WindowingEngine:
    """
    Rolling sample buffer that slices overlapping windows.

    Owned by a single pipeline; not safe for concurrent use.
    """

    def __init__(
        self,
        window_length: int = DEFAULT_WINDOW_LENGTH,
        hop_length: int = DEFAULT_HOP_LENGTH,
    ):
        """
        Initialize the windowing engine.

        Args:
            window_length: Samples per window
            hop_length: Stride between window starts, must be below window_length

        Raises:
            ValueError: If the lengths do not satisfy 0 < hop_length < window_length
        """
        if not 0 < hop_length < window_length:
            raise ValueError(
                f"hop_length must be in (0, window_length), got hop={hop_length}, window={window_length}"
            )

        self.window_length = window_length
        self.hop_length = hop_length
        self._buffer = np.zeros(0, dtype=np.float32)
        self._pending: np.ndarray | None = None

    @property
    def buffered(self) -> int:
        """Number of samples currently held in the buffer."""
        return int(self._buffer.shape[0])

    @property
    def is_ready(self) -> bool:
        """True when the buffer holds at least one full window."""
        return self.buffered >= self.window_length

    def count_windows(self, num_samples: int) -> int:
        """Number of full windows iter_windows() yields for num_samples samples."""
        if num_samples < self.window_length:
            return 0
        return (num_samples - self.window_length) // self.hop_length + 1

    def iter_windows(self, samples: np.ndarray) -> Iterator[np.ndarray]:
        """
        Yield every full window of a complete recording.

        Args:
            samples: Mono float samples at the model rate

        Yields:
            Copies of samples[start:start + window_length] for start = 0, hop, 2*hop, ...
        """
        samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        last_start = samples.shape[0] - self.window_length
        for start in range(0, last_start + 1, self.hop_length):
            yield samples[start:start + self.window_length].copy()

    def feed(self, samples: np.ndarray) -> np.ndarray | None:
        """
        Append samples and return the next window when one is available.

        While filling, the samples are committed to the buffer and None is
        returned. When a window is returned, the grown buffer is held
        pending: call consume() after a successful inference or discard()
        after a failed one.

        Args:
            samples: New mono float samples at the model rate

        Returns:
            A copy of the first window_length samples, or None while filling
        """
        if self._pending is not None:
            raise RuntimeError("Previous window was neither consumed nor discarded")

        samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        staged = np.concatenate([self._buffer, samples])

        if staged.shape[0] < self.window_length:
            self._buffer = staged
            return None

        self._pending = staged
        return staged[: self.window_length].copy()

    def consume(self) -> None:
        """Commit the pending buffer, dropping one hop from its front."""
        if self._pending is None:
            return
        self._buffer = self._pending[self.hop_length:].copy()
        self._pending = None
        if self.is_ready:
            logger.debug(f"Streaming backlog: {self._buffer.shape[0]} samples buffered after window")

    def discard(self) -> None:
        """Drop the pending buffer, keeping the buffer as it was before feed()."""
        self._pending = None

    def reset(self) -> None:
        """Empty the buffer."""
        self._buffer = np.zeros(0, dtype=np.float32)
        self._pending = None

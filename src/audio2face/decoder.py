"""
Decoding of raw model output into Frames.

The raw output is a flat float vector whose regions are described by an
OutputLayout. Blendshape and jaw values go through a scaled sigmoid and
are clamped to [0, 1]; eye gaze values are passed through untouched.
Reads past the end of the vector count as zero, so a model that emits a
shorter vector than expected still yields a complete Frame.
"""

from collections.abc import Sequence

import numpy as np

from .blendshapes import ARKIT_BLENDSHAPES, DEFAULT_OUTPUT_LAYOUT, OutputLayout
from .types import Blendshape, EyeGaze, Frame

# Raw logits are scaled down before the sigmoid
LOGIT_SCALE = 0.1


def sigmoid(x):
    """Logistic function, elementwise for arrays."""
    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=np.float64)))


def clamp01(x):
    """Clamp to [0, 1], elementwise for arrays."""
    return np.clip(x, 0.0, 1.0)


def to_weight(raw):
    """Map raw logits to perceptual weights in [0, 1]. NaN maps to 0.5."""
    raw = np.nan_to_num(np.asarray(raw, dtype=np.float64), nan=0.0)
    return clamp01(sigmoid(raw * LOGIT_SCALE))


def read_region(raw: np.ndarray, offset: int, size: int) -> np.ndarray:
    """Copy raw[offset:offset + size], zero-filling anything out of range."""
    region = np.zeros(max(size, 0), dtype=np.float64)
    available = raw[offset:offset + size]
    region[: available.shape[0]] = available
    return np.nan_to_num(region, nan=0.0, posinf=np.inf, neginf=-np.inf)


class OutputDecoder:
    """Turns one raw model output vector into a Frame."""

    def __init__(
        self,
        names: Sequence[str] = ARKIT_BLENDSHAPES,
        layout: OutputLayout = DEFAULT_OUTPUT_LAYOUT,
    ):
        self.names = tuple(names)
        self.layout = layout

    @property
    def num_blendshapes(self) -> int:
        """Number of blendshapes produced per frame."""
        return min(len(self.names), self.layout.skin_size)

    def regions(self, raw) -> dict[str, np.ndarray]:
        """Split a raw output vector into its named regions (zero-filled)."""
        raw = np.asarray(raw, dtype=np.float64).reshape(-1)
        layout = self.layout
        return {
            "skin": read_region(raw, layout.skin_offset, layout.skin_size),
            "tongue": read_region(raw, layout.tongue_offset, layout.tongue_size),
            "jaw": read_region(raw, layout.jaw_offset, layout.jaw_size),
            "eyes": read_region(raw, layout.eyes_offset, layout.eyes_size),
        }

    def decode(self, raw, timestamp: float) -> Frame:
        """
        Decode a raw output vector.

        Args:
            raw: Flat model output for one window
            timestamp: Capture time in epoch milliseconds

        Returns:
            Frame with clamped blendshapes and jaw, and raw eye gaze
        """
        raw = np.asarray(raw, dtype=np.float64).reshape(-1)
        layout = self.layout

        skin = read_region(raw, layout.skin_offset, self.num_blendshapes)
        weights = to_weight(skin)
        blendshapes = tuple(
            Blendshape(name=name, value=float(value))
            for name, value in zip(self.names, weights)
        )

        jaw_raw = read_region(raw, layout.jaw_offset, 1)
        jaw = float(to_weight(jaw_raw[0]))

        eyes_raw = read_region(raw, layout.eyes_offset, 4)
        eyes = EyeGaze(
            left_x=float(eyes_raw[0]),
            left_y=float(eyes_raw[1]),
            right_x=float(eyes_raw[2]),
            right_y=float(eyes_raw[3]),
        )

        return Frame(blendshapes=blendshapes, jaw=jaw, eyes=eyes, timestamp=timestamp)

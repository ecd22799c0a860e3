"""
Batch aggregation of per-window frames.

Blendshapes and jaw are averaged across all windows. Eye gaze is taken
from the last frame only: gaze is treated as a discrete pose rather than a
signal to average over a whole file.
"""

import time
from collections.abc import Sequence

import numpy as np

from core.logger import get_logger

from .blendshapes import ARKIT_BLENDSHAPES
from .types import AggregateResult, Blendshape, Frame

logger = get_logger(__name__)


def empty_result(names: Sequence[str] = ARKIT_BLENDSHAPES) -> AggregateResult:
    """All-zero result over the given blendshape names, with no eye gaze."""
    return AggregateResult(
        blendshapes=tuple(Blendshape(name=name, value=0.0) for name in names),
        jaw=0.0,
        eyes=None,
        timestamp=time.time() * 1000,
        frame_count=0,
    )


def aggregate(
    frames: Sequence[Frame],
    names: Sequence[str] = ARKIT_BLENDSHAPES,
) -> AggregateResult:
    """
    Reduce per-window frames to one summary frame.

    Args:
        frames: Decoded frames in window order
        names: Blendshape names used for the empty result

    Returns:
        AggregateResult with index-aligned mean blendshapes, mean jaw,
        eyes of the last frame and the number of frames
    """
    if not frames:
        return empty_result(names)

    last = frames[-1]
    num_bs = len(frames[0].blendshapes)

    if any(len(frame.blendshapes) != num_bs for frame in frames):
        logger.warning("Frames differ in blendshape count, using the last frame unaveraged")
        return AggregateResult(
            blendshapes=last.blendshapes,
            jaw=last.jaw,
            eyes=last.eyes,
            timestamp=last.timestamp,
            frame_count=len(frames),
        )

    values = np.array([[bs.value for bs in frame.blendshapes] for frame in frames], dtype=np.float64)
    means = values.mean(axis=0)

    blendshapes = tuple(
        Blendshape(name=bs.name, value=float(mean))
        for bs, mean in zip(frames[0].blendshapes, means)
    )
    jaw = float(np.mean([frame.jaw for frame in frames]))

    return AggregateResult(
        blendshapes=blendshapes,
        jaw=jaw,
        eyes=last.eyes,
        timestamp=last.timestamp,
        frame_count=len(frames),
    )

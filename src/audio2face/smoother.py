"""Temporal smoothing of streamed blendshape frames.

A single-pole IIR low-pass per blendshape channel:

    value[t] = alpha * value[t-1] + (1 - alpha) * input[t]

alpha is the weight of the previous frame, so a larger alpha gives smoother
(but slower) motion. Only the streaming path smooths; batch aggregation
averages instead.
"""

from collections.abc import Sequence

from .types import Blendshape

DEFAULT_SMOOTHING_FACTOR = 0.3


class TemporalSmoother:
    """Blends consecutive blendshape frames index by index.

    Attributes:
        smoothing_factor: Weight of the previous frame, clamped to [0, 1].
    """

    def __init__(self, smoothing_factor: float = DEFAULT_SMOOTHING_FACTOR):
        self.smoothing_factor = smoothing_factor

    @property
    def smoothing_factor(self) -> float:
        return self._alpha

    @smoothing_factor.setter
    def smoothing_factor(self, value: float) -> None:
        self._alpha = max(0.0, min(1.0, float(value)))

    def smooth(
        self,
        prev: Sequence[Blendshape] | None,
        curr: Sequence[Blendshape],
    ) -> tuple[Blendshape, ...]:
        """Blend the previous frame's blendshapes into the current ones.

        Channels are matched by position, not by name. When there is no
        previous frame, or the two frames differ in length, the current
        blendshapes are returned unchanged.

        Args:
            prev: Blendshapes of the previously emitted frame, if any.
            curr: Blendshapes of the newly decoded frame.

        Returns:
            Smoothed blendshapes carrying the names from curr.
        """
        curr = tuple(curr)
        if prev is None or len(prev) != len(curr):
            return curr

        alpha = self._alpha
        return tuple(
            Blendshape(name=bs.name, value=_blend(p.value, bs.value, alpha))
            for p, bs in zip(prev, curr)
        )


def _blend(prev: float, curr: float, alpha: float) -> float:
    # Equal inputs come back unchanged; result stays within [0, 1]
    return max(0.0, min(1.0, curr + alpha * (prev - curr)))

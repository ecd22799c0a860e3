"""
Value objects produced by the Audio2Face pipeline.

All of them are immutable once built. to_dict() returns the JSON shape
sent to clients (camelCase keys, as the widget expects).
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Blendshape:
    """A named weight in [0, 1] driving one facial deformation target."""

    name: str
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class EyeGaze:
    """Raw eye gaze values, passed through without clamping."""

    left_x: float = 0.0
    left_y: float = 0.0
    right_x: float = 0.0
    right_y: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "leftX": self.left_x,
            "leftY": self.left_y,
            "rightX": self.right_x,
            "rightY": self.right_y,
        }


@dataclass(frozen=True)
class Frame:
    """
    Decoded result of one inference window.

    Attributes:
        blendshapes: Weights in canonical blendshape order
        jaw: Jaw openness in [0, 1]
        eyes: Eye gaze, or None when unknown
        timestamp: Capture time in epoch milliseconds
    """

    blendshapes: tuple[Blendshape, ...]
    jaw: float
    eyes: EyeGaze | None
    timestamp: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "blendshapes": [bs.to_dict() for bs in self.blendshapes],
            "jaw": self.jaw,
            "eyes": self.eyes.to_dict() if self.eyes is not None else None,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class AggregateResult(Frame):
    """Summary of a whole file: a Frame plus the number of windows it covers."""

    frame_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["frameCount"] = self.frame_count
        return data

"""
Blendshape name table and raw model output layout.

The model emits one flat float vector per window. Its sub-ranges (skin,
tongue, jaw, eyes) are a fixed contract of the model version and are
described by OutputLayout rather than by indices scattered through the
decoder.
"""

from dataclasses import dataclass

# Canonical blendshape order. Index i pairs with skin output value i.
ARKIT_BLENDSHAPES: tuple[str, ...] = (
    "browInnerUp", "browDownLeft", "browDownRight", "browOuterUpLeft",
    "browOuterUpRight", "eyeLookUpLeft", "eyeLookUpRight", "eyeLookDownLeft",
    "eyeLookDownRight", "eyeLookInLeft", "eyeLookInRight", "eyeLookOutLeft",
    "eyeLookOutRight", "eyeBlinkLeft", "eyeBlinkRight", "eyeSquintLeft",
    "eyeSquintRight", "eyeWideLeft", "eyeWideRight", "cheekPuff",
    "cheekSquintLeft", "cheekSquintRight", "noseSneerLeft", "noseSneerRight",
    "jawOpen", "jawForward", "jawLeft", "jawRight",
    "mouthFunnel", "mouthPucker", "mouthLeft", "mouthRight",
    "mouthRollUpper", "mouthRollLower", "mouthShrugUpper", "mouthShrugLower",
    "mouthOpen", "mouthClose", "mouthSmileLeft", "mouthSmileRight",
    "mouthFrownLeft", "mouthFrownRight", "mouthDimpleLeft", "mouthDimpleRight",
    "mouthUpperUpLeft", "mouthUpperUpRight", "mouthLowerDownLeft", "mouthLowerDownRight",
    "mouthPressLeft", "mouthPressRight", "mouthStretchLeft", "mouthStretchRight",
)

NUM_BLENDSHAPES = len(ARKIT_BLENDSHAPES)


@dataclass(frozen=True)
class OutputLayout:
    """Offsets and sizes of the named regions in the raw model output."""

    skin_offset: int = 0
    skin_size: int = 140
    tongue_offset: int = 140
    tongue_size: int = 10
    jaw_offset: int = 150
    jaw_size: int = 15
    eyes_offset: int = 165
    eyes_size: int = 4

    @property
    def total_size(self) -> int:
        """Minimum raw vector length that covers every region."""
        return max(
            self.skin_offset + self.skin_size,
            self.tongue_offset + self.tongue_size,
            self.jaw_offset + self.jaw_size,
            self.eyes_offset + self.eyes_size,
        )


DEFAULT_OUTPUT_LAYOUT = OutputLayout()

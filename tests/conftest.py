"""Shared fixtures: an in-memory inference runner standing in for the ONNX model."""

import numpy as np
import pytest

from audio2face.blendshapes import DEFAULT_OUTPUT_LAYOUT


class FakeRunner:
    """
    InferenceRunner returning scripted raw outputs.

    outputs: list of raw vectors returned in order (the last one repeats),
    or None for an all-zero vector of the default layout size.
    """

    def __init__(self, outputs=None, input_names=("audio",), output_names=("output",), fail=False):
        self._outputs = [np.asarray(o, dtype=np.float32) for o in (outputs or [])]
        self._input_names = list(input_names)
        self._output_names = list(output_names)
        self.fail = fail
        self.calls = []
        self.released = False

    @property
    def input_names(self):
        return self._input_names

    @property
    def output_names(self):
        return self._output_names

    @property
    def backend(self):
        return "fake"

    async def run(self, inputs):
        self.calls.append({name: np.array(tensor) for name, tensor in inputs.items()})
        if self.fail:
            raise RuntimeError("inference exploded")
        if self._outputs:
            index = min(len(self.calls) - 1, len(self._outputs) - 1)
            raw = self._outputs[index]
        else:
            raw = np.zeros(DEFAULT_OUTPUT_LAYOUT.total_size, dtype=np.float32)
        return {self._output_names[0]: raw.reshape(1, -1)}

    def release(self):
        self.released = True


def raw_output(skin=0.0, jaw=0.0, eyes=(0.0, 0.0, 0.0, 0.0), layout=DEFAULT_OUTPUT_LAYOUT):
    """Build a raw output vector with constant skin and jaw logits."""
    raw = np.zeros(layout.total_size, dtype=np.float32)
    raw[layout.skin_offset:layout.skin_offset + layout.skin_size] = skin
    raw[layout.jaw_offset:layout.jaw_offset + layout.jaw_size] = jaw
    raw[layout.eyes_offset:layout.eyes_offset + 4] = eyes
    return raw


@pytest.fixture
def fake_runner():
    return FakeRunner()

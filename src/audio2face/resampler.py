"""
Linear-interpolation sample-rate conversion.

Used to bring decoded files and widget audio to the 16kHz rate the model
expects. Pure function, no state.
"""

import numpy as np


def resample(samples: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
    """
    Resample audio by linear interpolation between neighbouring samples.

    Output length is floor(len(samples) * to_rate / from_rate). Positions at
    or past the last input sample repeat the last sample (no extrapolation).

    Args:
        samples: Mono audio samples
        from_rate: Sample rate of the input
        to_rate: Desired sample rate

    Returns:
        Resampled audio as float32
    """
    samples = np.asarray(samples, dtype=np.float32).reshape(-1)
    num_samples = samples.shape[0]
    out_len = (num_samples * int(to_rate)) // int(from_rate)

    if out_len <= 0 or num_samples == 0:
        return np.zeros(0, dtype=np.float32)

    source = samples.astype(np.float64)
    pos = np.arange(out_len, dtype=np.float64) * from_rate / to_rate
    idx = np.floor(pos).astype(np.int64)
    frac = pos - idx

    lo = np.clip(idx, 0, num_samples - 1)
    hi = np.clip(idx + 1, 0, num_samples - 1)
    interpolated = source[lo] * (1.0 - frac) + source[hi] * frac

    # Edge clamp
    out = np.where(idx >= num_samples - 1, source[-1], interpolated)
    return out.astype(np.float32)

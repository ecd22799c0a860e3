"""
Tests for the windowing engine (batch and streaming modes).
"""

import hypothesis.strategies as st
import numpy as np
import pytest
from hypothesis import given, settings

from audio2face.windowing import DEFAULT_HOP_LENGTH, DEFAULT_WINDOW_LENGTH, WindowingEngine


class TestConstruction:

    def test_defaults(self):
        engine = WindowingEngine()
        assert engine.window_length == DEFAULT_WINDOW_LENGTH == 8320
        assert engine.hop_length == DEFAULT_HOP_LENGTH == 4160
        assert engine.buffered == 0
        assert not engine.is_ready

    @pytest.mark.parametrize("window,hop", [(100, 0), (100, 100), (100, 150), (100, -5)])
    def test_invalid_hop_rejected(self, window, hop):
        with pytest.raises(ValueError):
            WindowingEngine(window_length=window, hop_length=hop)


class TestBatchWindows:

    def test_window_plus_hop_gives_two_windows(self):
        engine = WindowingEngine()
        samples = np.arange(12480, dtype=np.float32)
        windows = list(engine.iter_windows(samples))

        assert len(windows) == 2 == engine.count_windows(12480)
        assert windows[0][0] == 0 and windows[0][-1] == 8319
        assert windows[1][0] == 4160 and windows[1][-1] == 12479

    def test_exact_window(self):
        engine = WindowingEngine()
        assert len(list(engine.iter_windows(np.zeros(8320)))) == 1

    def test_short_input_yields_nothing(self):
        engine = WindowingEngine()
        assert list(engine.iter_windows(np.zeros(8319))) == []
        assert engine.count_windows(8319) == 0

    def test_trailing_samples_dropped(self):
        engine = WindowingEngine(window_length=10, hop_length=4)
        windows = list(engine.iter_windows(np.arange(21, dtype=np.float32)))
        assert [w[0] for w in windows] == [0, 4, 8]
        assert all(len(w) == 10 for w in windows)

    def test_windows_are_copies(self):
        engine = WindowingEngine(window_length=4, hop_length=2)
        samples = np.zeros(8, dtype=np.float32)
        window = next(engine.iter_windows(samples))
        window[:] = 1.0
        assert samples.sum() == 0.0

    @settings(max_examples=100)
    @given(
        num_samples=st.integers(min_value=0, max_value=400),
        window=st.integers(min_value=2, max_value=60),
        hop_ratio=st.floats(min_value=0.05, max_value=0.95),
    )
    def test_count_matches_iteration(self, num_samples, window, hop_ratio):
        hop = min(window - 1, max(1, int(window * hop_ratio)))
        engine = WindowingEngine(window_length=window, hop_length=hop)
        windows = list(engine.iter_windows(np.zeros(num_samples, dtype=np.float32)))
        assert len(windows) == engine.count_windows(num_samples)
        assert all(len(w) == window for w in windows)


class TestStreaming:

    def test_filling_returns_none_and_keeps_samples(self):
        engine = WindowingEngine(window_length=10, hop_length=5)
        assert engine.feed(np.ones(4)) is None
        assert engine.feed(np.ones(5)) is None
        assert engine.buffered == 9
        assert not engine.is_ready

    def test_window_then_consume_keeps_overlap(self):
        engine = WindowingEngine(window_length=10, hop_length=5)
        engine.feed(np.arange(6, dtype=np.float32))
        window = engine.feed(np.arange(6, 12, dtype=np.float32))

        np.testing.assert_array_equal(window, np.arange(10))
        engine.consume()

        assert engine.buffered == 7
        next_window = engine.feed(np.arange(12, 15, dtype=np.float32))
        np.testing.assert_array_equal(next_window, np.arange(5, 15))

    def test_discard_restores_previous_buffer(self):
        engine = WindowingEngine(window_length=10, hop_length=5)
        engine.feed(np.ones(6))
        assert engine.feed(np.ones(6)) is not None
        engine.discard()
        assert engine.buffered == 6

    def test_feed_while_pending_is_an_error(self):
        engine = WindowingEngine(window_length=4, hop_length=2)
        engine.feed(np.ones(4))
        with pytest.raises(RuntimeError):
            engine.feed(np.ones(1))

    def test_reset(self):
        engine = WindowingEngine(window_length=4, hop_length=2)
        engine.feed(np.ones(3))
        engine.reset()
        assert engine.buffered == 0

    @settings(max_examples=100)
    @given(chunk_sizes=st.lists(st.integers(min_value=0, max_value=DEFAULT_HOP_LENGTH), max_size=40))
    def test_buffer_below_window_after_each_consume(self, chunk_sizes):
        """With chunks no larger than a hop, the buffer never holds a full window after a shift."""
        engine = WindowingEngine()
        for size in chunk_sizes:
            window = engine.feed(np.zeros(size, dtype=np.float32))
            if window is not None:
                assert len(window) == engine.window_length
                engine.consume()
            assert 0 <= engine.buffered < engine.window_length

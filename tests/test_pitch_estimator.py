"""Unit tests for autocorrelation F0 estimation."""

from __future__ import annotations

import unittest

import numpy as np

from speech_segmenter.segmentation.pitch import estimate_f0, estimate_f0_from_frame

SR = 16_000


def _tone(freq: float, duration: float, amplitude: float = 0.5, sample_rate: int = SR) -> np.ndarray:
    t = np.arange(int(duration * sample_rate)) / sample_rate
    return amplitude * np.sin(2 * np.pi * freq * t)


class TestPitchEstimator(unittest.TestCase):
    """Tests for estimate_f0 / estimate_f0_from_frame."""

    def test_pure_150hz_tone(self) -> None:
        """A 150 Hz tone at 16 kHz is estimated within 1%."""
        audio = _tone(150, 1.0)
        f0 = estimate_f0(audio, 0.0, 1.0, SR, 75, 300)
        self.assertIsNotNone(f0)
        self.assertLess(abs(f0 - 150) / 150, 0.01)

    def test_segment_inside_longer_buffer(self) -> None:
        """Only the [start, end) slice is analysed."""
        audio = np.concatenate([np.zeros(SR), _tone(200, 0.5), np.zeros(SR)])
        f0 = estimate_f0(audio, 1.0, 1.5, SR, 75, 300)
        self.assertIsNotNone(f0)
        self.assertLess(abs(f0 - 200) / 200, 0.01)

    def test_exact_period(self) -> None:
        """100 Hz at 16 kHz has an integer period of 160 samples."""
        f0 = estimate_f0_from_frame(_tone(100, 0.5), SR, 75, 300)
        self.assertAlmostEqual(f0, 100.0)

    def test_too_short_returns_none(self) -> None:
        """Fewer than 400 samples is insufficient data."""
        self.assertIsNone(estimate_f0_from_frame(_tone(150, 399 / SR), SR, 75, 300))
        self.assertIsNone(estimate_f0(_tone(150, 1.0), 0.0, 0.02, SR, 75, 300))

    def test_custom_minimum(self) -> None:
        audio = _tone(150, 0.05)
        self.assertIsNone(estimate_f0_from_frame(audio, SR, 75, 300, min_samples=len(audio) + 1))
        self.assertIsNotNone(estimate_f0_from_frame(audio, SR, 75, 300, min_samples=len(audio)))

    def test_silence_returns_none(self) -> None:
        """No positive correlation, no estimate."""
        self.assertIsNone(estimate_f0_from_frame(np.zeros(SR), SR, 75, 300))

    def test_no_candidate_lag_returns_none(self) -> None:
        """When len / 2 is below the smallest lag there is nothing to test."""
        audio = _tone(20, 0.03)  # 480 samples
        # 40-50 Hz means lags from 320, all above len / 2
        self.assertIsNone(estimate_f0_from_frame(audio, SR, 40, 50))

    def test_result_within_search_range(self) -> None:
        """The estimate stays inside [f0_min, f0_max] bounds implied by the lags."""
        rng = np.random.default_rng(3)
        noise = rng.normal(0, 0.3, SR // 2)
        f0 = estimate_f0_from_frame(noise, SR, 75, 300)
        if f0 is not None:
            self.assertGreaterEqual(f0, 75)
            self.assertLessEqual(f0, SR / (SR // 300))


if __name__ == "__main__":
    unittest.main()

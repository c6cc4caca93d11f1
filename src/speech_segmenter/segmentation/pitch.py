"""F0 estimation by time-domain autocorrelation.

Brute force over the lag range implied by [f0_min, f0_max]; segments are
short (seconds) and the range narrow (75-300 Hz typical), so one numpy dot
product per candidate lag is cheap enough.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

# Slices shorter than this are too short to estimate reliably
MIN_PITCH_SAMPLES = 400


def estimate_f0_from_frame(
    segment: np.ndarray,
    sample_rate: int,
    f0_min: float,
    f0_max: float,
    min_samples: int = MIN_PITCH_SAMPLES,
) -> Optional[float]:
    """Estimate F0 (Hz) of an already sliced segment, or None.

    Lags run over [floor(sr / f0_max), min(floor(sr / f0_min), len / 2)).
    Each lag scores sum(x[i] * x[i + lag]) over the valid overlap; the best
    lag wins. None when the segment is shorter than `min_samples`, when no
    candidate lag exists, or when the best correlation is not positive.
    """
    n = len(segment)
    if n < min_samples:
        return None

    x = np.asarray(segment, dtype=np.float64)
    min_lag = max(1, math.floor(sample_rate / f0_max))
    max_lag = math.floor(sample_rate / f0_min)
    # lag < n / 2, with n / 2 possibly fractional
    upper = min(max_lag, (n + 1) // 2)

    best_corr = -math.inf
    best_lag = 0
    for lag in range(min_lag, upper):
        corr = float(np.dot(x[: n - lag], x[lag:]))
        if corr > best_corr:
            best_corr = corr
            best_lag = lag

    if best_lag == 0 or best_corr <= 0:
        return None
    return sample_rate / best_lag


def estimate_f0(
    samples: np.ndarray,
    start_time: float,
    end_time: float,
    sample_rate: int,
    f0_min: float,
    f0_max: float,
    min_samples: int = MIN_PITCH_SAMPLES,
) -> Optional[float]:
    """Estimate F0 of samples[floor(start * sr):floor(end * sr)], or None."""
    lo = max(0, math.floor(start_time * sample_rate))
    hi = min(len(samples), math.floor(end_time * sample_rate))
    segment = samples[lo:hi] if hi > lo else samples[0:0]
    f0 = estimate_f0_from_frame(segment, sample_rate, f0_min, f0_max, min_samples)
    logger.debug("F0 %.3f-%.3fs: %s", start_time, end_time, f0)
    return f0

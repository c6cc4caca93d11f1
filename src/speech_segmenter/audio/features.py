"""Frame features: short-time energy, zero-crossing rate, spectral centroid."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

import numpy as np

from speech_segmenter.audio.config import FrameConfig
from speech_segmenter.audio.signal import SampleBuffer


@dataclass(frozen=True)
class FeatureVector:
    """Features of a single frame."""

    time: float
    energy: float
    zero_crossing_rate: float
    spectral_centroid: float
    is_voiced: bool


@dataclass(frozen=True, eq=False)
class FrameFeatures:
    """Column-wise features for a run of frames (one row per frame)."""

    times: np.ndarray
    energy: np.ndarray
    zcr: np.ndarray
    centroid: np.ndarray
    voiced: np.ndarray

    def __len__(self) -> int:
        return int(self.times.shape[0])

    def vectors(self) -> Iterator[FeatureVector]:
        """Yield one FeatureVector per frame, in time order."""
        for t, e, z, c, v in zip(self.times, self.energy, self.zcr, self.centroid, self.voiced):
            yield FeatureVector(
                time=float(t),
                energy=float(e),
                zero_crossing_rate=float(z),
                spectral_centroid=float(c),
                is_voiced=bool(v),
            )

    @classmethod
    def empty(cls) -> "FrameFeatures":
        return cls(
            times=np.zeros(0),
            energy=np.zeros(0),
            zcr=np.zeros(0),
            centroid=np.zeros(0),
            voiced=np.zeros(0, dtype=bool),
        )

    @classmethod
    def concatenate(cls, parts: Sequence["FrameFeatures"]) -> "FrameFeatures":
        if not parts:
            return cls.empty()
        return cls(
            times=np.concatenate([p.times for p in parts]),
            energy=np.concatenate([p.energy for p in parts]),
            zcr=np.concatenate([p.zcr for p in parts]),
            centroid=np.concatenate([p.centroid for p in parts]),
            voiced=np.concatenate([p.voiced for p in parts]),
        )


def frame_starts(n_samples: int, frame_length: int, hop_length: int) -> np.ndarray:
    """Start indices of every frame; the last start is < n_samples - frame_length."""
    if frame_length < 1 or n_samples - frame_length <= 0:
        return np.zeros(0, dtype=np.int64)
    return np.arange(0, n_samples - frame_length, hop_length, dtype=np.int64)


def compute_frame_features(
    samples: np.ndarray,
    sample_rate: int,
    starts: np.ndarray,
    frame_length: int,
    voiced_energy_cutoff: float,
) -> FrameFeatures:
    """Compute features for the frames beginning at `starts`.

    Args:
        samples: Mono samples, shape (n_samples,).
        sample_rate: Sample rate in Hz.
        starts: Frame start indices; every frame must fit inside samples.
        frame_length: Frame length in samples.
        voiced_energy_cutoff: Frames with energy above this are voiced.

    Returns:
        FrameFeatures with one row per start.
    """
    if len(starts) == 0:
        return FrameFeatures.empty()

    frames = samples[starts[:, None] + np.arange(frame_length)[None, :]]

    energy = np.mean(frames * frames, axis=1)

    # Sign change between x >= 0 and x < 0
    non_negative = frames >= 0
    crossings = np.count_nonzero(non_negative[:, 1:] != non_negative[:, :-1], axis=1)
    zcr = crossings / frame_length

    # Time-domain proxy: magnitude-weighted bin frequency, not an FFT
    magnitude = np.abs(frames)
    freqs = np.arange(frame_length) * sample_rate / frame_length
    weighted = magnitude @ freqs
    total = magnitude.sum(axis=1)
    centroid = np.divide(weighted, total, out=np.zeros_like(weighted), where=total > 0)

    return FrameFeatures(
        times=starts / sample_rate,
        energy=energy,
        zcr=zcr,
        centroid=centroid,
        voiced=energy > voiced_energy_cutoff,
    )


def extract_features(
    buffer: SampleBuffer,
    config: Optional[FrameConfig] = None,
) -> FrameFeatures:
    """Features for every frame of a buffer (batch)."""
    config = config or FrameConfig()
    frame_length = config.frame_length(buffer.sample_rate)
    starts = frame_starts(len(buffer), frame_length, config.hop_length(buffer.sample_rate))
    return compute_frame_features(
        buffer.samples,
        buffer.sample_rate,
        starts,
        frame_length,
        config.voiced_energy_cutoff,
    )

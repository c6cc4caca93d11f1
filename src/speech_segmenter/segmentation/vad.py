"""VAD segmenter: runs of voiced frames become segments.

Frames are 25 ms with a 10 ms hop (derived from the sample rate). A frame
is voiced when its mean energy exceeds a fixed cutoff. Zero-crossing rate
and spectral centroid are computed alongside and returned as diagnostics;
they do not take part in the voiced decision.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from speech_segmenter.audio.config import FrameConfig
from speech_segmenter.audio.features import FrameFeatures, compute_frame_features, frame_starts
from speech_segmenter.segmentation.types import ProvisionalSegment, Scan, drain, percent

logger = logging.getLogger(__name__)

DEFAULT_FRAME_STRIDE = 1_000


@dataclass
class VoicingResult:
    """Segments plus the per-frame features they were derived from."""

    segments: List[ProvisionalSegment]
    features: FrameFeatures = field(default_factory=FrameFeatures.empty)


@dataclass
class _RunState:
    """Open run of consecutive voiced frames."""

    min_frames: int
    start: Optional[float] = None
    last: float = 0.0
    length: int = 0

    def extend(self, time: float) -> None:
        if self.start is None:
            self.start = time
            self.length = 0
        self.length += 1
        self.last = time

    def close(self, out: List[ProvisionalSegment]) -> None:
        # End is the last voiced frame's timestamp, not hop-adjusted
        if self.start is not None and self.length >= self.min_frames and self.last > self.start:
            out.append(ProvisionalSegment(start=self.start, end=self.last))
        self.start = None
        self.length = 0


def scan_voicing(
    samples: np.ndarray,
    sample_rate: int,
    config: Optional[FrameConfig] = None,
    stride: int = DEFAULT_FRAME_STRIDE,
) -> Scan[VoicingResult]:
    """VAD scan as a suspendable generator.

    Yields integer percent every `stride` frames and 100 at the end;
    returns a VoicingResult. A buffer shorter than one frame yields no
    frames and no segments.
    """
    if stride < 1:
        raise ValueError("stride must be >= 1")
    config = config or FrameConfig()
    samples = np.asarray(samples, dtype=np.float64)
    frame_length = config.frame_length(sample_rate)
    starts = frame_starts(len(samples), frame_length, config.hop_length(sample_rate))
    total = len(starts)

    run = _RunState(min_frames=config.min_voiced_frames)
    segments: List[ProvisionalSegment] = []
    parts: List[FrameFeatures] = []

    for offset in range(0, total, stride):
        yield percent(offset, total)
        chunk = compute_frame_features(
            samples,
            sample_rate,
            starts[offset : offset + stride],
            frame_length,
            config.voiced_energy_cutoff,
        )
        parts.append(chunk)
        for time, voiced in zip(chunk.times, chunk.voiced):
            if voiced:
                run.extend(float(time))
            else:
                run.close(segments)

    run.close(segments)
    if total == 0:
        logger.info("Buffer shorter than one frame (%d samples); no voiced segments", len(samples))

    yield 100
    return VoicingResult(segments=segments, features=FrameFeatures.concatenate(parts))


def segment_by_voicing(
    samples: np.ndarray,
    sample_rate: int,
    config: Optional[FrameConfig] = None,
) -> List[ProvisionalSegment]:
    """Run the VAD scan to completion and return its segments."""
    return drain(scan_voicing(samples, sample_rate, config)).segments

"""Silence segmenter: amplitude threshold + pause tolerance state machine.

A single left-to-right scan over the samples. A sample is loud when
|x| > threshold (strict). A segment opens on the first loud sample and
closes at the last loud sample once a quiet sample lies more than
`pause_tolerance` seconds after it. Segments shorter than
`min_segment_duration` (inclusive bound) are dropped, never merged.

The scan is evaluated chunk by chunk with numpy; every decision only
depends on loud-sample positions, so the output is bit-identical for any
stride.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from speech_segmenter.segmentation.types import ProvisionalSegment, Scan, drain, percent

DEFAULT_STRIDE = 100_000

# Pause tolerance used by the quick preview count
PREVIEW_PAUSE_TOLERANCE = 0.3


@dataclass
class _SilenceState:
    """Scan state threaded through chunks."""

    sample_rate: int
    amplitude_threshold: float
    min_segment_duration: float
    pause_tolerance: float
    in_speech: bool = False
    start: int = 0
    last_loud: int = 0

    def pause_exceeded(self, quiet_index: int) -> bool:
        if quiet_index <= self.last_loud:
            return False
        sr = self.sample_rate
        return (quiet_index / sr - self.last_loud / sr) > self.pause_tolerance

    def close(self, end_time: float, out: List[ProvisionalSegment]) -> None:
        start_time = self.start / self.sample_rate
        if end_time > start_time and end_time - start_time >= self.min_segment_duration:
            out.append(ProvisionalSegment(start=start_time, end=end_time))
        self.in_speech = False


def _scan_chunk(
    chunk: np.ndarray,
    offset: int,
    state: _SilenceState,
    out: List[ProvisionalSegment],
) -> None:
    sr = state.sample_rate
    chunk_last = offset + len(chunk) - 1
    loud = np.flatnonzero(np.abs(chunk) > state.amplitude_threshold) + offset

    if loud.size == 0:
        if state.in_speech and state.pause_exceeded(chunk_last):
            state.close(state.last_loud / sr, out)
        return

    # Quiet stretch between the open segment and this chunk's first loud sample
    if state.in_speech and state.pause_exceeded(int(loud[0]) - 1):
        state.close(state.last_loud / sr, out)

    prev = loud[:-1]
    quiet_last = loud[1:] - 1
    breaks = (quiet_last > prev) & ((quiet_last / sr - prev / sr) > state.pause_tolerance)
    break_at = np.flatnonzero(breaks)

    run_first = np.concatenate(([0], break_at + 1))
    run_last = np.concatenate((break_at, [loud.size - 1]))
    n_runs = len(run_first)
    for r in range(n_runs):
        if not state.in_speech:
            state.in_speech = True
            state.start = int(loud[run_first[r]])
        state.last_loud = int(loud[run_last[r]])
        if r < n_runs - 1:
            state.close(state.last_loud / sr, out)

    if state.pause_exceeded(chunk_last):
        state.close(state.last_loud / sr, out)


def scan_silence(
    samples: np.ndarray,
    sample_rate: int,
    amplitude_threshold: float,
    min_segment_duration: float,
    pause_tolerance: float,
    stride: int = DEFAULT_STRIDE,
    close_at_end: bool = True,
) -> Scan[List[ProvisionalSegment]]:
    """Silence scan as a suspendable generator.

    Yields integer percent at the start of every `stride`-sample chunk and
    100 at the end; returns the segments in start-time order. With
    `close_at_end=False` a segment still open when the buffer ends is
    discarded.
    """
    if stride < 1:
        raise ValueError("stride must be >= 1")
    samples = np.asarray(samples)
    n = len(samples)
    state = _SilenceState(
        sample_rate=sample_rate,
        amplitude_threshold=amplitude_threshold,
        min_segment_duration=min_segment_duration,
        pause_tolerance=pause_tolerance,
    )
    segments: List[ProvisionalSegment] = []

    for offset in range(0, n, stride):
        yield percent(offset, n)
        _scan_chunk(samples[offset : offset + stride], offset, state, segments)

    if state.in_speech and close_at_end:
        state.close(n / sample_rate, segments)

    yield 100
    return segments


def segment_by_silence(
    samples: np.ndarray,
    sample_rate: int,
    amplitude_threshold: float,
    min_segment_duration: float,
    pause_tolerance: float,
    stride: int = DEFAULT_STRIDE,
) -> List[ProvisionalSegment]:
    """Run the silence scan to completion."""
    return drain(
        scan_silence(
            samples,
            sample_rate,
            amplitude_threshold,
            min_segment_duration,
            pause_tolerance,
            stride=stride,
        )
    )


def count_silence_segments(
    samples: np.ndarray,
    sample_rate: int,
    amplitude_threshold: float,
    min_segment_duration: float,
    pause_tolerance: float = PREVIEW_PAUSE_TOLERANCE,
) -> int:
    """Quick preview: how many segments a silence run would produce.

    Only segments closed by a pause are counted; speech still running at
    the end of the buffer is not.
    """
    return len(
        drain(
            scan_silence(
                samples,
                sample_rate,
                amplitude_threshold,
                min_segment_duration,
                pause_tolerance,
                close_at_end=False,
            )
        )
    )

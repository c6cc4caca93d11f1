"""Segmentation orchestrator: strategy dispatch, progress and cancellation.

Every long scan is a generator that yields at fixed strides (samples,
frames or segments). The orchestrator chains them into one scan, reports
progress and checks the cancellation flag at each suspension point. How
the scan is driven is up to the host: `run()` drains it in place,
`run_async()` hands control back to the event loop between chunks.

Interface:
  orchestrator = SegmentationOrchestrator(buffer)
  segments = orchestrator.run(
      parse_strategy("silence_f0", params),
      progress=LoggingProgressSink(),
      cancel=lambda: user_pressed_cancel,
  )
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional

from speech_segmenter.audio.config import SegmentationConfig
from speech_segmenter.audio.signal import SampleBuffer
from speech_segmenter.exceptions import (
    InvalidParameters,
    ProcessingError,
    SegmentationCancelled,
    SegmentationError,
)
from speech_segmenter.segmentation.clustering import kmeans_1d, nearest_centroid
from speech_segmenter.segmentation.pitch import estimate_f0
from speech_segmenter.segmentation.progress import MonotonicProgress, ProgressSink
from speech_segmenter.segmentation.silence import (
    PREVIEW_PAUSE_TOLERANCE,
    count_silence_segments,
    scan_silence,
)
from speech_segmenter.segmentation.strategies import (
    PitchClusterParams,
    Silence,
    SilenceParams,
    SilenceWithPitchCluster,
    Strategy,
    VadClustering,
)
from speech_segmenter.segmentation.types import ProvisionalSegment, Scan, T, drain
from speech_segmenter.segmentation.vad import scan_voicing

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]

# Share of the progress stream given to the segmentation scan when a pitch
# pass follows it
_SCAN_SHARE = 50


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


class SegmentationOrchestrator:
    """Runs one strategy at a time over a read-only sample buffer."""

    def __init__(self, buffer: SampleBuffer, config: Optional[SegmentationConfig] = None):
        self.buffer = buffer
        self.config = config or SegmentationConfig()
        self.state = RunState.IDLE
        self.last_error: Optional[Exception] = None

    def validate(self, strategy: Strategy) -> None:
        """Check parameters that depend on the buffer.

        Raises:
            InvalidParameters: f0_max above the sample rate (lag < 1 sample),
                or an object that is not a known strategy.
        """
        if not isinstance(strategy, (Silence, SilenceWithPitchCluster, VadClustering)):
            raise InvalidParameters(
                f"unknown strategy {type(strategy).__name__}", field="strategy"
            )
        pitch = getattr(strategy, "pitch", None)
        if pitch is not None and pitch.f0_max > self.buffer.sample_rate:
            raise InvalidParameters(
                f"must not exceed the sample rate ({self.buffer.sample_rate} Hz), "
                f"got {pitch.f0_max!r}",
                field="f0_max",
            )

    def run(
        self,
        strategy: Strategy,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[CancelCheck] = None,
    ) -> List[ProvisionalSegment]:
        """Run a strategy to completion.

        Returns:
            Provisional segments, in the order the strategy produced them.

        Raises:
            InvalidParameters: before anything runs.
            SegmentationCancelled: cancel() returned True at a suspension point.
            ProcessingError: the strategy raised unexpectedly (chained).

        A host-level abort (KeyboardInterrupt, task cancellation in
        run_async) leaves the run CANCELLED with the sink reset, and propagates.
        """
        sink = self._begin(strategy, progress)
        try:
            segments = drain(self._execute(strategy, sink, cancel))
        except Exception as exc:
            error = self._fail(strategy, sink, exc)
            if error is exc:
                raise
            raise error from exc
        except BaseException:
            self._interrupt(strategy, sink)
            raise
        return self._done(strategy, segments)

    async def run_async(
        self,
        strategy: Strategy,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[CancelCheck] = None,
    ) -> List[ProvisionalSegment]:
        """Same as run(), yielding to the event loop at every suspension point."""
        sink = self._begin(strategy, progress)
        scan = self._execute(strategy, sink, cancel)
        try:
            while True:
                try:
                    next(scan)
                except StopIteration as stop:
                    segments = stop.value
                    break
                await asyncio.sleep(0)
        except Exception as exc:
            error = self._fail(strategy, sink, exc)
            if error is exc:
                raise
            raise error from exc
        except BaseException:
            scan.close()
            self._interrupt(strategy, sink)
            raise
        return self._done(strategy, segments)

    def preview(self, amplitude_threshold: float, min_segment_duration: float) -> int:
        """Count the segments a silence run with a 0.3 s pause would produce."""
        params = SilenceParams(
            amplitude_threshold=amplitude_threshold,
            min_segment_duration=min_segment_duration,
            pause_tolerance=PREVIEW_PAUSE_TOLERANCE,
        )
        return count_silence_segments(
            self.buffer.samples,
            self.buffer.sample_rate,
            params.amplitude_threshold,
            params.min_segment_duration,
            params.pause_tolerance,
        )

    def _begin(self, strategy: Strategy, progress: Optional[ProgressSink]) -> MonotonicProgress:
        if self.state is RunState.RUNNING:
            raise SegmentationError("a segmentation run is already in progress")
        self.validate(strategy)
        self.state = RunState.RUNNING
        self.last_error = None
        logger.info(
            "Auto-segmentation: %s (%.2fs of audio at %d Hz)",
            strategy.id.value,
            self.buffer.duration,
            self.buffer.sample_rate,
        )
        return MonotonicProgress(progress)

    def _done(self, strategy: Strategy, segments: List[ProvisionalSegment]) -> List[ProvisionalSegment]:
        self.state = RunState.DONE
        logger.info("%s: %d segments detected", strategy.id.value, len(segments))
        return segments

    def _fail(self, strategy: Strategy, sink: MonotonicProgress, exc: Exception) -> Exception:
        at = sink.current
        sink.reset()
        if isinstance(exc, SegmentationCancelled):
            self.state = RunState.CANCELLED
            logger.warning("%s cancelled at %d%%", strategy.id.value, at)
            error: Exception = exc
        elif isinstance(exc, SegmentationError):
            self.state = RunState.FAILED
            error = exc
        else:
            self.state = RunState.FAILED
            error = ProcessingError(strategy.id.value, str(exc) or type(exc).__name__)
            logger.error("%s failed: %r", strategy.id.value, exc)
        self.last_error = error
        return error

    def _interrupt(self, strategy: Strategy, sink: MonotonicProgress) -> None:
        """Host-level abort (task cancellation, KeyboardInterrupt): settle and re-raise."""
        at = sink.current
        sink.reset()
        self.state = RunState.CANCELLED
        self.last_error = None
        logger.warning("%s interrupted by the host at %d%%", strategy.id.value, at)

    def _execute(
        self,
        strategy: Strategy,
        progress: MonotonicProgress,
        cancel: Optional[CancelCheck],
    ) -> Scan[List[ProvisionalSegment]]:
        if isinstance(strategy, Silence):
            segments = yield from self._suspend(
                self._silence_scan(strategy.silence), progress.scaled(0, 100), cancel
            )
        elif isinstance(strategy, SilenceWithPitchCluster):
            segments = yield from self._suspend(
                self._silence_scan(strategy.silence), progress.scaled(0, _SCAN_SHARE), cancel
            )
            segments = yield from self._label_speakers(segments, strategy.pitch, progress, cancel)
        elif isinstance(strategy, VadClustering):
            result = yield from self._suspend(
                scan_voicing(
                    self.buffer.samples,
                    self.buffer.sample_rate,
                    self.config.frames,
                    stride=self.config.frame_stride,
                ),
                progress.scaled(0, _SCAN_SHARE),
                cancel,
            )
            segments = yield from self._label_speakers(
                result.segments, strategy.pitch, progress, cancel
            )
        else:
            raise InvalidParameters(f"unknown strategy {strategy!r}", field="strategy")

        progress.finish()
        return segments

    def _silence_scan(self, params: SilenceParams) -> Scan[List[ProvisionalSegment]]:
        return scan_silence(
            self.buffer.samples,
            self.buffer.sample_rate,
            params.amplitude_threshold,
            params.min_segment_duration,
            params.pause_tolerance,
            stride=self.config.sample_stride,
        )

    def _suspend(
        self,
        scan: Scan[T],
        report: Callable[[int], int],
        cancel: Optional[CancelCheck],
    ) -> Scan[T]:
        """Forward a sub-scan, reporting and checking cancel at each yield."""
        while True:
            try:
                local = next(scan)
            except StopIteration as stop:
                return stop.value
            current = report(local)
            _check_cancel(cancel)
            yield current

    def _label_speakers(
        self,
        segments: List[ProvisionalSegment],
        params: PitchClusterParams,
        progress: MonotonicProgress,
        cancel: Optional[CancelCheck],
    ) -> Scan[List[ProvisionalSegment]]:
        """F0 per segment, then k-means over the F0 values and label assignment."""
        report = progress.scaled(_SCAN_SHARE, 100)
        total = len(segments)
        pitched: List[ProvisionalSegment] = []
        for i, seg in enumerate(segments):
            if i % self.config.segment_stride == 0:
                current = report(int(i * 100 / total))
                _check_cancel(cancel)
                yield current
            f0 = estimate_f0(
                self.buffer.samples,
                seg.start,
                seg.end,
                self.buffer.sample_rate,
                params.f0_min,
                params.f0_max,
                min_samples=self.config.min_pitch_samples,
            )
            pitched.append(seg.with_pitch(f0))

        f0_values = [s.f0 for s in pitched if s.f0 is not None]
        if not f0_values:
            logger.warning("No F0 could be extracted from %d segments; leaving them unlabeled", total)
            return pitched

        centroids = kmeans_1d(f0_values, params.num_speakers, self.config.kmeans_iterations)
        logger.debug(
            "Speaker centroids (Hz): %s",
            ", ".join(f"{c:.1f}" for c in centroids),
        )
        return [
            s.with_speaker(nearest_centroid(s.f0, centroids)) if s.f0 is not None else s
            for s in pitched
        ]


def _check_cancel(cancel: Optional[CancelCheck]) -> None:
    if cancel is not None and cancel():
        raise SegmentationCancelled("segmentation cancelled")

"""Annotation session: the surface the annotation UI talks to.

Wires the sample buffer, the segmentation orchestrator, the live store and
the history manager together. Every mutating operation captures a history
snapshot first; a failed or cancelled segmentation run commits nothing and
captures nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from speech_segmenter.audio.config import SegmentationConfig
from speech_segmenter.audio.signal import SampleBuffer
from speech_segmenter.exceptions import InvalidParameters
from speech_segmenter.history import HistoryManager, HistorySnapshot
from speech_segmenter.history.manager import DEFAULT_MAX_DEPTH
from speech_segmenter.segmentation import (
    CallbackProgressSink,
    ProgressSink,
    ProvisionalSegment,
    SegmentationOrchestrator,
    StrategyId,
    parse_strategy,
)
from speech_segmenter.segmentation.orchestrator import CancelCheck
from speech_segmenter.store import AnnotationStore, Segment

logger = logging.getLogger(__name__)

ProgressArg = Union[ProgressSink, Callable[[int], None], None]


def _as_sink(progress: ProgressArg) -> Optional[ProgressSink]:
    if progress is None or hasattr(progress, "report"):
        return progress  # type: ignore[return-value]
    return CallbackProgressSink(progress)


def segment_to_dict(segment: ProvisionalSegment) -> Dict[str, Any]:
    """Outward representation: start/end plus speaker_label and f0 when known."""
    out: Dict[str, Any] = {"start": segment.start, "end": segment.end}
    if segment.speaker_tag is not None:
        out["speaker_label"] = segment.speaker_tag
    if segment.f0 is not None:
        out["f0"] = segment.f0
    return out


class AnnotationSession:
    """One loaded recording, its annotations and their undo history."""

    def __init__(
        self,
        config: Optional[SegmentationConfig] = None,
        history_depth: int = DEFAULT_MAX_DEPTH,
        store: Optional[AnnotationStore] = None,
    ):
        self.config = config or SegmentationConfig()
        self.store = store or AnnotationStore()
        self.history = HistoryManager(self.store, max_depth=history_depth)
        self.buffer: Optional[SampleBuffer] = None
        self._orchestrator: Optional[SegmentationOrchestrator] = None

    def load_audio(self, buffer: SampleBuffer) -> None:
        """Attach new audio; existing segments and all history are dropped."""
        self.buffer = buffer
        self._orchestrator = SegmentationOrchestrator(buffer, self.config)
        self.store.clear_segments()
        self.history.clear()
        logger.info("Audio loaded: %.2fs at %d Hz", buffer.duration, buffer.sample_rate)

    @property
    def orchestrator(self) -> SegmentationOrchestrator:
        if self._orchestrator is None:
            raise InvalidParameters("no audio loaded", field="audio")
        return self._orchestrator

    def run_segmentation(
        self,
        strategy_id: Union[str, StrategyId],
        params: Mapping[str, Any],
        progress: ProgressArg = None,
        cancel: Optional[CancelCheck] = None,
    ) -> List[Dict[str, Any]]:
        """Parse, run, then capture and commit the result in one step."""
        orchestrator = self.orchestrator
        strategy = parse_strategy(strategy_id, params)
        segments = orchestrator.run(strategy, progress=_as_sink(progress), cancel=cancel)
        return self._commit(segments)

    async def run_segmentation_async(
        self,
        strategy_id: Union[str, StrategyId],
        params: Mapping[str, Any],
        progress: ProgressArg = None,
        cancel: Optional[CancelCheck] = None,
    ) -> List[Dict[str, Any]]:
        orchestrator = self.orchestrator
        strategy = parse_strategy(strategy_id, params)
        segments = await orchestrator.run_async(strategy, progress=_as_sink(progress), cancel=cancel)
        return self._commit(segments)

    def preview_segmentation(self, amplitude_threshold: float, min_segment_duration: float) -> int:
        return self.orchestrator.preview(amplitude_threshold, min_segment_duration)

    def _commit(self, segments: List[ProvisionalSegment]) -> List[Dict[str, Any]]:
        self.history.capture("auto-segmentation")
        self.store.commit(segments)
        return [segment_to_dict(s) for s in segments]

    # History

    def history_capture(self, label: str) -> HistorySnapshot:
        return self.history.capture(label)

    def history_undo(self) -> Optional[HistorySnapshot]:
        return self.history.undo()

    def history_redo(self) -> Optional[HistorySnapshot]:
        return self.history.redo()

    # Edits (capture before mutate)

    def create_segment(self, start: float, end: float, speaker_id: int = 1) -> Segment:
        if not end > start:
            raise InvalidParameters(f"end ({end!r}) must be after start ({start!r})", field="end")
        if speaker_id < 1:
            raise InvalidParameters(f"must be >= 1, got {speaker_id!r}", field="speaker_id")
        self.history.capture("create segment")
        return self.store.create_segment(start, end, speaker_id)

    def delete_segment(self, segment_id: str) -> Segment:
        self.store.get(segment_id)
        self.history.capture("delete segment")
        return self.store.delete_segment(segment_id)

    def change_speaker(self, segment_id: str, speaker_id: int) -> None:
        self.store.get(segment_id)
        if speaker_id < 1:
            raise InvalidParameters(f"must be >= 1, got {speaker_id!r}", field="speaker_id")
        self.history.capture("change speaker")
        self.store.set_speaker(segment_id, speaker_id)

    def rename_speaker(self, speaker_id: int, name: str) -> None:
        if self.store.speaker(speaker_id) is None:
            raise KeyError(f"unknown speaker {speaker_id}")
        self.history.capture("rename speaker")
        self.store.rename_speaker(speaker_id, name)

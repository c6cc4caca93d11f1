"""Immutable history snapshots of the annotation state."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Tuple

from speech_segmenter.store import AnnotationStore, Segment, Speaker


@dataclass(frozen=True)
class SegmentRecord:
    id: str
    start: float
    end: float
    speaker_id: int
    transcription: str


@dataclass(frozen=True)
class SpeakerRecord:
    id: int
    name: str


@dataclass(frozen=True)
class HistorySnapshot:
    """Segments and speaker names at one point in time.

    Records are copied out of the live objects on capture and copied back
    into new live objects on restore, so a snapshot never shares state with
    the store. Equality is structural and ignores the timestamp.
    """

    action_label: str
    segments: Tuple[SegmentRecord, ...] = ()
    speakers: Tuple[SpeakerRecord, ...] = ()
    timestamp: float = field(default_factory=time.time, compare=False)

    @classmethod
    def capture(cls, store: AnnotationStore, action_label: str) -> "HistorySnapshot":
        return cls(
            action_label=action_label,
            segments=tuple(
                SegmentRecord(
                    id=s.id,
                    start=s.start,
                    end=s.end,
                    speaker_id=s.speaker_id,
                    transcription=s.transcription,
                )
                for s in store.segments
            ),
            speakers=tuple(SpeakerRecord(id=s.id, name=s.name) for s in store.speakers),
        )

    def materialize(self) -> Tuple[List[Segment], List[Speaker]]:
        """Fresh live objects holding this snapshot's state."""
        segments = [
            Segment(
                id=r.id,
                start=r.start,
                end=r.end,
                speaker_id=r.speaker_id,
                transcription=r.transcription,
            )
            for r in self.segments
        ]
        speakers = [Speaker(id=r.id, name=r.name) for r in self.speakers]
        return segments, speakers

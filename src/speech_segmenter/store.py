"""Live annotation state: segments and the speaker roster.

This is what the annotation UI edits, what a segmentation run commits
into, and what the history manager snapshots.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from speech_segmenter.exceptions import InvalidParameters
from speech_segmenter.segmentation.types import ProvisionalSegment

logger = logging.getLogger(__name__)

DEFAULT_SPEAKER_COUNT = 3


@dataclass
class Segment:
    """A time-bounded span of audio attributed to a speaker."""

    id: str
    start: float
    end: float
    speaker_id: int = 1
    transcription: str = ""


@dataclass
class Speaker:
    id: int
    name: str


def _new_segment_id() -> str:
    return f"seg_{uuid.uuid4().hex[:12]}"


def _check_bounds(start: float, end: float) -> None:
    if not end > start:
        raise InvalidParameters(f"end ({end!r}) must be after start ({start!r})", field="end")


class AnnotationStore:
    """Mutable segments + speakers, edited from a single control flow."""

    def __init__(self, default_speakers: int = DEFAULT_SPEAKER_COUNT):
        self.segments: List[Segment] = []
        self.speakers: List[Speaker] = []
        for _ in range(default_speakers):
            self.add_speaker()

    def __len__(self) -> int:
        return len(self.segments)

    # Speakers

    def speaker(self, speaker_id: int) -> Optional[Speaker]:
        for spk in self.speakers:
            if spk.id == speaker_id:
                return spk
        return None

    def add_speaker(self, name: Optional[str] = None) -> Speaker:
        speaker_id = max((s.id for s in self.speakers), default=0) + 1
        spk = Speaker(id=speaker_id, name=name or f"Speaker {speaker_id}")
        self.speakers.append(spk)
        return spk

    def ensure_speaker(self, speaker_id: int) -> Speaker:
        """Return the speaker, adding tracks until it exists."""
        if speaker_id < 1:
            raise InvalidParameters(f"must be >= 1, got {speaker_id!r}", field="speaker_id")
        spk = self.speaker(speaker_id)
        while spk is None:
            self.add_speaker()
            spk = self.speaker(speaker_id)
        return spk

    def rename_speaker(self, speaker_id: int, name: str) -> None:
        spk = self.speaker(speaker_id)
        if spk is None:
            raise KeyError(f"unknown speaker {speaker_id}")
        spk.name = name

    def remove_speaker(self, speaker_id: int) -> None:
        """Drop a speaker track and every segment attributed to it."""
        if self.speaker(speaker_id) is None:
            raise KeyError(f"unknown speaker {speaker_id}")
        self.speakers = [s for s in self.speakers if s.id != speaker_id]
        self.segments = [s for s in self.segments if s.speaker_id != speaker_id]

    # Segments

    def get(self, segment_id: str) -> Segment:
        for seg in self.segments:
            if seg.id == segment_id:
                return seg
        raise KeyError(f"unknown segment {segment_id}")

    def create_segment(
        self,
        start: float,
        end: float,
        speaker_id: int = 1,
        transcription: str = "",
    ) -> Segment:
        _check_bounds(start, end)
        self.ensure_speaker(speaker_id)
        seg = Segment(
            id=_new_segment_id(),
            start=float(start),
            end=float(end),
            speaker_id=speaker_id,
            transcription=transcription,
        )
        self.segments.append(seg)
        return seg

    def delete_segment(self, segment_id: str) -> Segment:
        seg = self.get(segment_id)
        self.segments = [s for s in self.segments if s.id != segment_id]
        return seg

    def set_speaker(self, segment_id: str, speaker_id: int) -> None:
        seg = self.get(segment_id)
        self.ensure_speaker(speaker_id)
        seg.speaker_id = speaker_id

    def set_transcription(self, segment_id: str, text: str) -> None:
        self.get(segment_id).transcription = text

    def sorted_segments(self) -> List[Segment]:
        """Segments ordered by start time (export and navigation order)."""
        return sorted(self.segments, key=lambda s: (s.start, s.end))

    def commit(self, provisional: Sequence[ProvisionalSegment]) -> List[Segment]:
        """Add a segmentation run's output, all or nothing.

        Every record is built and validated before the store changes.
        Unlabeled segments go to speaker 1.
        """
        created = []
        for p in provisional:
            _check_bounds(p.start, p.end)
            created.append(
                Segment(
                    id=_new_segment_id(),
                    start=float(p.start),
                    end=float(p.end),
                    speaker_id=p.speaker_number,
                )
            )
        speaker_ids = sorted({seg.speaker_id for seg in created})
        if speaker_ids and speaker_ids[0] < 1:
            raise InvalidParameters(f"must be >= 1, got {speaker_ids[0]!r}", field="speaker_id")
        for speaker_id in speaker_ids:
            self.ensure_speaker(speaker_id)
        self.segments = self.segments + created
        logger.info("Committed %d segments (%d total)", len(created), len(self.segments))
        return created

    def replace(self, segments: Iterable[Segment], speakers: Iterable[Speaker]) -> None:
        """Swap in a complete new state; callers pass freshly built objects."""
        new_segments = list(segments)
        new_speakers = list(speakers)
        self.segments = new_segments
        self.speakers = new_speakers

    def clear_segments(self) -> None:
        self.segments = []

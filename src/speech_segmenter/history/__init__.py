"""Undo/redo history."""

from speech_segmenter.history.manager import HistoryManager
from speech_segmenter.history.snapshot import HistorySnapshot, SegmentRecord, SpeakerRecord

__all__ = ["HistoryManager", "HistorySnapshot", "SegmentRecord", "SpeakerRecord"]

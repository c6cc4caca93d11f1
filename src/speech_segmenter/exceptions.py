"""speech_segmenter exception hierarchy."""

from __future__ import annotations

from typing import Optional


class SegmentationError(Exception):
    """Base error for speech_segmenter."""


class InvalidParameters(SegmentationError):
    """Raised when a parameter is missing, non-numeric or out of domain."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        prefix = f"{field}: " if field else ""
        super().__init__(f"{prefix}{message}")
        self.field = field
        self.message = message


class ProcessingError(SegmentationError):
    """Raised when a segmentation strategy fails unexpectedly."""

    def __init__(self, strategy: str, message: str) -> None:
        super().__init__(f"{strategy}: {message}")
        self.strategy = strategy
        self.message = message


class SegmentationCancelled(SegmentationError):
    """Raised when a run observes its cancellation flag at a suspension point."""

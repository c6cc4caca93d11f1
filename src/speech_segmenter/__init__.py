"""Speech segmentation: silence / VAD segmenters, F0 speaker clustering, undo history."""

from speech_segmenter.audio import SampleBuffer, SegmentationConfig
from speech_segmenter.exceptions import (
    InvalidParameters,
    ProcessingError,
    SegmentationCancelled,
    SegmentationError,
)
from speech_segmenter.session import AnnotationSession

__all__ = [
    "AnnotationSession",
    "InvalidParameters",
    "ProcessingError",
    "SampleBuffer",
    "SegmentationCancelled",
    "SegmentationConfig",
    "SegmentationError",
]

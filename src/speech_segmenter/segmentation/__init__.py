"""Segmentation strategies, scans and the orchestrator."""

from speech_segmenter.segmentation.clustering import assign_labels, kmeans_1d, nearest_centroid
from speech_segmenter.segmentation.orchestrator import RunState, SegmentationOrchestrator
from speech_segmenter.segmentation.pitch import estimate_f0
from speech_segmenter.segmentation.progress import (
    CallbackProgressSink,
    LoggingProgressSink,
    MonotonicProgress,
    NullProgressSink,
    ProgressSink,
)
from speech_segmenter.segmentation.silence import count_silence_segments, segment_by_silence
from speech_segmenter.segmentation.strategies import (
    PitchClusterParams,
    Silence,
    SilenceParams,
    SilenceWithPitchCluster,
    Strategy,
    StrategyId,
    VadClustering,
    parse_strategy,
)
from speech_segmenter.segmentation.types import ProvisionalSegment
from speech_segmenter.segmentation.vad import segment_by_voicing

__all__ = [
    "CallbackProgressSink",
    "LoggingProgressSink",
    "MonotonicProgress",
    "NullProgressSink",
    "PitchClusterParams",
    "ProgressSink",
    "ProvisionalSegment",
    "RunState",
    "SegmentationOrchestrator",
    "Silence",
    "SilenceParams",
    "SilenceWithPitchCluster",
    "Strategy",
    "StrategyId",
    "VadClustering",
    "assign_labels",
    "count_silence_segments",
    "estimate_f0",
    "kmeans_1d",
    "nearest_centroid",
    "parse_strategy",
    "segment_by_silence",
    "segment_by_voicing",
]

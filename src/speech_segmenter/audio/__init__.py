"""Sample access and frame feature extraction."""

from speech_segmenter.audio.config import FrameConfig, SegmentationConfig
from speech_segmenter.audio.features import FeatureVector, FrameFeatures, extract_features
from speech_segmenter.audio.signal import SampleBuffer

__all__ = [
    "FeatureVector",
    "FrameConfig",
    "FrameFeatures",
    "SampleBuffer",
    "SegmentationConfig",
    "extract_features",
]

"""Frame analysis and segmentation run configuration.

Framing standards:
- Frames: 25 ms window / 10 ms hop, derived from the buffer's sample rate
- Voicing: fixed mean-energy cutoff (0.01)
- Noise rejection: voiced runs shorter than 10 frames are discarded
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FrameConfig:
    """Short-time frame configuration for feature extraction."""

    window_ms: float = 25.0
    hop_ms: float = 10.0

    # Voiced/unvoiced decision on mean(sample^2)
    voiced_energy_cutoff: float = 0.01

    # Shortest run of voiced frames kept as a segment
    min_voiced_frames: int = 10

    def frame_length(self, sample_rate: int) -> int:
        """Window length in samples."""
        return int(sample_rate * self.window_ms / 1000)

    def hop_length(self, sample_rate: int) -> int:
        """Hop length in samples."""
        return max(1, int(sample_rate * self.hop_ms / 1000))


@dataclass(frozen=True)
class SegmentationConfig:
    """Suspension strides and fixed constants for segmentation runs."""

    # Suspension points (progress + cancellation check)
    sample_stride: int = 100_000  # silence scan, in samples
    frame_stride: int = 1_000  # VAD scan, in frames
    segment_stride: int = 10  # pitch loop, in segments

    # Pitch estimation rejects slices shorter than this
    min_pitch_samples: int = 400

    kmeans_iterations: int = 10

    frames: FrameConfig = field(default_factory=FrameConfig)

    def __post_init__(self) -> None:
        for name in ("sample_stride", "frame_stride", "segment_stride"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")

"""Read-only mono sample access over a decoded audio buffer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np

from speech_segmenter.exceptions import InvalidParameters


@dataclass(frozen=True, eq=False)
class SampleBuffer:
    """Mono float samples in [-1, 1] plus their sample rate.

    Multi-channel input keeps channel 0 only. The sample array is made
    read-only so concurrent analysis passes can share it safely.
    """

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        if not self.sample_rate or self.sample_rate <= 0:
            raise InvalidParameters("sample rate must be positive", field="sample_rate")
        data = np.asarray(self.samples, dtype=np.float64)
        if data.ndim == 2:
            # (n_samples, n_channels) as returned by wavfile.read
            data = data[:, 0]
        elif data.ndim != 1:
            raise InvalidParameters(
                f"expected 1-D or 2-D samples, got {data.ndim}-D",
                field="samples",
            )
        data = np.array(data, dtype=np.float64, copy=True)
        data.setflags(write=False)
        object.__setattr__(self, "samples", data)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    def __len__(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        """Buffer length in seconds."""
        return len(self) / self.sample_rate

    def slice_seconds(self, start: float, end: float) -> np.ndarray:
        """Samples in [floor(start * sr), floor(end * sr))."""
        lo = max(0, math.floor(start * self.sample_rate))
        hi = min(len(self), math.floor(end * self.sample_rate))
        if hi <= lo:
            return self.samples[0:0]
        return self.samples[lo:hi]

    @classmethod
    def from_wav(cls, path: Union[str, Path]) -> "SampleBuffer":
        """Load a WAV file, scaling integer PCM to [-1, 1]."""
        import scipy.io.wavfile as wavfile

        sr, audio = wavfile.read(str(path))
        if audio.dtype == np.int16:
            audio = audio.astype(np.float64) / 32768
        elif audio.dtype == np.int32:
            audio = audio.astype(np.float64) / 2147483648
        elif audio.dtype == np.uint8:
            audio = (audio.astype(np.float64) - 128) / 128
        return cls(audio, int(sr))

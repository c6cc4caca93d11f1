"""Provisional segments and the scan suspension contract."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Generator, Optional, TypeVar

T = TypeVar("T")

# A scan yields integer local percent (0-100) at each suspension point and
# returns its result through StopIteration.value.
Scan = Generator[int, None, T]

_SPEAKER_TAG = re.compile(r"^spk(\d+)$")


@dataclass(frozen=True)
class ProvisionalSegment:
    """A segment produced by a strategy run, before it reaches the store."""

    start: float
    end: float
    speaker_tag: Optional[str] = None
    f0: Optional[float] = None

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def speaker_number(self) -> int:
        """1-based speaker number from a "spkN" tag; 1 when unlabeled."""
        if self.speaker_tag is None:
            return 1
        match = _SPEAKER_TAG.match(self.speaker_tag)
        return int(match.group(1)) if match else 1

    def with_pitch(self, f0: Optional[float]) -> "ProvisionalSegment":
        return replace(self, f0=f0)

    def with_speaker(self, cluster_index: int) -> "ProvisionalSegment":
        return replace(self, speaker_tag=f"spk{cluster_index + 1}")


def drain(scan: Scan[T]) -> T:
    """Run a scan to completion without suspending."""
    while True:
        try:
            next(scan)
        except StopIteration as stop:
            return stop.value


def percent(done: int, total: int) -> int:
    """Integer percent, rounding halves up."""
    if total <= 0:
        return 100
    return min(100, int(done * 100 / total + 0.5))

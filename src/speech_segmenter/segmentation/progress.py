"""Progress sinks for segmentation runs."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class ProgressSink(Protocol):
    def report(self, percent: int) -> None: ...

    def reset(self) -> None: ...


class NullProgressSink:
    def report(self, percent: int) -> None:
        pass

    def reset(self) -> None:
        pass


class CallbackProgressSink:
    """Adapts plain callables to ProgressSink."""

    def __init__(
        self,
        on_progress: ProgressCallback,
        on_reset: Optional[Callable[[], None]] = None,
    ):
        self._on_progress = on_progress
        self._on_reset = on_reset

    def report(self, percent: int) -> None:
        self._on_progress(percent)

    def reset(self) -> None:
        if self._on_reset is not None:
            self._on_reset()


class LoggingProgressSink:
    """Reports progress via logging."""

    def __init__(self, label: str = "segmentation"):
        self.label = label

    def report(self, percent: int) -> None:
        logger.info("[%s] %d%%", self.label, percent)

    def reset(self) -> None:
        logger.info("[%s] progress reset", self.label)


class MonotonicProgress:
    """Clamps a sink to a non-decreasing integer stream in [0, 100].

    Repeated values are not forwarded; `finish()` always ends on 100.
    """

    def __init__(self, sink: Optional[ProgressSink] = None):
        self.sink: ProgressSink = sink if sink is not None else NullProgressSink()
        self._current = -1

    @property
    def current(self) -> int:
        return max(self._current, 0)

    def report(self, percent: int) -> int:
        value = min(100, max(0, int(percent)))
        if value > self._current:
            self._current = value
            self.sink.report(value)
        return self.current

    def scaled(self, lo: int, hi: int) -> Callable[[int], int]:
        """Map a sub-scan's local 0-100 onto [lo, hi] of this stream."""

        def report_local(local: int) -> int:
            return self.report(lo + int(local * (hi - lo) / 100 + 0.5))

        return report_local

    def finish(self) -> None:
        self.report(100)

    def reset(self) -> None:
        self._current = -1
        self.sink.reset()

"""Segmentation strategies and their validated parameter records."""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Union

from speech_segmenter.exceptions import InvalidParameters

logger = logging.getLogger(__name__)

_MISSING = object()


class StrategyId(str, Enum):
    SILENCE = "silence"
    SILENCE_PITCH_CLUSTER = "silence_f0"
    VAD_CLUSTERING = "vad_clustering"
    # Experimental in the annotation tool; runs the silence + pitch path
    SLIDING_WINDOW = "sliding_window"


def _check_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise InvalidParameters(f"must be finite, got {value!r}", field=name)


def _check_non_negative(name: str, value: float) -> None:
    _check_finite(name, value)
    if value < 0:
        raise InvalidParameters(f"must be >= 0, got {value!r}", field=name)


@dataclass(frozen=True)
class SilenceParams:
    """Amplitude threshold (linear, 0-1), durations in seconds."""

    amplitude_threshold: float
    min_segment_duration: float
    pause_tolerance: float

    def __post_init__(self) -> None:
        _check_non_negative("amplitude_threshold", self.amplitude_threshold)
        _check_non_negative("min_segment_duration", self.min_segment_duration)
        _check_non_negative("pause_tolerance", self.pause_tolerance)


@dataclass(frozen=True)
class PitchClusterParams:
    """Expected speaker count and F0 search range.

    `f0_confidence` is accepted from the UI parameter set but no algorithm
    reads it.
    """

    num_speakers: int = 2
    f0_min: float = 75.0
    f0_max: float = 300.0
    f0_confidence: float = 0.25

    def __post_init__(self) -> None:
        if isinstance(self.num_speakers, bool) or not isinstance(self.num_speakers, numbers.Integral):
            raise InvalidParameters(
                f"must be an integer, got {self.num_speakers!r}", field="num_speakers"
            )
        if self.num_speakers < 1:
            raise InvalidParameters(
                f"must be >= 1, got {self.num_speakers!r}", field="num_speakers"
            )
        _check_finite("f0_min", self.f0_min)
        _check_finite("f0_max", self.f0_max)
        if self.f0_min <= 0:
            raise InvalidParameters(f"must be > 0, got {self.f0_min!r}", field="f0_min")
        if self.f0_max <= self.f0_min:
            raise InvalidParameters(
                f"must be greater than f0_min ({self.f0_min!r}), got {self.f0_max!r}",
                field="f0_max",
            )
        _check_finite("f0_confidence", self.f0_confidence)
        if not 0 <= self.f0_confidence <= 1:
            raise InvalidParameters(
                f"must be within [0, 1], got {self.f0_confidence!r}", field="f0_confidence"
            )


@dataclass(frozen=True)
class Silence:
    """Amplitude/pause segmentation, no speaker labels."""

    silence: SilenceParams
    id: ClassVar[StrategyId] = StrategyId.SILENCE


@dataclass(frozen=True)
class SilenceWithPitchCluster:
    """Silence segmentation, then F0 per segment and k-means speaker labels."""

    silence: SilenceParams
    pitch: PitchClusterParams = field(default_factory=PitchClusterParams)
    id: ClassVar[StrategyId] = StrategyId.SILENCE_PITCH_CLUSTER


@dataclass(frozen=True)
class VadClustering:
    """Voiced-frame segmentation, then F0 per segment and k-means speaker labels."""

    pitch: PitchClusterParams = field(default_factory=PitchClusterParams)
    id: ClassVar[StrategyId] = StrategyId.VAD_CLUSTERING


Strategy = Union[Silence, SilenceWithPitchCluster, VadClustering]


def _number(params: Mapping[str, Any], key: str, default: Any = _MISSING) -> float:
    raw = params.get(key, _MISSING)
    if raw is _MISSING or raw is None or raw == "":
        if default is _MISSING:
            raise InvalidParameters("required parameter is missing", field=key)
        return default
    if isinstance(raw, bool):
        raise InvalidParameters(f"expected a number, got {raw!r}", field=key)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidParameters(f"expected a number, got {raw!r}", field=key) from None
    _check_finite(key, value)
    return value


def _integer(params: Mapping[str, Any], key: str, default: int) -> int:
    value = _number(params, key, default)
    if int(value) != value:
        raise InvalidParameters(f"expected an integer, got {value!r}", field=key)
    return int(value)


def _silence_params(params: Mapping[str, Any]) -> SilenceParams:
    return SilenceParams(
        amplitude_threshold=_number(params, "amplitude_threshold"),
        min_segment_duration=_number(params, "min_segment_duration"),
        pause_tolerance=_number(params, "pause_tolerance"),
    )


def _pitch_params(params: Mapping[str, Any]) -> PitchClusterParams:
    defaults = PitchClusterParams()
    return PitchClusterParams(
        num_speakers=_integer(params, "num_speakers", defaults.num_speakers),
        f0_min=_number(params, "f0_min", defaults.f0_min),
        f0_max=_number(params, "f0_max", defaults.f0_max),
        f0_confidence=_number(params, "f0_confidence", defaults.f0_confidence),
    )


def parse_strategy(strategy_id: Union[str, StrategyId], params: Mapping[str, Any]) -> Strategy:
    """Build a validated strategy from a UI parameter mapping.

    Raises:
        InvalidParameters: unknown strategy, missing required value,
            non-numeric or out-of-domain value.
    """
    try:
        sid = StrategyId(strategy_id)
    except ValueError:
        raise InvalidParameters(
            f"unknown strategy {strategy_id!r}", field="strategy"
        ) from None

    if sid is StrategyId.SILENCE:
        return Silence(silence=_silence_params(params))
    if sid is StrategyId.SILENCE_PITCH_CLUSTER:
        return SilenceWithPitchCluster(silence=_silence_params(params), pitch=_pitch_params(params))
    if sid is StrategyId.SLIDING_WINDOW:
        logger.info("Strategy %s runs the silence + pitch clustering path", sid.value)
        return SilenceWithPitchCluster(silence=_silence_params(params), pitch=_pitch_params(params))
    if sid is StrategyId.VAD_CLUSTERING:
        return VadClustering(pitch=_pitch_params(params))
    raise InvalidParameters(f"unhandled strategy {sid.value!r}", field="strategy")

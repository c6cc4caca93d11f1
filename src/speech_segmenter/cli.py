"""CLI for automatic segmentation of a WAV file."""

import argparse
import json
import logging
import sys
from pathlib import Path

from speech_segmenter.audio import SampleBuffer, SegmentationConfig
from speech_segmenter.exceptions import InvalidParameters, SegmentationError
from speech_segmenter.segmentation import (
    LoggingProgressSink,
    SegmentationOrchestrator,
    StrategyId,
    parse_strategy,
)
from speech_segmenter.session import segment_to_dict


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split a recording into speech segments, optionally labelled by speaker",
    )
    parser.add_argument("audio", type=Path, help="Input WAV file (channel 0 is used)")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in StrategyId],
        default=StrategyId.SILENCE.value,
        help="Segmentation strategy (default: silence)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.02,
        help="Amplitude threshold, linear 0-1 (default: 0.02)",
    )
    parser.add_argument(
        "--min-segment-duration",
        type=float,
        default=0.3,
        help="Shortest segment kept, in seconds (default: 0.3)",
    )
    parser.add_argument(
        "--pause-tolerance",
        type=float,
        default=0.5,
        help="Quiet time that closes a segment, in seconds (default: 0.5)",
    )
    parser.add_argument("--speakers", type=int, default=2, help="Expected speaker count (default: 2)")
    parser.add_argument("--f0-min", type=float, default=75.0, help="Lowest F0 in Hz (default: 75)")
    parser.add_argument("--f0-max", type=float, default=300.0, help="Highest F0 in Hz (default: 300)")
    parser.add_argument(
        "--f0-confidence",
        type=float,
        default=0.25,
        help="Accepted for compatibility; not used by any strategy",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Only print how many segments a silence run would produce",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    return parser


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        buffer = SampleBuffer.from_wav(args.audio)
        orchestrator = SegmentationOrchestrator(buffer, SegmentationConfig())
        if args.preview:
            count = orchestrator.preview(args.threshold, args.min_segment_duration)
            print(f"{count} segments")
            return
        strategy = parse_strategy(
            args.strategy,
            {
                "amplitude_threshold": args.threshold,
                "min_segment_duration": args.min_segment_duration,
                "pause_tolerance": args.pause_tolerance,
                "num_speakers": args.speakers,
                "f0_min": args.f0_min,
                "f0_max": args.f0_max,
                "f0_confidence": args.f0_confidence,
            },
        )
        segments = orchestrator.run(strategy, progress=LoggingProgressSink(args.strategy))
    except InvalidParameters as exc:
        print(f"Invalid parameters: {exc}", file=sys.stderr)
        sys.exit(2)
    except SegmentationError as exc:
        print(f"Segmentation failed: {exc}", file=sys.stderr)
        sys.exit(1)

    ordered = sorted(segments, key=lambda s: s.start)
    json.dump([segment_to_dict(s) for s in ordered], sys.stdout, indent=2)
    print()


if __name__ == "__main__":
    main()

"""
framefixer Command Line
=======================

Entry point that wires the video source, scheduler and sink together.

Usage:
    framefixer INPUT OUTPUT [options]

    framefixer in.mp4 out.mp4 --buffer-size 9 --duplicate-count 2
    framefixer in.mp4 out.mp4 -threshold_strict 0.8 -threshold_relaxed 0.8

Flow:
    1. Parse arguments and load configuration
    2. Open the source, then the sink with the source's codec/fps/size
    3. Route SIGINT/SIGTERM to a cancellation token
    4. Run the scheduler with a background progress reporter
    5. Log a summary; exit 0 (including after cancellation), 1 on fatal errors
"""

import argparse
import logging
import sys
from typing import List, Optional

import cv2

from framefixer.cancellation import (
    CancellationToken,
    install_signal_handlers,
    restore_signal_handlers,
)
from framefixer.config import (
    ConfigurationError,
    LoggingConfig,
    Settings,
    read_config_data,
    setup_logging,
)
from framefixer.compare import ImageShapeError
from framefixer.observability import ProgressReporter
from framefixer.schedule import FrameScheduler
from framefixer.stream import (
    SinkWriteError,
    SourceOpenError,
    VideoFrameSink,
    VideoFrameSource,
)


logger = logging.getLogger(__name__)

FALLBACK_FOURCC = "mp4v"

# Failures while frames are flowing; buffered records already written stay written
_STREAM_ERRORS = (SinkWriteError, ImageShapeError, cv2.error)

_SCHEDULER_OPTIONS = (
    ("buffer_size", "distinct frames considered when adjusting; default is 7"),
    ("comparison_scale", "factor by which to reduce frames for matching; default is 4, disable with 1"),
    ("adjustment_bound", "helps ensure audio stays synced by bounding adjustment distance; default is 5"),
    ("duplicate_count", "number of times a frame should repeat to avoid being lost; default is 2"),
    ("threshold_strict", "standard deviation threshold to use when matching frames; default is 0.5"),
    ("threshold_relaxed", "relaxed comparison threshold; default is strict/2, disable with equal to strict"),
)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="framefixer",
        description=(
            "Prepare high fps video for downsampling by respacing duplicate "
            "frames so each distinct frame repeats duplicate_count times."
        ),
    )
    parser.add_argument("input", help="Input video path")
    parser.add_argument("output", help="Output video path")

    for option, help_text in _SCHEDULER_OPTIONS:
        parser.add_argument(
            f"--{option.replace('_', '-')}",
            f"-{option}",
            dest=option,
            default=None,
            help=help_text,
        )

    parser.add_argument(
        "-c", "--config", dest="config_file", default=None,
        help="Optional YAML config file",
    )
    parser.add_argument(
        "--log-level", dest="log_level", default=None,
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--no-progress", dest="progress", action="store_false",
        help="Disable periodic progress lines",
    )
    parser.set_defaults(progress=True)
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """
    Merge file, environment and command-line options.

    Logging is configured from the merged logging section before the
    scheduler options are validated, so option warnings use that format.
    """
    overrides = {option: getattr(args, option) for option, _ in _SCHEDULER_OPTIONS}
    config_data = read_config_data(args.config_file, overrides=overrides)

    logging_data = dict(config_data.get("logging") or {})
    if args.log_level:
        logging_data["level"] = args.log_level
    config_data["logging"] = logging_data
    setup_logging(Settings(logging=LoggingConfig.model_validate(logging_data)))

    settings = Settings.model_validate(config_data)
    if not args.progress:
        settings.progress.enabled = False
    return settings


def _output_fourcc(source: VideoFrameSource) -> str:
    """Source codec, or a portable fallback when the container reports none."""
    fourcc = source.fourcc
    if len(fourcc) == 4 and fourcc.isprintable() and fourcc.strip():
        return fourcc
    logger.warning(f"Source codec {fourcc!r} unusable, writing with {FALLBACK_FOURCC!r}")
    return FALLBACK_FOURCC


def run(args: argparse.Namespace) -> int:
    """
    Execute one framefixer run.

    Returns:
        Process exit status
    """
    settings = load_settings(args)
    config = settings.scheduler

    try:
        source = VideoFrameSource(args.input, comparison_scale=config.comparison_scale)
    except SourceOpenError as e:
        logger.error(f"{e}, quitting...")
        return 1

    with source:
        try:
            sink = VideoFrameSink(
                args.output,
                fourcc=_output_fourcc(source),
                fps=source.fps,
                size=source.size,
            )
        except SinkWriteError as e:
            logger.error(f"{e}, quitting...")
            return 1

        with sink:
            logger.info(f"Input: {args.input}")
            logger.info(f"Output: {args.output}")
            logger.info(
                f"Length: {source.duration_seconds:.2f}s, "
                f"Frames: {source.frame_count}, "
                f"Fps: {source.fps:.2f}, "
                f"Dimensions: {source.width}x{source.height}, "
                f"Codec: {source.fourcc}"
            )
            logger.info(
                f"Settings: buffer_size={config.buffer_size}, "
                f"comparison_scale={config.comparison_scale}, "
                f"adjustment_bound={config.adjustment_bound}, "
                f"duplicate_count={config.duplicate_count}, "
                f"threshold_strict={config.threshold_strict}, "
                f"threshold_relaxed={config.relaxed_threshold}"
            )

            scheduler = FrameScheduler.from_config(config, total_frames=source.frame_count)
            token = CancellationToken()
            previous_handlers = install_signal_handlers(token)

            reporter: Optional[ProgressReporter] = None
            if settings.progress.enabled:
                reporter = ProgressReporter(
                    scheduler,
                    fps=source.fps,
                    interval_seconds=settings.progress.interval_seconds,
                )
                reporter.start()

            try:
                metrics = scheduler.run(source, sink, cancel=token)
            except _STREAM_ERRORS as e:
                logger.error(
                    f"{type(e).__name__}: {e} (read={scheduler.frames_read}, "
                    f"written={scheduler.frames_written}), quitting..."
                )
                return 1
            finally:
                if reporter is not None:
                    reporter.stop()
                restore_signal_handlers(previous_handlers)

    logger.info(f"Run summary: {metrics.to_dict()}")
    if metrics.reallocation_failures:
        logger.warning(
            f"{metrics.reallocation_failures} reallocation cycles left their target below "
            f"duplicate_count={config.duplicate_count}; those frames may be lost when downsampling"
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return run(args)
    except ConfigurationError as e:
        print(f"Unable to parse arguments: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

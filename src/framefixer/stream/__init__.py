"""
Stream Module
=============

Frame source and sink components.

This module provides the I/O boundary of the scheduler:
    - SourceFrame: Typed frame read from a source (image + comparison + index)
    - FrameSink: Protocol for anything accepting (image, count)
    - VideoFrameSource: OpenCV VideoCapture reader
    - VideoFrameSink: OpenCV VideoWriter writer

Example:
    from framefixer.stream import VideoFrameSource, VideoFrameSink

    with VideoFrameSource("in.mp4", comparison_scale=4) as source:
        with VideoFrameSink("out.mp4", source.fourcc, source.fps, source.size) as sink:
            scheduler.run(source, sink)
"""

from framefixer.stream.frame import FrameSink, SourceFrame
from framefixer.stream.video_source import (
    SourceOpenError,
    VideoFrameSource,
    comparison_size,
    decode_fourcc,
    to_comparison_image,
)
from framefixer.stream.video_sink import SinkWriteError, VideoFrameSink


__all__ = [
    "FrameSink",
    "SourceFrame",
    "SourceOpenError",
    "VideoFrameSource",
    "comparison_size",
    "decode_fourcc",
    "to_comparison_image",
    "SinkWriteError",
    "VideoFrameSink",
]

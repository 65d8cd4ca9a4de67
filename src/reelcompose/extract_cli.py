"""CLIs for pipeline extracts — audio for transcription, JPEG thumbnails.

Usage:
    reelcompose audio source.mp4 --output audio.ogg
    reelcompose thumbnail source.mp4 --at 3.5 --output thumb.jpg --width 320
"""

import argparse
from pathlib import Path

from .common import setup_logging
from .errors import PipelineError
from .pipeline import THUMBNAIL_QUALITY, THUMBNAIL_WIDTH, MediaPipeline
from .timecode import timecode_to_seconds


def _source_arg(parser):
    parser.add_argument("source", help="Path to source video")
    parser.add_argument("--output", required=True, help="Output file path")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")


def _run(parser, parsed, job):
    """Read the source, run job(pipeline, data, name), write the output."""
    setup_logging(parsed.verbose)
    source = Path(parsed.source)
    if not source.exists():
        parser.error(f"Source video not found: {source}")

    pipeline = MediaPipeline()
    try:
        data = job(pipeline, source.read_bytes(), source.name)
    except PipelineError as exc:
        parser.exit(1, f"{parser.prog}: error: {exc}\n")
    finally:
        pipeline.close()

    output = Path(parsed.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    print(f"Done: {output} ({len(data)} bytes)")


def audio_main(args=None):
    parser = argparse.ArgumentParser(
        prog="reelcompose audio",
        description="Extract mono 12 kHz Opus audio (Ogg) sized for transcription upload.",
    )
    _source_arg(parser)
    parsed = parser.parse_args(args)

    print(f"Extracting audio from {parsed.source}")
    _run(parser, parsed, lambda p, data, name: p.extract_audio(data, input_name=name))


def thumbnail_main(args=None):
    parser = argparse.ArgumentParser(
        prog="reelcompose thumbnail",
        description="Grab one frame as a JPEG thumbnail.",
    )
    _source_arg(parser)
    parser.add_argument(
        "--at", type=timecode_to_seconds, default=0.0,
        help="Timestamp, seconds or [HH:]MM:SS.mmm (default: 0)",
    )
    parser.add_argument(
        "--width", type=int, default=THUMBNAIL_WIDTH,
        help=f"Thumbnail width in pixels, height keeps aspect (default: {THUMBNAIL_WIDTH})",
    )
    parser.add_argument(
        "--quality", type=int, default=THUMBNAIL_QUALITY,
        help=f"JPEG q:v, 2 (best) to 31 (default: {THUMBNAIL_QUALITY})",
    )
    parsed = parser.parse_args(args)
    if parsed.width <= 0:
        parser.error("--width must be positive")

    print(f"Thumbnail from {parsed.source} at {parsed.at:.2f}s")
    _run(parser, parsed, lambda p, data, name: p.extract_thumbnail(
        data, parsed.at, input_name=name, width=parsed.width, quality=parsed.quality,
    ))

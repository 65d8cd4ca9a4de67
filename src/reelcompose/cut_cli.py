"""CLI for cutting one segment out of a source video.

The cut is a stream copy through the media pipeline: no re-encode, so it
is fast but starts on the keyframe at or before --start.

Usage:
    reelcompose cut source.mp4 --start 10 --end 30 --output clip.mp4
    reelcompose cut source.mp4 --start 01:05.250 --end 01:20 --output clip.mp4
"""

import argparse
from pathlib import Path

from .common import setup_logging
from .errors import PipelineError, ReelValidationError
from .pipeline import MediaPipeline
from .timecode import format_duration, timecode_to_seconds


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="reelcompose cut",
        description="Cut a segment from a source video (stream copy).",
    )
    parser.add_argument("source", help="Path to source video")
    parser.add_argument(
        "--start", type=timecode_to_seconds, required=True,
        help="Start time, seconds or [HH:]MM:SS.mmm",
    )
    parser.add_argument(
        "--end", type=timecode_to_seconds, required=True,
        help="End time, seconds or [HH:]MM:SS.mmm",
    )
    parser.add_argument("--output", required=True, help="Output file path")
    parser.add_argument(
        "--force", action="store_true",
        help="Overwrite an existing output file",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parsed = parser.parse_args(args)
    setup_logging(parsed.verbose)

    source = Path(parsed.source)
    if not source.exists():
        parser.error(f"Source video not found: {source}")
    output = Path(parsed.output)
    if output.exists() and not parsed.force:
        parser.error(f"Output exists (use --force to overwrite): {output}")

    print(f"Cutting {source}  {parsed.start:.1f}s — {parsed.end:.1f}s")
    pipeline = MediaPipeline()
    try:
        data = pipeline.clip_segment(
            source.read_bytes(), parsed.start, parsed.end, input_name=source.name,
        )
    except (ReelValidationError, PipelineError) as exc:
        parser.exit(1, f"{parser.prog}: error: {exc}\n")
    finally:
        pipeline.close()

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    duration = max(0.0, parsed.end - max(0.0, parsed.start))
    print(f"Done: {output} ({format_duration(duration)}, {len(data)} bytes)")


if __name__ == "__main__":
    main()

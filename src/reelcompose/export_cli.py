"""CLI for reel export — manifest in, captioned portrait mp4 out.

Reads a reel manifest (clip id, source, trim window, transcript, style,
export settings), seeds captions from the transcript, and exports the
trim window with captions burned in. CLI flags override the manifest's
export block.

Usage:
    reelcompose export --manifest reel.yaml --output out/reel.mp4

    # Letterboxed instead of cropped, plus a sidecar SRT
    reelcompose export --manifest reel.yaml --output out/reel.mp4 \
        --format landscape --srt out/reel.srt

Manifest:
    paths:
      media: /data/media
    clip_id: ep12-intro
    source: ${media}/ep12.mp4
    source_duration: 1834.2
    start_time: 62.0
    end_time: 91.5
    transcript: ${media}/ep12.transcript.json
    style:
      fontSize: 56
      animation: {type: fade, duration: 0.3}
    export:
      format: zoom
      crop_center: 0.4
"""

import argparse
import time
from dataclasses import replace
from pathlib import Path

from .clip_input import load_clip_input
from .common import setup_logging
from .editor import ReelEditor
from .errors import PipelineError, ReelValidationError
from .export import EXPORT_FORMATS, export_reel
from .subtitles import build_ass, build_srt
from .timecode import format_duration


def _print_progress(stage, fraction):
    print(f"  [{fraction:4.0%}] {stage}")


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="reelcompose export",
        description="Export a captioned vertical reel from a YAML manifest.",
    )
    parser.add_argument("--manifest", required=True, help="Path to reel YAML manifest")
    parser.add_argument("--output", required=True, help="Output mp4 path")
    parser.add_argument(
        "--source", default=None,
        help="Override the manifest's source (path, file:// or http(s) URL)",
    )
    parser.add_argument(
        "--format", choices=sorted(EXPORT_FORMATS), default=None,
        help="zoom: crop to fill 9:16; landscape: letterbox (default: manifest or zoom)",
    )
    parser.add_argument(
        "--resolution", default=None,
        help="Output size as WxH, e.g. 540x960 (default: 1080x1920)",
    )
    parser.add_argument(
        "--crop-center", type=float, default=None,
        help="Horizontal crop center for zoom, 0 (left) to 1 (right)",
    )
    parser.add_argument("--srt", default=None, help="Also write SRT captions here")
    parser.add_argument("--ass", default=None, help="Also write ASS captions here")
    parser.add_argument(
        "--force", action="store_true",
        help="Overwrite an existing output file",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parsed = parser.parse_args(args)
    setup_logging(parsed.verbose)

    output = Path(parsed.output)
    if output.exists() and not parsed.force:
        parser.error(f"Output exists (use --force to overwrite): {output}")

    try:
        clip = load_clip_input(parsed.manifest)
        if parsed.source:
            clip = replace(clip, video_source_url=parsed.source)
        editor = ReelEditor.from_clip_input(clip)
    except ReelValidationError as exc:
        parser.exit(1, f"{parser.prog}: error: {exc}\n")

    trim = editor.trim
    print(
        f"Exporting {clip.clip_id}: {trim.start:.1f}s — {trim.end:.1f}s "
        f"({format_duration(trim.duration)}), {len(editor.visible_captions())} captions"
    )
    settings = {
        "format": parsed.format,
        "resolution": parsed.resolution,
        "crop_center": parsed.crop_center,
    }
    t0 = time.time()
    try:
        result = export_reel(
            editor, clip.video_source_url, output,
            settings=settings, progress=_print_progress,
        )
    except (ReelValidationError, PipelineError) as exc:
        parser.exit(1, f"{parser.prog}: error: {exc}\n")

    captions = editor.captions()
    if parsed.srt:
        Path(parsed.srt).write_text(build_srt(captions, trim.start), encoding="utf-8")
        print(f"  SRT: {parsed.srt}")
    if parsed.ass:
        Path(parsed.ass).write_text(build_ass(captions, trim.start), encoding="utf-8")
        print(f"  ASS: {parsed.ass}")

    size_mb = result.file_size / (1024 * 1024)
    print(f"Done: {output} ({size_mb:.1f} MB, {time.time() - t0:.1f}s)")


if __name__ == "__main__":
    main()

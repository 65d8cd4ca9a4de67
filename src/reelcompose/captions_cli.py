"""CLI for sidecar captions — SRT or ASS straight from a reel manifest.

The caption file is timed relative to the manifest's trim start, so it
lines up with a reel exported from the same manifest. The format follows
the output extension unless --format is given.

Usage:
    reelcompose captions --manifest reel.yaml --output reel.srt
    reelcompose captions --manifest reel.yaml --output reel.ass --resolution 720x1280
"""

import argparse
from pathlib import Path

from .clip_input import load_clip_input
from .common import setup_logging
from .editor import ReelEditor
from .errors import ReelValidationError
from .subtitles import build_ass, build_srt

FORMATS = ("srt", "ass")


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="reelcompose captions",
        description="Write SRT or ASS captions for a reel manifest.",
    )
    parser.add_argument("--manifest", required=True, help="Path to reel YAML manifest")
    parser.add_argument("--output", required=True, help="Output .srt or .ass path")
    parser.add_argument(
        "--format", choices=FORMATS, default=None,
        help="Caption format (default: from the output extension)",
    )
    parser.add_argument(
        "--resolution", default="1080x1920",
        help="ASS play resolution as WxH (default: 1080x1920)",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parsed = parser.parse_args(args)
    setup_logging(parsed.verbose)

    fmt = parsed.format or Path(parsed.output).suffix.lstrip(".").lower()
    if fmt not in FORMATS:
        parser.error(f"Cannot infer caption format from '{parsed.output}'; use --format")
    try:
        width, height = (int(v) for v in parsed.resolution.lower().split("x"))
    except ValueError:
        parser.error(f"Invalid --resolution '{parsed.resolution}', expected WxH")

    try:
        editor = ReelEditor.from_clip_input(load_clip_input(parsed.manifest))
    except ReelValidationError as exc:
        parser.exit(1, f"{parser.prog}: error: {exc}\n")

    captions = editor.captions()
    if fmt == "srt":
        text = build_srt(captions, editor.trim.start)
    else:
        text = build_ass(captions, editor.trim.start, width=width, height=height)

    output = Path(parsed.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    count = sum(1 for c in captions if c.is_visible)
    print(f"Done: {output} ({count} captions, {fmt.upper()})")


if __name__ == "__main__":
    main()

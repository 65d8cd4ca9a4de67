"""Subcommand dispatcher for reelcompose.

Usage:
    reelcompose export     --manifest reel.yaml --output reel.mp4
    reelcompose captions   --manifest reel.yaml --output captions.srt
    reelcompose cut        source.mp4 --start 10 --end 30 --output clip.mp4
    reelcompose audio      source.mp4 --output audio.ogg
    reelcompose thumbnail  source.mp4 --at 3.5 --output thumb.jpg
"""

import argparse
import sys


COMMANDS = {
    "export": "Export a captioned reel from a YAML manifest",
    "captions": "Write SRT/ASS captions from a YAML manifest",
    "cut": "Cut a segment from a source video (stream copy)",
    "audio": "Extract a compact mono Opus track for transcription",
    "thumbnail": "Grab a single JPEG frame",
}


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="reelcompose",
        description="Short vertical reels with timed, styled captions.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    for name, help_text in COMMANDS.items():
        subparsers.add_parser(name, help=help_text, add_help=False)

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        # Bare `reelcompose`: usage, then exit 1.
        parser.print_help()
        sys.exit(1)

    if parsed.command == "export":
        from .export_cli import main as export_main
        export_main(remaining)
    elif parsed.command == "captions":
        from .captions_cli import main as captions_main
        captions_main(remaining)
    elif parsed.command == "cut":
        from .cut_cli import main as cut_main
        cut_main(remaining)
    elif parsed.command == "audio":
        from .extract_cli import audio_main
        audio_main(remaining)
    elif parsed.command == "thumbnail":
        from .extract_cli import thumbnail_main
        thumbnail_main(remaining)


if __name__ == "__main__":
    main()

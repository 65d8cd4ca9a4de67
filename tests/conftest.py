"""Shared test fixtures for reelcompose tests."""

import subprocess

import pytest
import imageio_ffmpeg

from reelcompose.models import TranscriptionSegment, TrimWindow

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()


@pytest.fixture
def source_video(tmp_path):
    """Synthetic 5s blue clip, 320x240 at 10fps, with a silent AAC track.

    A keyframe every second keeps stream-copy cuts on whole seconds.
    """
    out = tmp_path / "source.mp4"
    subprocess.run(
        [
            _FFMPEG, "-y",
            "-f", "lavfi", "-i", "color=c=blue:s=320x240:d=5:r=10",
            "-f", "lavfi", "-i", "anullsrc=r=44100:cl=mono",
            "-shortest",
            "-c:v", "libx264", "-crf", "28", "-pix_fmt", "yuv420p",
            "-g", "10",
            "-c:a", "aac", "-b:a", "32k",
            str(out),
        ],
        check=True,
        capture_output=True,
    )
    return out


@pytest.fixture
def segments():
    """Four transcript segments around a 10-40s trim window of a 60s source."""
    return [
        TranscriptionSegment("straddles the start edge", 5.0, 12.0),
        TranscriptionSegment("hello there world", 15.0, 18.0),
        TranscriptionSegment("مرحبا بكم", 20.0, 22.5),
        TranscriptionSegment("after the window", 41.0, 50.0),
    ]


@pytest.fixture
def trim():
    return TrimWindow(10.0, 40.0)

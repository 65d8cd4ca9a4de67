"""FFmpeg engine with a private virtual filesystem.

The engine is the only thing that talks to the ffmpeg binary bundled by
imageio-ffmpeg. Callers never pass host paths to it: they stage named
byte buffers into the engine's workspace, run an instruction sequence
that refers to those names, read named outputs back as bytes, and
delete them. The workspace is a private temporary directory, and
nothing in it is garbage-collected: whatever is staged stays until it
is deleted or the engine is closed.

Loading (resolving the binary, creating the workspace) happens once, on
first use, and is reused for every job after that.
"""

import logging
import subprocess
import tempfile
from pathlib import Path

import imageio_ffmpeg

from .errors import EngineError

logger = logging.getLogger(__name__)


class FFmpegEngine:
    """Named-file interface to an ffmpeg binary.

    Args:
        ffmpeg_exe: Explicit ffmpeg path. Defaults to imageio-ffmpeg's bundled binary.
        timeout: Optional per-instruction timeout in seconds.
    """

    def __init__(self, ffmpeg_exe: str | None = None, timeout: float | None = None):
        self._ffmpeg_exe = ffmpeg_exe
        self._timeout = timeout
        self._workdir: tempfile.TemporaryDirectory | None = None
        self.load_count = 0

    # ── Lifecycle ─────────────────────────────────────────────────

    @property
    def loaded(self) -> bool:
        return self._workdir is not None

    def load(self) -> None:
        """Resolve the binary and create the workspace; no-op once loaded."""
        if self.loaded:
            return
        if self._ffmpeg_exe is None:
            self._ffmpeg_exe = imageio_ffmpeg.get_ffmpeg_exe()
        self._workdir = tempfile.TemporaryDirectory(prefix="reelcompose-vfs-")
        self.load_count += 1
        logger.debug("Engine loaded: %s (workspace %s)", self._ffmpeg_exe, self._workdir.name)

    def close(self) -> None:
        """Drop the workspace and everything still in it."""
        if self._workdir is not None:
            self._workdir.cleanup()
            self._workdir = None

    def __enter__(self):
        self.load()
        return self

    def __exit__(self, *exc):
        self.close()

    # ── Virtual filesystem ────────────────────────────────────────

    def _path(self, name: str) -> Path:
        self.load()
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ValueError(f"Invalid virtual file name: '{name}'")
        return Path(self._workdir.name) / name

    def stage(self, name: str, data: bytes) -> None:
        """Write a named input buffer into the workspace."""
        self._path(name).write_bytes(data)

    def read(self, name: str) -> bytes:
        """Read a named output back. Raises FileNotFoundError if absent."""
        return self._path(name).read_bytes()

    def delete(self, name: str) -> None:
        """Remove a named file. Raises FileNotFoundError if absent."""
        self._path(name).unlink()

    def exists(self, name: str) -> bool:
        return self._path(name).exists()

    def list_files(self) -> list[str]:
        self.load()
        return sorted(p.name for p in Path(self._workdir.name).iterdir())

    # ── Execution ─────────────────────────────────────────────────

    def execute(self, args: list[str]) -> None:
        """Run ffmpeg with args, resolving bare names inside the workspace.

        Raises:
            EngineError: ffmpeg exited non-zero.
        """
        self.load()
        cmd = [self._ffmpeg_exe, "-y", "-hide_banner", "-nostdin", *args]
        logger.debug("Engine exec: %s", " ".join(cmd))
        result = subprocess.run(
            cmd,
            cwd=self._workdir.name,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=self._timeout,
        )
        if result.returncode != 0:
            raise EngineError(args, result.returncode, result.stderr)

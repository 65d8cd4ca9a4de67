"""Media pipeline orchestrator — audio extracts, segment cuts, thumbnails.

Every job runs the same four steps against the shared FFmpegEngine:

  1. stage   — write the input bytes into the engine's virtual filesystem
  2. execute — run the job's ffmpeg instruction sequence
  3. read    — read the output bytes back
  4. cleanup — delete the input and the output, always

Cleanup runs whether or not steps 1-3 succeeded. A file that is already
gone (the usual case after a failed execute) is recorded and ignored;
cleanup never raises and never hides the original error. Failures in
steps 1-3 surface as PipelineError naming the operation and the stage.

The engine is not reentrant, so at most one job may hold it at a time.
A second caller gets PipelineBusyError instead of a queued job;
serialising requests is the caller's business. Files left behind by a
job that was abandoned mid-flight are swept at the start of the next
job, with a warning.
"""

import itertools
import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path

from .errors import PipelineBusyError, PipelineError, ReelValidationError
from .engine import FFmpegEngine

logger = logging.getLogger(__name__)


# ── Job parameters ───────────────────────────────────────────────
# Sized for upload to a transcription service, not for listening.

AUDIO_SAMPLE_RATE = 12000
AUDIO_BITRATE = "8k"
AUDIO_CODEC_ARGS = [
    "-c:a", "libopus",
    "-application", "voip",
    "-vbr", "on",
    "-b:a", AUDIO_BITRATE,
    "-compression_level", "10",
]

THUMBNAIL_WIDTH = 640
THUMBNAIL_QUALITY = 5


@dataclass
class CleanupResult:
    """What a job's cleanup step did. Informational only; never raised."""

    deleted: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


_SUFFIX_RE = re.compile(r"\.[A-Za-z0-9]{1,10}")


def _safe_suffix(input_name: str) -> str:
    """Extension of input_name for a virtual file name, '.mp4' if unusable."""
    suffix = Path(input_name).suffix
    return suffix if _SUFFIX_RE.fullmatch(suffix) else ".mp4"


@dataclass
class _Job:
    operation: str
    input_name: str
    output_name: str
    instructions: list[str]


class MediaPipeline:
    """Runs transcoding jobs against one engine owned for the pipeline's lifetime.

    Args:
        engine: Engine to drive. A new FFmpegEngine is created when omitted.
            The engine loads lazily on the first job and is reused after.
    """

    def __init__(self, engine: FFmpegEngine | None = None):
        self.engine = engine if engine is not None else FFmpegEngine()
        self.last_cleanup: CleanupResult | None = None
        self._lock = threading.Lock()
        self._job_ids = itertools.count(1)

    def close(self) -> None:
        self.engine.close()

    # ── Job protocol ──────────────────────────────────────────────

    def _cleanup(self, names: list[str]) -> CleanupResult:
        result = CleanupResult()
        for name in names:
            try:
                self.engine.delete(name)
                result.deleted.append(name)
            except FileNotFoundError:
                result.missing.append(name)
            except Exception as exc:
                result.failed[name] = str(exc)
                logger.warning("Could not delete virtual file %s: %s", name, exc)
        if result.missing:
            logger.debug("Cleanup: already absent %s", result.missing)
        return result

    def _sweep_stale(self) -> None:
        stale = self.engine.list_files()
        if stale:
            logger.warning("Sweeping %d file(s) left by an abandoned job: %s", len(stale), stale)
            self._cleanup(stale)

    def _run(self, job: _Job, data: bytes) -> bytes:
        if not self._lock.acquire(blocking=False):
            raise PipelineBusyError(job.operation)
        try:
            self._sweep_stale()
            logger.info("Job %s: %s -> %s", job.operation, job.input_name, job.output_name)
            stage = "stage"
            try:
                self.engine.stage(job.input_name, data)
                stage = "execute"
                self.engine.execute(job.instructions)
                stage = "read"
                output = self.engine.read(job.output_name)
            except Exception as exc:
                raise PipelineError(job.operation, stage, exc) from exc
            finally:
                self.last_cleanup = self._cleanup([job.input_name, job.output_name])
            if not output:
                raise PipelineError(job.operation, "read", ValueError("empty output"))
            logger.info("Job %s done: %d bytes", job.operation, len(output))
            return output
        finally:
            self._lock.release()

    def _names(self, operation: str, input_name: str, output_ext: str) -> tuple[str, str]:
        job_id = next(self._job_ids)
        suffix = _safe_suffix(input_name)
        return (
            f"job{job_id}-{operation}-input{suffix}",
            f"job{job_id}-{operation}-output{output_ext}",
        )

    # ── Operations ────────────────────────────────────────────────

    def extract_audio(self, data: bytes, input_name: str = "input.mp4") -> bytes:
        """Mono 12 kHz Opus at 8 kbit/s, in an Ogg container."""
        in_name, out_name = self._names("extract_audio", input_name, ".ogg")
        instructions = [
            "-i", in_name,
            "-vn",
            "-ac", "1",
            "-ar", str(AUDIO_SAMPLE_RATE),
            *AUDIO_CODEC_ARGS,
            out_name,
        ]
        return self._run(_Job("extract_audio", in_name, out_name, instructions), data)

    def clip_segment(
        self, data: bytes, start: float, end: float, input_name: str = "input.mp4",
    ) -> bytes:
        """Re-mux [start, end) with stream copy; output timestamps start at zero.

        Raises:
            ReelValidationError: If the range is empty after clamping start to 0.
            PipelineError: On any engine failure.
        """
        safe_start = max(0.0, start)
        safe_end = max(safe_start, end)
        duration = safe_end - safe_start
        if duration <= 0:
            raise ReelValidationError(
                f"Invalid time range: end ({end}) must be greater than start ({start})"
            )
        suffix = _safe_suffix(input_name)
        in_name, out_name = self._names("clip_segment", input_name, suffix)
        instructions = [
            "-ss", f"{safe_start:.3f}",
            "-i", in_name,
            "-t", f"{duration:.3f}",
            "-c", "copy",
            "-avoid_negative_ts", "make_zero",
            out_name,
        ]
        return self._run(_Job("clip_segment", in_name, out_name, instructions), data)

    def extract_thumbnail(
        self,
        data: bytes,
        timestamp: float,
        input_name: str = "input.mp4",
        width: int = THUMBNAIL_WIDTH,
        quality: int = THUMBNAIL_QUALITY,
    ) -> bytes:
        """One JPEG frame at timestamp, downscaled to width.

        Seeks on the input side so only frames around the timestamp are
        decoded.
        """
        in_name, out_name = self._names("extract_thumbnail", input_name, ".jpg")
        instructions = [
            "-ss", f"{max(0.0, timestamp):.3f}",
            "-i", in_name,
            "-frames:v", "1",
            "-q:v", str(quality),
            "-vf", f"scale={width}:-1",
            out_name,
        ]
        return self._run(_Job("extract_thumbnail", in_name, out_name, instructions), data)

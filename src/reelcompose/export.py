"""Reel export — cut the trim window, reframe to portrait, burn in captions.

Export has two paths:

  * no visible captions: the stream-copied segment from
    MediaPipeline.clip_segment is the result, with no re-encode;
  * otherwise the segment is opened with moviepy, reframed to the target
    resolution, captions are drawn frame by frame through
    reelcompose.render, and the result is encoded with the export preset.

Formats:
    zoom       center-crop to the target aspect (9:16), then resize.
               An optional crop_center hint (normalized x, or [x, y])
               moves the crop window off-center.
    landscape  fit the whole frame inside the target, letterboxed on
               the background color.

Caption times stay in source-video seconds; frame t of the segment is
drawn with the captions active at trim.start + t.
"""

import logging
import tempfile
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
from moviepy import ColorClip, CompositeVideoClip, VideoFileClip

from .clip_input import validate_trim_window
from .collaborators import CreditChecker, check_credits
from .common import parse_hex_color
from .editor import ReelEditor
from .errors import ReelValidationError
from .models import ReelExportResult, TimelineState
from .pipeline import MediaPipeline
from .render import apply_captions_to_frame

logger = logging.getLogger(__name__)


# ── Presets ──────────────────────────────────────────────────────

EXPORT_PRESETS = {
    "high": {
        "video_codec": "libx264",
        "audio_codec": "aac",
        "audio_bitrate": "192k",
        "fps": 30,
        "preset": "ultrafast",
        "crf": 16,
        "resolution": (1080, 1920),
    },
}

EXPORT_FORMATS = {"zoom", "landscape"}
DEFAULT_FORMAT = "zoom"
DEFAULT_BACKGROUND = "#000000"
SOURCE_FETCH_TIMEOUT = 120.0


def resolve_export_settings(overrides: dict | None = None) -> dict:
    """Merge overrides onto a quality preset and validate the result.

    Recognised keys: quality, format, resolution, fps, crf, preset,
    crop_center, background, plus any preset key.

    Raises:
        ReelValidationError: Unknown quality or format, odd or
            non-positive resolution, non-positive fps.
    """
    overrides = dict(overrides or {})
    quality = overrides.pop("quality", "high")
    if quality not in EXPORT_PRESETS:
        raise ReelValidationError(
            f"Unknown export quality '{quality}'. Valid: {sorted(EXPORT_PRESETS)}"
        )
    settings = {
        **EXPORT_PRESETS[quality],
        "quality": quality,
        "format": DEFAULT_FORMAT,
        "crop_center": None,
        "background": DEFAULT_BACKGROUND,
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})

    if settings["format"] not in EXPORT_FORMATS:
        raise ReelValidationError(
            f"Unknown export format '{settings['format']}'. Valid: {sorted(EXPORT_FORMATS)}"
        )
    resolution = settings["resolution"]
    if isinstance(resolution, str):
        try:
            resolution = tuple(int(v) for v in resolution.lower().split("x"))
        except ValueError:
            raise ReelValidationError(f"Invalid resolution '{resolution}', expected WxH")
    if len(resolution) != 2 or any(v <= 0 or v % 2 for v in resolution):
        raise ReelValidationError(
            f"Resolution must be two positive even numbers, got {resolution}"
        )
    settings["resolution"] = (int(resolution[0]), int(resolution[1]))
    if settings["fps"] <= 0:
        raise ReelValidationError(f"fps must be positive, got {settings['fps']}")
    parse_hex_color(settings["background"])
    return settings


# ── Source loading ───────────────────────────────────────────────


def load_source(source: str | Path) -> bytes:
    """Read source media bytes from a local path, a file:// URI or http(s)."""
    text = str(source)
    scheme = urlparse(text).scheme
    if scheme in ("http", "https"):
        logger.info("Fetching source %s", text)
        response = httpx.get(text, follow_redirects=True, timeout=SOURCE_FETCH_TIMEOUT)
        response.raise_for_status()
        return response.content
    if scheme == "file":
        return Path(unquote(urlparse(text).path)).read_bytes()
    return Path(text).read_bytes()


def _input_name(source) -> str:
    suffix = Path(urlparse(str(source)).path).suffix
    return f"source{suffix or '.mp4'}"


# ── Reframing ────────────────────────────────────────────────────


def _crop_center(hint) -> tuple[float, float]:
    if hint is None:
        return 0.5, 0.5
    if isinstance(hint, (int, float)):
        return float(hint), 0.5
    x, y = hint
    return float(x), float(y)


def zoom_crop_box(
    src_size: tuple[int, int],
    target_size: tuple[int, int],
    crop_center=None,
) -> tuple[int, int, int, int]:
    """Largest box of the target aspect inside the source, as (x1, y1, x2, y2).

    The box is centered on crop_center (normalized) and then pushed back
    inside the source frame.
    """
    src_w, src_h = src_size
    target_aspect = target_size[0] / target_size[1]
    if src_w / src_h > target_aspect:
        crop_w, crop_h = round(src_h * target_aspect), src_h
    else:
        crop_w, crop_h = src_w, round(src_w / target_aspect)
    cx, cy = _crop_center(crop_center)
    x1 = min(max(round(cx * src_w - crop_w / 2), 0), src_w - crop_w)
    y1 = min(max(round(cy * src_h - crop_h / 2), 0), src_h - crop_h)
    return x1, y1, x1 + crop_w, y1 + crop_h


def letterbox_size(src_size: tuple[int, int], target_size: tuple[int, int]) -> tuple[int, int]:
    """Size of the source scaled to fit entirely inside the target."""
    scale = min(target_size[0] / src_size[0], target_size[1] / src_size[1])
    return max(1, round(src_size[0] * scale)), max(1, round(src_size[1] * scale))


def reframe(clip, settings: dict):
    """Reframe a moviepy clip to settings['resolution'] per settings['format']."""
    target = settings["resolution"]
    src_size = tuple(clip.size)
    if settings["format"] == "zoom":
        x1, y1, x2, y2 = zoom_crop_box(src_size, target, settings.get("crop_center"))
        return clip.cropped(x1=x1, y1=y1, x2=x2, y2=y2).resized(target)

    fitted = clip.resized(letterbox_size(src_size, target)).with_position("center")
    background = (
        ColorClip(size=target, color=parse_hex_color(settings["background"]))
        .with_duration(clip.duration)
    )
    return CompositeVideoClip([background, fitted], size=target)


# ── Export ───────────────────────────────────────────────────────


def _report(progress, stage: str, fraction: float) -> None:
    if progress is not None:
        progress(stage, fraction)


def _burn_in(segment: bytes, suffix: str, captions, trim_start: float, settings: dict) -> bytes:
    with tempfile.TemporaryDirectory(prefix="reelcompose-export-") as tmp:
        seg_path = Path(tmp) / f"segment{suffix}"
        out_path = Path(tmp) / "reel.mp4"
        seg_path.write_bytes(segment)

        source_clip = VideoFileClip(str(seg_path))
        try:
            framed = reframe(source_clip, settings)

            def _apply_captions(get_frame, t):
                return apply_captions_to_frame(get_frame(t), captions, trim_start + t)

            framed = framed.transform(_apply_captions)
            framed.write_videofile(
                str(out_path),
                fps=settings["fps"],
                codec=settings["video_codec"],
                audio_codec=settings["audio_codec"],
                audio_bitrate=settings["audio_bitrate"],
                preset=settings["preset"],
                ffmpeg_params=["-crf", str(settings["crf"]), "-pix_fmt", "yuv420p"],
                temp_audiofile_path=tmp,
                logger=None,
            )
        finally:
            source_clip.close()
        return out_path.read_bytes()


def export_reel(
    editor: ReelEditor | TimelineState,
    source,
    output: str | Path,
    settings: dict | None = None,
    pipeline: MediaPipeline | None = None,
    credit_check: CreditChecker | None = None,
    user_id: str | None = None,
    progress=None,
) -> ReelExportResult:
    """Export the trim window of source as a captioned portrait reel.

    Args:
        editor: Editing session (or a bare TimelineState) to export.
        source: Source media as bytes, a local path, a file:// URI or an
            http(s) URL.
        output: Where to write the exported file.
        settings: Export overrides, see resolve_export_settings. When
            editor is a ReelEditor, its clip's export block is applied
            first.
        pipeline: Pipeline to cut with. A private one is created (and
            closed) when omitted.
        credit_check: Optional credit service, asked for the trim duration.
        user_id: User to charge; required when credit_check is given.
        progress: Optional callback(stage, fraction).

    Raises:
        ReelValidationError: Invalid trim window, settings or credits.
        PipelineError: The segment cut failed.
    """
    session = editor if isinstance(editor, ReelEditor) else None
    state = session.state if session is not None else editor
    clip_input = session.clip if session is not None else None

    merged = {}
    if clip_input is not None:
        if "crop_center" in clip_input.metadata:
            merged["crop_center"] = clip_input.metadata["crop_center"]
        merged.update(clip_input.export)
    merged.update(settings or {})
    resolved = resolve_export_settings(merged)

    trim = state.trim
    _report(progress, "validate", 0.0)
    validate_trim_window(trim, state.source_duration)
    if credit_check is not None:
        check_credits(credit_check, user_id, trim.duration)

    data = source if isinstance(source, bytes) else load_source(source)
    input_name = "source.mp4" if isinstance(source, bytes) else _input_name(source)

    own_pipeline = pipeline is None
    if own_pipeline:
        pipeline = MediaPipeline()
    try:
        _report(progress, "cut", 0.1)
        segment = pipeline.clip_segment(data, trim.start, trim.end, input_name=input_name)
    finally:
        if own_pipeline:
            pipeline.close()

    captions = [c for c in state.captions if c.is_visible]
    if not captions:
        logger.info("Export: no visible captions, keeping stream-copied segment")
        media = segment
    else:
        logger.info(
            "Export: burning %d caption(s), format=%s, %dx%d",
            len(captions), resolved["format"], *resolved["resolution"],
        )
        _report(progress, "encode", 0.4)
        media = _burn_in(segment, Path(input_name).suffix, captions, trim.start, resolved)

    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(media)
    _report(progress, "done", 1.0)

    if session is not None:
        export_settings = session.export_settings()
    else:
        export_settings = {
            "start_time": trim.start,
            "end_time": trim.end,
            "caption_styles": [c.style for c in state.captions],
        }
    export_settings["format"] = resolved["format"]

    return ReelExportResult(
        clip_id=clip_input.clip_id if clip_input is not None else output.stem,
        media=media,
        video_url=output.resolve().as_uri(),
        duration=trim.duration,
        file_size=len(media),
        export_settings=export_settings,
    )

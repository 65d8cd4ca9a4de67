"""Clip input loader — ReelClipInput from a dict or a YAML/JSON manifest.

Accepts the camelCase shape produced by the upstream clip-selection
pipeline (clipId, videoSourceUrl, sourceVideoDuration, startTime,
endTime, transcription.segments) as well as snake_case keys. YAML is a
superset of JSON, so one loader reads both file types.

Reel manifest schema:
  clip_id: talk-001
  source: "${raw}/talk.mp4"          # or video_source_url / videoSourceUrl
  paths:
    raw: "/data/recordings"
  source_duration: 1800.0
  start_time: 669.0
  end_time: 702.5
  transcript: "${raw}/talk.segments.json"   # optional, JSON with "segments"
  transcription:                            # or inline segments
    segments:
      - {text: "hello there", start: 669.2, end: 671.0, language: en}
  style: {font_size: 56, animation: {type: fade, duration: 0.4}}
  export: {format: zoom, resolution: [1080, 1920], fps: 30}
  metadata: {title: "..."}
"""

import json
import re
from dataclasses import fields
from pathlib import Path

import yaml

from .common import parse_css_color, resolve_path_vars
from .errors import ReelValidationError
from .models import (
    ANIMATION_TYPES,
    DEFAULT_STYLE,
    EASINGS,
    LANGUAGES,
    MIN_DURATION,
    TEXT_ALIGNS,
    TIME_EPSILON,
    TEXT_TRANSFORMS,
    AnimationSpec,
    CaptionStyle,
    Padding,
    ReelClipInput,
    TranscriptionSegment,
    TrimWindow,
    WordTimestamp,
)


_ARABIC_RE = re.compile(r"[\u0600-\u06FF]")

# Accepted spellings for each ReelClipInput field, first match wins.
_KEYS = {
    "clip_id": ("clip_id", "clipId"),
    "video_source_url": ("video_source_url", "videoSourceUrl", "source"),
    "source_video_duration": (
        "source_video_duration", "sourceVideoDuration", "source_duration",
    ),
    "start_time": ("start_time", "startTime"),
    "end_time": ("end_time", "endTime"),
}

_STYLE_ALIASES = {
    "fontSize": "font_size",
    "fontFamily": "font_family",
    "fontWeight": "font_weight",
    "backgroundColor": "background_color",
    "strokeColor": "stroke_color",
    "strokeWidth": "stroke_width",
    "textAlign": "text_align",
    "textTransform": "text_transform",
    "karaokeActiveColor": "karaoke_active_color",
    "karaokeActiveScale": "karaoke_active_scale",
}


# ── Validation ────────────────────────────────────────────────────


def validate_trim_window(trim: TrimWindow, source_duration: float) -> None:
    """Check 0 <= start < end <= source_duration and a 0.1s minimum.

    Raises:
        ReelValidationError: With the specific reason.
    """
    if trim.start < 0:
        raise ReelValidationError("Start time cannot be negative")
    if trim.end > source_duration:
        raise ReelValidationError("End time cannot exceed video duration")
    if trim.start >= trim.end:
        raise ReelValidationError("Start time must be less than end time")
    if trim.end - trim.start < MIN_DURATION - TIME_EPSILON:
        raise ReelValidationError("Trim duration must be at least 0.1 seconds")


def validate_clip_input(clip: ReelClipInput) -> None:
    """Check required fields and the initial trim window.

    Raises:
        ReelValidationError: With the specific reason.
    """
    if not clip.clip_id:
        raise ReelValidationError("Clip ID is required")
    if not clip.video_source_url:
        raise ReelValidationError("Video source URL is required")
    if clip.source_video_duration <= 0:
        raise ReelValidationError("Video duration must be greater than 0")
    validate_trim_window(
        TrimWindow(clip.start_time, clip.end_time), clip.source_video_duration,
    )


def detect_language(text: str) -> str:
    """'ar' when the text contains Arabic script, else 'en'."""
    return "ar" if _ARABIC_RE.search(text) else "en"


def normalize_segments(
    segments: list[TranscriptionSegment] | tuple[TranscriptionSegment, ...],
) -> list[TranscriptionSegment]:
    """Drop blank or inverted segments, sort by start, enforce MIN_DURATION.

    A segment shorter than MIN_DURATION is stretched forward so every
    caption seeded from it satisfies the duration invariant.
    """
    kept = []
    for seg in segments:
        text = seg.text.strip()
        if not text or seg.start >= seg.end:
            continue
        end = seg.end if seg.end - seg.start >= MIN_DURATION else seg.start + MIN_DURATION
        kept.append(TranscriptionSegment(
            text=text,
            start=seg.start,
            end=end,
            language=seg.language or detect_language(text),
            words=seg.words,
        ))
    kept.sort(key=lambda s: s.start)
    return kept


# ── Parsing ───────────────────────────────────────────────────────


def _pick(raw: dict, field_name: str):
    for key in _KEYS[field_name]:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _parse_float(value, what: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ReelValidationError(f"{what} must be a number, got {value!r}") from None


def _parse_words(raw_words, seg_idx: int) -> tuple[WordTimestamp, ...]:
    words = []
    for j, w in enumerate(raw_words or []):
        for key in ("text", "start", "end"):
            if key not in w:
                raise ReelValidationError(
                    f"Segment {seg_idx}, word {j}: missing required field '{key}'"
                )
        words.append(WordTimestamp(
            text=str(w["text"]).strip(),
            start=_parse_float(w["start"], f"Segment {seg_idx}, word {j} start"),
            end=_parse_float(w["end"], f"Segment {seg_idx}, word {j} end"),
        ))
    return tuple(words)


def parse_segments(raw_segments: list[dict]) -> tuple[TranscriptionSegment, ...]:
    """Parse transcription segment dicts; does not normalize."""
    segments = []
    for i, seg in enumerate(raw_segments or []):
        for key in ("text", "start", "end"):
            if key not in seg:
                raise ReelValidationError(f"Segment {i}: missing required field '{key}'")
        language = seg.get("language")
        if language is not None and language not in LANGUAGES:
            raise ReelValidationError(
                f"Segment {i}: invalid language '{language}'. "
                f"Valid: {sorted(LANGUAGES)}"
            )
        segments.append(TranscriptionSegment(
            text=str(seg["text"]),
            start=_parse_float(seg["start"], f"Segment {i} start"),
            end=_parse_float(seg["end"], f"Segment {i} end"),
            language=language,
            words=_parse_words(seg.get("words"), i),
        ))
    return tuple(segments)


def _check_enum(value, valid: set, what: str) -> None:
    if value not in valid:
        raise ReelValidationError(f"Invalid {what} '{value}'. Valid: {sorted(valid)}")


def parse_style(raw: dict | None, base: CaptionStyle = DEFAULT_STYLE) -> CaptionStyle:
    """Build a CaptionStyle from a (possibly partial) style dict.

    Unknown keys are rejected so typos don't silently fall back to
    defaults. camelCase keys from the upstream editor are accepted.
    """
    if not raw:
        return base
    values = {}
    valid_names = {f.name for f in fields(CaptionStyle)}
    for key, value in raw.items():
        name = _STYLE_ALIASES.get(key, key)
        if name not in valid_names:
            raise ReelValidationError(f"Unknown caption style field '{key}'")
        values[name] = value

    if "animation" in values:
        anim = values["animation"] or {}
        spec = AnimationSpec(
            type=anim.get("type", base.animation.type),
            duration=_parse_float(anim.get("duration", base.animation.duration), "animation duration"),
            delay=_parse_float(anim.get("delay", base.animation.delay), "animation delay"),
            easing=anim.get("easing", base.animation.easing),
        )
        _check_enum(spec.type, ANIMATION_TYPES, "animation type")
        _check_enum(spec.easing, EASINGS, "animation easing")
        if spec.duration < 0 or spec.delay < 0:
            raise ReelValidationError("Animation duration and delay must be >= 0")
        values["animation"] = spec

    if "padding" in values:
        pad = values["padding"]
        if isinstance(pad, (int, float)):
            values["padding"] = Padding(int(pad), int(pad), int(pad), int(pad))
        else:
            values["padding"] = Padding(**{k: int(v) for k, v in pad.items()})

    for key in ("color", "background_color", "stroke_color", "karaoke_active_color"):
        if key in values:
            try:
                parse_css_color(values[key])
            except ValueError as exc:
                raise ReelValidationError(f"Invalid {key}: {exc}") from None

    if "text_align" in values:
        _check_enum(values["text_align"], TEXT_ALIGNS, "text_align")
    if "text_transform" in values:
        _check_enum(values["text_transform"], TEXT_TRANSFORMS, "text_transform")

    current = {f.name: getattr(base, f.name) for f in fields(CaptionStyle)}
    current.update(values)
    return CaptionStyle(**current)


def parse_clip_input(raw: dict, paths: dict | None = None) -> ReelClipInput:
    """Build and validate a ReelClipInput from a plain dict.

    Raises:
        ReelValidationError: Missing or invalid fields.
    """
    if not isinstance(raw, dict):
        raise ReelValidationError("Clip input must be a mapping")
    paths = paths or {}

    for name, keys in _KEYS.items():
        if _pick(raw, name) is None:
            raise ReelValidationError(f"Clip input: missing required field '{keys[0]}'")

    source = resolve_path_vars(str(_pick(raw, "video_source_url")), paths)

    raw_segments = []
    transcript_ref = raw.get("transcript")
    if transcript_ref:
        transcript_path = Path(resolve_path_vars(str(transcript_ref), paths))
        with open(transcript_path) as f:
            data = json.load(f)
        raw_segments = data["segments"] if isinstance(data, dict) else data
    elif raw.get("transcription"):
        raw_segments = raw["transcription"].get("segments", [])

    clip = ReelClipInput(
        clip_id=str(_pick(raw, "clip_id")),
        video_source_url=source,
        source_video_duration=_parse_float(
            _pick(raw, "source_video_duration"), "Source video duration",
        ),
        start_time=_parse_float(_pick(raw, "start_time"), "Start time"),
        end_time=_parse_float(_pick(raw, "end_time"), "End time"),
        segments=parse_segments(raw_segments),
        metadata=dict(raw.get("metadata") or {}),
        style=parse_style(raw.get("style")),
        export=dict(raw.get("export") or {}),
    )
    validate_clip_input(clip)
    return clip


def load_clip_input(manifest_path: str | Path) -> ReelClipInput:
    """Load, resolve ${path} variables in, and validate a reel manifest.

    Raises:
        ReelValidationError: Missing/invalid fields.
        FileNotFoundError: Missing manifest or transcript file.
    """
    with open(manifest_path) as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict):
        raise ReelValidationError(f"{manifest_path}: manifest must be a mapping")
    return parse_clip_input(raw, paths=raw.get("paths", {}))

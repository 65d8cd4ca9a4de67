"""Data model for reel editing sessions.

All records are frozen dataclasses. Editing never mutates a record in
place: operations in reelcompose.timeline build new records with
dataclasses.replace and return a new TimelineState.

Times are float seconds relative to the full source video, not to the
trim window. Caption positions are normalized (0..1) frame coordinates
of the caption's center, so they survive a change of export resolution.
Pixel sizes in CaptionStyle are defined at REFERENCE_WIDTH and scaled
linearly at render time.
"""

from dataclasses import dataclass, field


MIN_DURATION = 0.1
"""Shortest allowed caption and trim window, in seconds."""

TIME_EPSILON = 1e-9
"""Tolerance for float comparisons against MIN_DURATION."""

REFERENCE_WIDTH = 1080
REFERENCE_HEIGHT = 1920

ANIMATION_TYPES = {
    "none", "fade", "slideLeft", "slideRight", "slideTop", "slideBottom",
    "typewriter", "scale",
}

EASINGS = {"linear", "easeIn", "easeOut", "easeInOut"}

TEXT_TRANSFORMS = {"none", "uppercase", "lowercase", "capitalize"}

TEXT_ALIGNS = {"left", "center", "right"}

LANGUAGES = {"ar", "en"}


@dataclass(frozen=True)
class WordTimestamp:
    """One word of a caption with its own timing, for karaoke highlighting."""

    text: str
    start: float
    end: float


@dataclass(frozen=True)
class AnimationSpec:
    type: str = "none"
    duration: float = 0.5
    delay: float = 0.0
    easing: str = "easeOut"


@dataclass(frozen=True)
class Padding:
    top: int = 10
    right: int = 20
    bottom: int = 10
    left: int = 20


@dataclass(frozen=True)
class CaptionStyle:
    """Visual style of one caption.

    Colors are '#RRGGBB' or CSS 'rgba(r, g, b, a)' strings. An empty
    background_color or 'transparent' draws no box. stroke_width 0 draws
    no outline.
    """

    font_size: int = 48
    font_family: str = "Arial"
    font_weight: str = "normal"
    color: str = "#FFFFFF"
    background_color: str = "rgba(0, 0, 0, 0.7)"
    stroke_color: str = "#000000"
    stroke_width: int = 0
    opacity: float = 1.0
    padding: Padding = field(default_factory=Padding)
    text_align: str = "center"
    text_transform: str = "none"
    animation: AnimationSpec = field(default_factory=AnimationSpec)
    karaoke: bool = False
    karaoke_active_color: str = "#FFD700"
    karaoke_active_scale: float = 1.0


DEFAULT_STYLE = CaptionStyle()

DEFAULT_POSITION = (0.5, 1500 / REFERENCE_HEIGHT)


@dataclass(frozen=True)
class Caption:
    id: str
    text: str
    start_time: float
    end_time: float
    position: tuple[float, float] = DEFAULT_POSITION
    style: CaptionStyle = DEFAULT_STYLE
    is_visible: bool = True
    language: str | None = None
    word_timestamps: tuple[WordTimestamp, ...] = ()

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class TrimWindow:
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    def overlaps(self, start: float, end: float) -> bool:
        """Overlap test: true when [start, end] intersects the window at all."""
        return start < self.end and end > self.start

    def contains(self, time: float) -> bool:
        return self.start <= time <= self.end


@dataclass(frozen=True)
class TimelineState:
    """Everything one editing session owns: captions, trim, playhead, selection.

    captions is kept in (start_time, id) order by every operation.
    next_id numbers captions created by split.
    """

    source_duration: float
    trim: TrimWindow
    captions: tuple[Caption, ...] = ()
    playhead: float = 0.0
    selection: tuple[str, ...] = ()
    next_id: int = 0

    def caption(self, caption_id: str) -> Caption | None:
        for cap in self.captions:
            if cap.id == caption_id:
                return cap
        return None


@dataclass(frozen=True)
class TranscriptionSegment:
    text: str
    start: float
    end: float
    language: str | None = None
    words: tuple[WordTimestamp, ...] = ()


@dataclass(frozen=True)
class ReelClipInput:
    """A clip proposal to edit: where the source lives and the initial trim."""

    clip_id: str
    video_source_url: str
    source_video_duration: float
    start_time: float
    end_time: float
    segments: tuple[TranscriptionSegment, ...] = ()
    metadata: dict = field(default_factory=dict)
    style: CaptionStyle = DEFAULT_STYLE
    export: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ReelExportResult:
    clip_id: str
    media: bytes = field(repr=False)
    video_url: str
    duration: float
    file_size: int
    export_settings: dict

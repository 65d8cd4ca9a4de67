"""Caption animation math — pure functions of (caption, time).

Nothing here keeps state between calls. The preview and the export
renderer can ask for any timestamp in any order, forwards, backwards or
frame by frame far slower than real time, and get identical values.

Translations are in pixels at the 1080px reference width; the renderer
scales them to the output frame.
"""

import math
from dataclasses import dataclass

from .models import Caption


# ── Easing ───────────────────────────────────────────────────────


def ease(progress: float, easing: str) -> float:
    """Map raw progress in [0, 1] through a quadratic easing curve."""
    if easing == "easeIn":
        return progress * progress
    if easing == "easeOut":
        return progress * (2 - progress)
    if easing == "easeInOut":
        if progress < 0.5:
            return 2 * progress * progress
        return -1 + (4 - 2 * progress) * progress
    return progress


# ── Progress ─────────────────────────────────────────────────────


def progress(caption: Caption, current_time: float) -> float:
    """Animation progress of a caption at current_time, in [0, 1].

    0 until start + delay, 1 from start + delay + duration on, eased in
    between. A caption without an animation is always fully shown.
    """
    anim = caption.style.animation
    if anim.type == "none":
        return 1.0

    elapsed = current_time - caption.start_time
    if elapsed < anim.delay:
        return 0.0

    anim_elapsed = elapsed - anim.delay
    if anim_elapsed >= anim.duration:
        return 1.0

    return ease(anim_elapsed / anim.duration, anim.easing)


# ── Transform ────────────────────────────────────────────────────


@dataclass(frozen=True)
class AnimationTransform:
    opacity: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = 1.0


IDENTITY = AnimationTransform()


def transform(caption: Caption, p: float) -> AnimationTransform:
    """Visual transform for an animation type at progress p."""
    kind = caption.style.animation.type
    if kind == "fade":
        return AnimationTransform(opacity=p)
    if kind == "slideLeft":
        return AnimationTransform(opacity=p, translate_x=-100 * (1 - p))
    if kind == "slideRight":
        return AnimationTransform(opacity=p, translate_x=100 * (1 - p))
    if kind == "slideTop":
        return AnimationTransform(opacity=p, translate_y=-50 * (1 - p))
    if kind == "slideBottom":
        return AnimationTransform(opacity=p, translate_y=50 * (1 - p))
    if kind == "scale":
        return AnimationTransform(opacity=p, scale=0.5 + 0.5 * p)
    # typewriter reveals characters instead; see visible_char_count.
    return IDENTITY


def visible_char_count(text: str, p: float) -> int:
    """Number of leading characters a typewriter caption shows at progress p."""
    return math.floor(len(text) * p)


def visible_text(caption: Caption, current_time: float) -> str:
    """Caption text as shown at current_time (typewriter-aware)."""
    text = apply_text_transform(caption.text, caption.style.text_transform)
    if caption.style.animation.type != "typewriter":
        return text
    return text[:visible_char_count(text, progress(caption, current_time))]


# ── Karaoke ──────────────────────────────────────────────────────


def active_word_index(caption: Caption, current_time: float) -> int | None:
    """Index of the karaoke word being spoken at current_time, or None."""
    for i, word in enumerate(caption.word_timestamps):
        if word.start <= current_time < word.end:
            return i
    return None


# ── Text transform ───────────────────────────────────────────────


def apply_text_transform(text: str, mode: str) -> str:
    if mode == "uppercase":
        return text.upper()
    if mode == "lowercase":
        return text.lower()
    if mode == "capitalize":
        return " ".join(w[:1].upper() + w[1:].lower() for w in text.split(" "))
    return text

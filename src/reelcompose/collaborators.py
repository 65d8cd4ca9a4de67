"""Interfaces to services reelcompose consumes but does not implement.

Credit accounting, publishing and preference storage live elsewhere.
These protocols pin down the call shapes, and the helpers wrap each call
with the validation and logging the export path needs.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Protocol

from .errors import ReelValidationError
from .models import CaptionStyle, ReelExportResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditCheckResult:
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class PublishResult:
    video_id: str
    url: str


class CreditChecker(Protocol):
    def __call__(self, user_id: str, duration_seconds: float) -> CreditCheckResult: ...


class Publisher(Protocol):
    def upload(self, video_bytes: bytes, metadata: dict) -> PublishResult: ...


class PreferenceStore(Protocol):
    def save(self, partial: dict) -> dict: ...


# ── Helpers ──────────────────────────────────────────────────────


def check_credits(checker: CreditChecker, user_id: str | None, duration_seconds: float) -> None:
    """Ask the credit service whether user_id may export duration_seconds.

    Raises:
        ReelValidationError: No user id, or the service refused.
    """
    if not user_id:
        raise ReelValidationError("User ID is required for a credit check")
    result = checker(user_id, duration_seconds)
    if not result.ok:
        raise ReelValidationError(result.error or "Insufficient credits")
    logger.debug("Credit check passed for %s (%.1fs)", user_id, duration_seconds)


def publish_export(
    publisher: Publisher,
    result: ReelExportResult,
    title: str,
    description: str = "",
    extra: dict | None = None,
) -> PublishResult:
    """Upload an exported reel with its title and description."""
    if not result.media:
        raise ReelValidationError(f"Export for clip '{result.clip_id}' has no media")
    if not title.strip():
        raise ReelValidationError("Title is required to publish")
    metadata = {
        "title": title.strip(),
        "description": description,
        "clip_id": result.clip_id,
        "duration": result.duration,
        **(extra or {}),
    }
    published = publisher.upload(result.media, metadata)
    logger.info("Published %s as %s (%s)", result.clip_id, published.video_id, published.url)
    return published


def style_to_preferences(style: CaptionStyle) -> dict:
    """Caption style as a plain, JSON-ready dict (nested dataclasses flattened)."""
    return asdict(style)


def save_style_preferences(store: PreferenceStore, style: CaptionStyle) -> dict:
    """Persist a caption style as the user's default; returns the merged record."""
    merged = store.save({"caption_style": style_to_preferences(style)})
    if not isinstance(merged, dict):
        raise TypeError(f"Preference store returned {type(merged).__name__}, expected dict")
    return merged

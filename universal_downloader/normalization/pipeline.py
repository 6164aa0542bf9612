"""Normalization pipeline for third-party media API responses.

Runs extraction and building for one raw response and attaches the
title/thumbnail/author/duration metadata. Also provides a registry of
per-platform NormalizationProfiles so callers can normalize by source
name.
"""

import math
from typing import Any, Optional

import structlog

from universal_downloader.normalization.builder import build
from universal_downloader.normalization.extractor import extract
from universal_downloader.normalization.schema import (
    DEFAULT_PROFILE,
    NormalizationProfile,
    NormalizedResult,
)

logger = structlog.get_logger(__name__)

# Keys used to pull a display name out of an author object.
AUTHOR_NAME_KEYS = ("name", "nickname", "username", "unique_id", "title")


def _text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        for key in AUTHOR_NAME_KEYS:
            text = _text(value.get(key))
            if text:
                return text
    if isinstance(value, list):
        # e.g. Spotify "artists": ["A", {"name": "B"}]
        return ", ".join(filter(None, (_text(item) for item in value))) or None
    return None


def first_present(obj: dict, keys: tuple[str, ...], default: str = "") -> str:
    """Return the first non-empty value among ``keys`` as a string.

    Args:
        obj: Raw response object.
        keys: Candidate keys, in priority order.
        default: Value returned when no key holds usable text.

    Returns:
        The first usable value; objects contribute their name field.
    """
    for key in keys:
        text = _text(obj.get(key))
        if text:
            return text
    return default


def format_duration(value: Any) -> str:
    """Render numeric seconds as ``m:ss`` or ``h:mm:ss``."""
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return ""
        total = int(value)
        if total <= 0:
            return ""
        hours, rest = divmod(total, 3600)
        minutes, seconds = divmod(rest, 60)
        if hours:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"
    return _text(value) or ""


def normalize(
    raw: Any,
    profile: NormalizationProfile = DEFAULT_PROFILE,
) -> Optional[NormalizedResult]:
    """Normalize one third-party response.

    Args:
        raw: Untyped JSON value returned by the API.
        profile: Field names for the platform the response came from.

    Returns:
        NormalizedResult with at least one download, or None when the
        input is not an object or nothing downloadable was found.
    """
    if not isinstance(raw, dict):
        logger.debug("normalization_rejected_input", profile=profile.name)
        return None

    candidates = extract(raw, profile)
    logger.debug(
        "normalization_extracted",
        profile=profile.name,
        candidates=len(candidates),
    )

    downloads = build(candidates, profile)
    if not downloads:
        logger.debug("normalization_empty", profile=profile.name)
        return None

    duration = next(
        (
            d
            for d in (format_duration(raw.get(k)) for k in profile.duration_fields)
            if d
        ),
        "",
    )

    return NormalizedResult(
        title=first_present(raw, profile.title_fields, profile.default_title),
        thumbnail=first_present(raw, profile.thumbnail_fields),
        author=first_present(raw, profile.author_fields),
        duration=duration,
        downloads=downloads,
    )


class NormalizationPipeline:
    """Pipeline for normalizing responses from various platforms.

    Registers a NormalizationProfile per source name and applies it to
    raw responses to produce NormalizedResult instances.
    """

    def __init__(self):
        """Initialize the normalization pipeline."""
        self._profiles: dict[str, NormalizationProfile] = {}

    def register_profile(self, source: str, profile: NormalizationProfile) -> None:
        """Register a profile for a source.

        Args:
            source: Source identifier (e.g., "tiktok", "spotify").
            profile: Field names used for that source's responses.
        """
        self._profiles[source] = profile

    def normalize(self, source: str, raw: Any) -> Optional[NormalizedResult]:
        """Normalize a raw response from a source.

        Args:
            source: Source identifier for the data.
            raw: Raw response object from the source.

        Returns:
            NormalizedResult, or None when nothing is downloadable.

        Raises:
            ValueError: If no profile is registered for the source.
        """
        if source not in self._profiles:
            raise ValueError(f"No profile registered for source: {source}")
        return normalize(raw, self._profiles[source])

    def has_profile(self, source: str) -> bool:
        """Check if a profile is registered for a source."""
        return source in self._profiles

    def list_sources(self) -> list[str]:
        """List all sources with registered profiles."""
        return list(self._profiles.keys())

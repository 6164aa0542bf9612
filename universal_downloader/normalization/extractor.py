"""Field extractor for third-party media API responses.

Third-party APIs return media in many shapes: arrays of media objects
under a dozen different names, bare URL fields, image lists, nested
audio objects. The extractor tries each known shape in a fixed order and
collects MediaCandidates, deduplicating by URL.

The shapes are listed explicitly in EXTRACTION_STEPS. Each step returns
None when its shape is absent from the response, or the (possibly empty)
list of candidates it found. Extraction never raises: values of the wrong
type are skipped field by field.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog

from universal_downloader.normalization.schema import (
    DEFAULT_PROFILE,
    MediaCandidate,
    MediaKind,
    NormalizationProfile,
    RawPlatformResponse,
)

logger = structlog.get_logger(__name__)

URL_KEYS = ("url", "link", "href", "src", "download_url", "downloadUrl")
QUALITY_KEYS = ("quality", "qualityLabel", "label", "resolution")
EXTENSION_KEYS = ("extension", "ext")
TYPE_KEYS = ("type", "mediaType", "kind")
SIZE_KEYS = ("size", "formattedSize", "filesize")

AUDIO_EXTENSIONS = {"mp3", "m4a", "aac", "wav", "ogg", "opus", "flac"}
IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif", "heic"}


# =============================================================================
# Value helpers
# =============================================================================


def http_url(value: Any) -> Optional[str]:
    """Return the value as a URL if it is a string starting with http."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value.startswith("http"):
        return None
    return value


def _entry_url(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return http_url(entry)
    if isinstance(entry, dict):
        for key in URL_KEYS:
            url = http_url(entry.get(key))
            if url:
                return url
    return None


def _first_text(entry: dict, keys: tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = entry.get(key)
        if isinstance(value, bool) or value is None:
            continue
        if isinstance(value, (str, int, float)):
            text = str(value).strip()
            if text:
                return text
    return None


def format_size(value: Any) -> Optional[str]:
    """Render a byte count as "12.3 MB"; strings pass through unchanged."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, float)):
        if value <= 0:
            return None
        size = float(value)
        for unit in ("B", "KB", "MB", "GB"):
            if size < 1024 or unit == "GB":
                return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
            size /= 1024
    return None


def _watermark(entry: dict) -> Optional[bool]:
    for key in ("watermark", "hasWatermark"):
        if isinstance(entry.get(key), bool):
            return entry[key]
    for key in ("no_watermark", "noWatermark"):
        if isinstance(entry.get(key), bool):
            return not entry[key]
    return None


def infer_kind(
    type_hint: Optional[str],
    extension: Optional[str],
    default: MediaKind,
) -> MediaKind:
    """Infer the media kind from a type hint, then the extension."""
    t = (type_hint or "").lower()
    # Muxed streams ("video_with_audio") are videos.
    if "video" in t:
        return MediaKind.VIDEO
    if "audio" in t:
        return MediaKind.AUDIO
    if "image" in t or "photo" in t:
        return MediaKind.IMAGE

    ext = (extension or "").lower().lstrip(".")
    if ext in AUDIO_EXTENSIONS:
        return MediaKind.AUDIO
    if ext in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    return default


def _candidate_from_entry(
    entry: Any,
    default_kind: MediaKind,
    default_quality: Optional[str] = "standard",
) -> Optional[MediaCandidate]:
    url = _entry_url(entry)
    if not url:
        return None
    if not isinstance(entry, dict):
        return MediaCandidate(url=url, kind=default_kind, raw_quality=default_quality)

    extension = _first_text(entry, EXTENSION_KEYS)
    kind = infer_kind(_first_text(entry, TYPE_KEYS), extension, default_kind)
    return MediaCandidate(
        url=url,
        kind=kind,
        raw_quality=_first_text(entry, QUALITY_KEYS) or default_quality,
        raw_extension=extension.lower().lstrip(".") if extension else None,
        has_watermark=_watermark(entry),
        size=next(
            (s for s in (format_size(entry.get(k)) for k in SIZE_KEYS) if s),
            None,
        ),
    )


# =============================================================================
# Extraction steps
# =============================================================================


def extract_structured_arrays(
    raw: RawPlatformResponse,
    profile: NormalizationProfile,
) -> Optional[list[MediaCandidate]]:
    """Extract from the first non-empty structured array field."""
    for field_name in profile.array_fields:
        entries = raw.get(field_name)
        if not isinstance(entries, list) or not entries:
            continue
        candidates = []
        for entry in entries:
            candidate = _candidate_from_entry(entry, profile.default_kind)
            if candidate is None:
                logger.debug("media_entry_skipped", field=field_name)
                continue
            candidates.append(candidate)
        logger.debug(
            "structured_array_found",
            field=field_name,
            entries=len(entries),
            candidates=len(candidates),
        )
        return candidates
    return None


def extract_direct_fields(
    raw: RawPlatformResponse,
    profile: NormalizationProfile,
) -> Optional[list[MediaCandidate]]:
    """Extract bare URL fields such as ``hd`` or ``download_url``."""
    candidates = []
    for field_name in profile.direct_fields:
        url = http_url(raw.get(field_name))
        if not url:
            continue
        quality = profile.direct_field_qualities.get(field_name)
        kind = MediaKind.VIDEO if quality else profile.default_kind
        candidates.append(
            MediaCandidate(
                url=url,
                kind=kind,
                raw_quality=quality or "standard",
                has_watermark=True if field_name in profile.watermarked_fields else None,
            )
        )
    return candidates or None


def extract_image_arrays(
    raw: RawPlatformResponse,
    profile: NormalizationProfile,
) -> Optional[list[MediaCandidate]]:
    """Extract image lists (``images``, ``photos``, ``pictures``)."""
    candidates = []
    matched = False
    for field_name in profile.image_fields:
        entries = raw.get(field_name)
        if not isinstance(entries, list):
            continue
        matched = True
        for entry in entries:
            candidate = _candidate_from_entry(entry, MediaKind.IMAGE, None)
            if candidate is not None:
                # An image list entry is an image whatever its type says.
                candidates.append(
                    MediaCandidate(
                        url=candidate.url,
                        kind=MediaKind.IMAGE,
                        raw_extension=candidate.raw_extension,
                        size=candidate.size,
                    )
                )
    return candidates if matched else None


def extract_audio(
    raw: RawPlatformResponse,
    profile: NormalizationProfile,
) -> Optional[list[MediaCandidate]]:
    """Extract a standalone audio track (string or ``{url, ...}`` object)."""
    for field_name in profile.audio_fields:
        value = raw.get(field_name)
        if isinstance(value, str):
            url = http_url(value)
            if url:
                return [MediaCandidate(url=url, kind=MediaKind.AUDIO)]
        elif isinstance(value, dict):
            candidate = _candidate_from_entry(value, MediaKind.AUDIO, None)
            if candidate is not None:
                return [
                    MediaCandidate(
                        url=candidate.url,
                        kind=MediaKind.AUDIO,
                        raw_quality=candidate.raw_quality,
                        raw_extension=candidate.raw_extension,
                        size=candidate.size,
                    )
                ]
    return None


def extract_single_image(
    raw: RawPlatformResponse,
    profile: NormalizationProfile,
) -> Optional[list[MediaCandidate]]:
    """Extract a singular ``image``/``picture`` URL."""
    for field_name in profile.single_image_fields:
        url = _entry_url(raw.get(field_name))
        if url:
            return [MediaCandidate(url=url, kind=MediaKind.IMAGE)]
    return None


# =============================================================================
# Step table
# =============================================================================


StepFunction = Callable[
    [RawPlatformResponse, NormalizationProfile], Optional[list[MediaCandidate]]
]


def _always(found: list[MediaCandidate]) -> bool:
    return True


def _nothing_found(found: list[MediaCandidate]) -> bool:
    return not found


@dataclass(frozen=True)
class ExtractionStep:
    """One entry of the extraction table.

    Args:
        name: Step identifier used in logs.
        run: Extraction function for one response shape.
        when: Gate evaluated against the candidates accepted so far.
    """

    name: str
    run: StepFunction
    when: Callable[[list[MediaCandidate]], bool] = _always


EXTRACTION_STEPS: tuple[ExtractionStep, ...] = (
    ExtractionStep("structured_arrays", extract_structured_arrays),
    ExtractionStep("direct_fields", extract_direct_fields, _nothing_found),
    ExtractionStep("image_arrays", extract_image_arrays),
    ExtractionStep("audio", extract_audio),
    ExtractionStep("single_image", extract_single_image, _nothing_found),
)


def extract(
    raw: RawPlatformResponse,
    profile: NormalizationProfile = DEFAULT_PROFILE,
    steps: tuple[ExtractionStep, ...] = EXTRACTION_STEPS,
) -> list[MediaCandidate]:
    """Extract media candidates from a raw platform response.

    Args:
        raw: Untyped JSON object returned by the third-party API.
        profile: Field names to look for.
        steps: Extraction table, evaluated in order.

    Returns:
        Candidates in discovery order; the first occurrence of a URL wins.
    """
    if not isinstance(raw, dict):
        return []

    accepted: list[MediaCandidate] = []
    seen: set[str] = set()

    for step in steps:
        if not step.when(accepted):
            continue
        found = step.run(raw, profile)
        if found is None:
            continue
        for candidate in found:
            if candidate.url in seen:
                logger.debug("duplicate_candidate_dropped", step=step.name)
                continue
            seen.add(candidate.url)
            accepted.append(candidate)

    return accepted

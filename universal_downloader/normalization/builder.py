"""Download item builder.

Turns extracted MediaCandidates into user-facing DownloadItems: videos
first (best quality first), then audio, then images.
"""

from universal_downloader.normalization.extractor import http_url
from universal_downloader.normalization.quality import audio_quality_phrase, classify
from universal_downloader.normalization.schema import (
    DEFAULT_PROFILE,
    DownloadItem,
    MediaCandidate,
    MediaKind,
    NormalizationProfile,
)


def video_label(candidate: MediaCandidate) -> str:
    """Label a video candidate, e.g. ``"1080p 🎬 .mp4 (12.3 MB)"``."""
    info = classify(candidate.raw_quality)
    label = info.display_label
    if info.is_hd:
        label += " 🎬"
    if candidate.raw_extension:
        label += f" .{candidate.raw_extension}"
    if candidate.size:
        label += f" ({candidate.size})"
    if candidate.has_watermark is True:
        label += " (watermark)"
    return label


def audio_label(candidate: MediaCandidate, default_extension: str = "mp3") -> str:
    """Label an audio candidate, e.g. ``"High Quality (320kbps) 🎵 - MP3"``."""
    extension = (candidate.raw_extension or default_extension).upper()
    return f"{audio_quality_phrase(candidate.raw_quality)} 🎵 - {extension}"


def image_label(index: int) -> str:
    return f"Image {index} 📸"


def build(
    candidates: list[MediaCandidate],
    profile: NormalizationProfile = DEFAULT_PROFILE,
) -> list[DownloadItem]:
    """Build the ordered download list for a set of candidates.

    Args:
        candidates: Candidates in discovery order.
        profile: Supplies the default audio extension.

    Returns:
        Video items sorted by descending quality tier (stable), then audio
        items, then image items. Non-http and repeated URLs are skipped.
    """
    usable = [c for c in candidates if http_url(c.url)]

    videos = [c for c in usable if c.kind is MediaKind.VIDEO]
    audios = [c for c in usable if c.kind is MediaKind.AUDIO]
    images = [c for c in usable if c.kind is MediaKind.IMAGE]

    # sorted() is stable, so equal tiers keep discovery order.
    videos = sorted(videos, key=lambda c: classify(c.raw_quality).tier, reverse=True)

    audio_extension = profile.default_extension(MediaKind.AUDIO) or "mp3"

    items: list[DownloadItem] = []
    seen: set[str] = set()

    def emit(text: str, url: str) -> None:
        seen.add(url)
        items.append(DownloadItem(text=text, url=url))

    for candidate in videos:
        if candidate.url not in seen:
            emit(video_label(candidate), candidate.url)
    for candidate in audios:
        if candidate.url not in seen:
            emit(audio_label(candidate, audio_extension), candidate.url)
    # Image numbers count emitted images only.
    image_count = 0
    for candidate in images:
        if candidate.url in seen:
            continue
        image_count += 1
        emit(image_label(image_count), candidate.url)

    return items

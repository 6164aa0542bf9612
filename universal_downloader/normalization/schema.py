"""Canonical schema for normalized downloader results.

Provides the media candidate model produced by the field extractor, the
quality tier ranking, and the Pydantic models returned to API clients.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional

from pydantic import BaseModel, Field

RawPlatformResponse = dict[str, Any]


class MediaKind(Enum):
    """Kinds of downloadable media."""

    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"


class QualityTier(IntEnum):
    """Video quality tiers ordered by rank."""

    TIER_4K = 10
    TIER_1440P = 9
    TIER_1080P = 8
    TIER_720P = 7
    TIER_480P = 6
    TIER_360P = 5
    TIER_240P = 4
    TIER_144P = 3
    UNKNOWN = 0


@dataclass(frozen=True)
class QualityInfo:
    """Classified quality of a raw quality label."""

    tier: QualityTier
    is_hd: bool
    display_label: str


@dataclass(frozen=True)
class MediaCandidate:
    """A provisionally extracted media reference.

    Candidates are emitted by the field extractor in discovery order and
    turned into DownloadItems by the builder.
    """

    url: str
    kind: MediaKind = MediaKind.VIDEO
    raw_quality: Optional[str] = None
    raw_extension: Optional[str] = None
    has_watermark: Optional[bool] = None
    size: Optional[str] = None


@dataclass(frozen=True)
class NormalizationProfile:
    """Per-platform description of the shapes the extractor looks for.

    Args:
        name: Profile identifier, usually the platform name.
        array_fields: Structured array fields, first non-empty one wins.
        direct_fields: Top-level string fields holding a direct URL.
        default_kind: Kind assumed when an entry carries no type hint.
        default_title: Title used when the response has none.
    """

    name: str = "default"
    array_fields: tuple[str, ...] = (
        "medias",
        "formats",
        "downloadLinks",
        "links",
        "urls",
        "videos",
        "qualities",
    )
    direct_fields: tuple[str, ...] = (
        "url",
        "video_url",
        "videoUrl",
        "download_url",
        "downloadUrl",
        "hd",
        "sd",
        "hdUrl",
        "sdUrl",
    )
    direct_field_qualities: dict[str, str] = field(
        default_factory=lambda: {"hd": "HD", "hdUrl": "HD", "sd": "SD", "sdUrl": "SD"}
    )
    watermarked_fields: tuple[str, ...] = ()
    image_fields: tuple[str, ...] = ("images", "photos", "pictures")
    single_image_fields: tuple[str, ...] = ("image", "picture")
    audio_fields: tuple[str, ...] = ("audio", "audio_url", "audioUrl")
    default_kind: MediaKind = MediaKind.VIDEO
    default_extensions: dict[MediaKind, str] = field(
        default_factory=lambda: {MediaKind.VIDEO: "mp4", MediaKind.AUDIO: "mp3"}
    )
    title_fields: tuple[str, ...] = ("title", "caption", "description", "text")
    thumbnail_fields: tuple[str, ...] = (
        "thumbnail",
        "cover",
        "thumb",
        "thumbnail_url",
        "picture",
    )
    author_fields: tuple[str, ...] = (
        "author",
        "artist",
        "channel",
        "uploader",
        "username",
        "owner",
    )
    duration_fields: tuple[str, ...] = ("duration", "length")
    default_title: str = "Untitled"

    def default_extension(self, kind: MediaKind) -> Optional[str]:
        """Return the extension assumed for a kind when none is given."""
        return self.default_extensions.get(kind)


DEFAULT_PROFILE = NormalizationProfile()


class DownloadItem(BaseModel):
    """A single user-facing download option."""

    text: str = Field(..., description="Human-readable quality/type label")
    url: str = Field(..., min_length=1, description="Direct fetch target")


class NormalizedResult(BaseModel):
    """Unified result for any supported platform.

    A result always carries at least one download; responses with nothing
    downloadable are represented as None by the pipeline.
    """

    title: str = ""
    thumbnail: str = ""
    author: str = ""
    duration: str = ""
    downloads: list[DownloadItem] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

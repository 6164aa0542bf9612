"""YouTube platform."""

from dataclasses import replace

from universal_downloader.normalization.schema import DEFAULT_PROFILE
from universal_downloader.platforms.base import BasePlatform, host_matches
from universal_downloader.platforms.registry import PlatformType, register_platform

YOUTUBE_DOMAINS = ("youtube.com", "youtu.be")

# The YouTube endpoint lists every stream under ``formats``.
YOUTUBE_PROFILE = replace(
    DEFAULT_PROFILE,
    name="youtube",
    array_fields=("formats",)
    + tuple(f for f in DEFAULT_PROFILE.array_fields if f != "formats"),
    default_title="YouTube Video",
)


@register_platform(PlatformType.YOUTUBE)
class YouTubePlatform(BasePlatform):
    platform_type = PlatformType.YOUTUBE
    display_name = "YouTube"
    media_noun = "video"
    upstream_path = "/api/youtube/download"
    cache_max_age = 3600
    profile = YOUTUBE_PROFILE

    def validate_url(self, url: str) -> bool:
        return host_matches(url, YOUTUBE_DOMAINS)

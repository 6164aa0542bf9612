"""TikTok platform.

The TikTok endpoint answers with flat fields rather than a media array:
``hdplay`` and ``play`` for the clean video, ``wmplay`` for the watermarked
one and ``music`` for the soundtrack.
"""

from dataclasses import replace

from universal_downloader.normalization.schema import DEFAULT_PROFILE
from universal_downloader.platforms.base import BasePlatform, host_matches
from universal_downloader.platforms.registry import PlatformType, register_platform

TIKTOK_PROFILE = replace(
    DEFAULT_PROFILE,
    name="tiktok",
    direct_fields=("hdplay", "play", "wmplay") + DEFAULT_PROFILE.direct_fields,
    direct_field_qualities={
        **DEFAULT_PROFILE.direct_field_qualities,
        "hdplay": "HD",
        "play": "SD",
        "wmplay": "SD",
    },
    watermarked_fields=("wmplay",),
    audio_fields=("music",) + DEFAULT_PROFILE.audio_fields,
    thumbnail_fields=("cover", "origin_cover") + DEFAULT_PROFILE.thumbnail_fields,
    default_title="TikTok Video",
)


@register_platform(PlatformType.TIKTOK)
class TikTokPlatform(BasePlatform):
    platform_type = PlatformType.TIKTOK
    display_name = "TikTok"
    media_noun = "video"
    upstream_path = "/api/tiktok/download"
    cache_max_age = 600
    profile = TIKTOK_PROFILE

    def validate_url(self, url: str) -> bool:
        return host_matches(url, ("tiktok.com",))

"""Instagram platform (posts, reels, carousels)."""

from dataclasses import replace

from universal_downloader.normalization.schema import DEFAULT_PROFILE
from universal_downloader.platforms.base import BasePlatform, host_matches
from universal_downloader.platforms.registry import PlatformType, register_platform


@register_platform(PlatformType.INSTAGRAM)
class InstagramPlatform(BasePlatform):
    platform_type = PlatformType.INSTAGRAM
    display_name = "Instagram"
    media_noun = "post"
    upstream_path = "/api/facebook-insta/download"
    cache_max_age = 600
    profile = replace(DEFAULT_PROFILE, name="instagram", default_title="Instagram Post")

    def validate_url(self, url: str) -> bool:
        return host_matches(url, ("instagram.com",))

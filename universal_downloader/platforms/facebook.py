"""Facebook video platform."""

from dataclasses import replace

from universal_downloader.normalization.schema import DEFAULT_PROFILE
from universal_downloader.platforms.base import BasePlatform, host_matches
from universal_downloader.platforms.registry import PlatformType, register_platform

FACEBOOK_DOMAINS = ("facebook.com", "fb.watch")


@register_platform(PlatformType.FACEBOOK)
class FacebookPlatform(BasePlatform):
    """Facebook videos and reels, served by the shared Facebook/Instagram endpoint."""

    platform_type = PlatformType.FACEBOOK
    display_name = "Facebook"
    media_noun = "video"
    upstream_path = "/api/facebook-insta/download"
    cache_max_age = 600
    profile = replace(DEFAULT_PROFILE, name="facebook", default_title="Facebook Video")

    def validate_url(self, url: str) -> bool:
        return host_matches(url, FACEBOOK_DOMAINS)

"""Supported platforms.

Importing this package registers every platform with the registry.
"""

from universal_downloader.platforms.base import BasePlatform, DownloadResult
from universal_downloader.platforms.facebook import FacebookPlatform
from universal_downloader.platforms.instagram import InstagramPlatform
from universal_downloader.platforms.registry import (
    PlatformType,
    get_pipeline,
    get_platform,
    list_platforms,
    register_platform,
    resolve_platform_type,
)
from universal_downloader.platforms.spotify import SpotifyPlatform
from universal_downloader.platforms.tiktok import TikTokPlatform
from universal_downloader.platforms.twitter import TwitterPlatform
from universal_downloader.platforms.youtube import YouTubePlatform

__all__ = [
    "BasePlatform",
    "DownloadResult",
    "PlatformType",
    "register_platform",
    "resolve_platform_type",
    "get_platform",
    "get_pipeline",
    "list_platforms",
    "FacebookPlatform",
    "InstagramPlatform",
    "TikTokPlatform",
    "TwitterPlatform",
    "SpotifyPlatform",
    "YouTubePlatform",
]

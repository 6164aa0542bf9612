"""Spotify platform.

Spotify links resolve to audio. The extraction endpoint only answers
requests that look like they come from its own web front end, so the
request carries matching Referer and Origin headers.
"""

import re
from dataclasses import replace
from typing import Optional

from universal_downloader.normalization.schema import DEFAULT_PROFILE, MediaKind
from universal_downloader.platforms.base import BasePlatform
from universal_downloader.platforms.registry import PlatformType, register_platform

SPOTIFY_URL_PATTERN = re.compile(
    r"^https?://open\.spotify\.com/(track|album|playlist|artist)/[A-Za-z0-9]+"
)

SPOTIFY_FRONTEND = "https://spotify.downloaderize.com"

SPOTIFY_PROFILE = replace(
    DEFAULT_PROFILE,
    name="spotify",
    array_fields=("downloadLinks", "medias", "links", "formats"),
    direct_fields=("url", "download_url", "audio_url", "downloadUrl"),
    direct_field_qualities={},
    default_kind=MediaKind.AUDIO,
    thumbnail_fields=("thumbnail", "cover", "image", "album_art"),
    author_fields=("artist", "artists", "author", "owner"),
    default_title="Spotify Track",
)


@register_platform(PlatformType.SPOTIFY)
class SpotifyPlatform(BasePlatform):
    platform_type = PlatformType.SPOTIFY
    display_name = "Spotify"
    media_noun = "track"
    upstream_path = "/api/spotify"
    cache_max_age = 3600
    profile = SPOTIFY_PROFILE

    @property
    def invalid_url_message(self) -> str:
        return "Please provide a valid Spotify track, album, playlist, or artist URL"

    def validate_url(self, url: str) -> bool:
        return SPOTIFY_URL_PATTERN.match(url) is not None

    def request_headers(self) -> Optional[dict[str, str]]:
        return {
            "Referer": f"{SPOTIFY_FRONTEND}/",
            "Origin": SPOTIFY_FRONTEND,
        }

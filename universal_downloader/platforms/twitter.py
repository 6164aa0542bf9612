"""Twitter/X platform.

Inbound links may be ``t.co`` short links; they are expanded before the
upstream call and the tweet id is reported alongside the result.
"""

import re
from dataclasses import replace
from typing import Any, Optional

import structlog

from universal_downloader.core.exceptions import InvalidURLError
from universal_downloader.normalization.schema import DEFAULT_PROFILE
from universal_downloader.platforms.base import BasePlatform, host_matches
from universal_downloader.platforms.registry import PlatformType, register_platform
from universal_downloader.upstream.client import UpstreamClient

logger = structlog.get_logger(__name__)

TWITTER_DOMAINS = ("twitter.com", "x.com")
SHORT_LINK_DOMAINS = ("t.co",)
TWEET_ID_PATTERN = re.compile(r"/status(?:es)?/(\d+)")


def extract_tweet_id(url: str) -> Optional[str]:
    """Return the numeric tweet id from a status URL, if any."""
    match = TWEET_ID_PATTERN.search(url)
    return match.group(1) if match else None


@register_platform(PlatformType.TWITTER)
class TwitterPlatform(BasePlatform):
    platform_type = PlatformType.TWITTER
    display_name = "Twitter/X"
    media_noun = "tweet"
    upstream_path = "/api/twitter/download"
    cache_max_age = 300
    profile = replace(DEFAULT_PROFILE, name="twitter", default_title="Twitter Video")

    def validate_url(self, url: str) -> bool:
        return host_matches(url, TWITTER_DOMAINS + SHORT_LINK_DOMAINS)

    async def prepare_url(self, url: str, client: UpstreamClient) -> str:
        if not host_matches(url, SHORT_LINK_DOMAINS):
            return url
        resolved = await client.resolve_redirects(url)
        # An unresolvable link comes back unchanged and is passed through.
        if not self.validate_url(resolved):
            logger.warning("twitter_short_link_off_platform", url=url, resolved=resolved)
            raise InvalidURLError(
                "The short link does not point to a Twitter/X post",
                {"url": url, "resolved_url": resolved},
            )
        logger.info("twitter_short_link_expanded", url=url, resolved=resolved)
        return resolved

    def describe(self, url: str, resolved_url: str) -> dict[str, Any]:
        meta = super().describe(url, resolved_url)
        tweet_id = extract_tweet_id(resolved_url)
        if tweet_id:
            meta["tweet_id"] = tweet_id
        return meta

    def not_found_message(self) -> str:
        return (
            "Could not fetch media data. The tweet might be private, deleted, "
            "or does not contain media."
        )

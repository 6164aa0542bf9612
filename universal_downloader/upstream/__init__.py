"""Client for the third-party media extraction API."""

from universal_downloader.upstream.client import UpstreamClient, UpstreamHealth, is_transient

__all__ = ["UpstreamClient", "UpstreamHealth", "is_transient"]

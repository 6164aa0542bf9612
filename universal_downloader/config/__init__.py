"""
Configuration Management.

Configuration sources (in order of precedence):
1. Environment variables
2. .env file
3. Default values

Example:
    from universal_downloader.config import get_settings

    settings = get_settings()
    base_url = settings.upstream_base_url
"""

from universal_downloader.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

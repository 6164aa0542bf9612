"""Platform registry for runtime platform selection.

Provides decorator-based registration and a factory function for platforms.
Registering a platform also registers its NormalizationProfile with the
shared NormalizationPipeline.
"""

from enum import Enum
from typing import TYPE_CHECKING, Union

from universal_downloader.core.exceptions import UnknownPlatformError
from universal_downloader.normalization.pipeline import NormalizationPipeline

if TYPE_CHECKING:
    from universal_downloader.platforms.base import BasePlatform


class PlatformType(Enum):
    """Supported platforms."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    TWITTER = "twitter"
    SPOTIFY = "spotify"
    YOUTUBE = "youtube"


# Alternate route names for a platform.
PLATFORM_ALIASES = {
    "x": PlatformType.TWITTER,
}

_platforms: dict[PlatformType, type["BasePlatform"]] = {}
_pipeline = NormalizationPipeline()


def register_platform(platform_type: PlatformType):
    """Decorator to register a platform class.

    Args:
        platform_type: The PlatformType enum value for this platform.

    Returns:
        Decorator function that registers the class.

    Example:
        @register_platform(PlatformType.TIKTOK)
        class TikTokPlatform(BasePlatform):
            ...
    """

    def decorator(cls: type["BasePlatform"]):
        _platforms[platform_type] = cls
        _pipeline.register_profile(platform_type.value, cls.profile)
        return cls

    return decorator


def resolve_platform_type(name: Union[str, PlatformType]) -> PlatformType:
    """Map a route name or alias to a PlatformType.

    Raises:
        UnknownPlatformError: If the name matches no registered platform.
    """
    if isinstance(name, PlatformType):
        platform_type = name
    else:
        key = name.strip().lower()
        platform_type = PLATFORM_ALIASES.get(key)
        if platform_type is None:
            try:
                platform_type = PlatformType(key)
            except ValueError:
                raise UnknownPlatformError(name)
    if platform_type not in _platforms:
        raise UnknownPlatformError(platform_type.value)
    return platform_type


def get_platform(name: Union[str, PlatformType]) -> "BasePlatform":
    """Factory function to get a platform instance.

    Args:
        name: Platform name, alias, or PlatformType.

    Returns:
        Instantiated platform.

    Raises:
        UnknownPlatformError: If the platform is not registered.
    """
    return _platforms[resolve_platform_type(name)]()


def list_platforms() -> list[PlatformType]:
    """List all registered platform types."""
    return list(_platforms.keys())


def get_pipeline() -> NormalizationPipeline:
    """Return the pipeline holding every registered platform profile."""
    return _pipeline

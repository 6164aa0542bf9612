"""Response normalization engine.

Converts the heterogeneous JSON returned by third-party media APIs into
the canonical ``{title, thumbnail, author, duration, downloads}`` shape.
"""

from universal_downloader.normalization.builder import build
from universal_downloader.normalization.extractor import extract
from universal_downloader.normalization.pipeline import (
    NormalizationPipeline,
    first_present,
    normalize,
)
from universal_downloader.normalization.quality import classify
from universal_downloader.normalization.schema import (
    DEFAULT_PROFILE,
    DownloadItem,
    MediaCandidate,
    MediaKind,
    NormalizationProfile,
    NormalizedResult,
    QualityInfo,
    QualityTier,
)

__all__ = [
    "DEFAULT_PROFILE",
    "DownloadItem",
    "MediaCandidate",
    "MediaKind",
    "NormalizationPipeline",
    "NormalizationProfile",
    "NormalizedResult",
    "QualityInfo",
    "QualityTier",
    "build",
    "classify",
    "extract",
    "first_present",
    "normalize",
]

"""Quality classification for raw quality labels.

Maps the free-form quality strings third-party APIs return ("720p",
"hd", "1080", "4K UHD", "320kbps", ...) to a ranked QualityTier and
to human-readable audio phrases.
"""

from typing import Any, Optional

from universal_downloader.normalization.schema import QualityInfo, QualityTier

# Checked highest resolution first; "1440" must win over "144".
TIER_PATTERNS: list[tuple[tuple[str, ...], QualityTier]] = [
    (("2160", "4k"), QualityTier.TIER_4K),
    (("1440",), QualityTier.TIER_1440P),
    (("1080",), QualityTier.TIER_1080P),
    (("720",), QualityTier.TIER_720P),
    (("480",), QualityTier.TIER_480P),
    (("360",), QualityTier.TIER_360P),
    (("240",), QualityTier.TIER_240P),
    (("144",), QualityTier.TIER_144P),
]

HD_MARKERS = ("hd", "high")

# Ordered: the first substring match wins.
AUDIO_QUALITY_PHRASES: list[tuple[str, str]] = [
    ("320", "High Quality (320kbps)"),
    ("256", "High Quality (256kbps)"),
    ("192", "Good Quality (192kbps)"),
    ("160", "Standard Quality (160kbps)"),
    ("128", "Standard Quality (128kbps)"),
    ("96", "Low Quality (96kbps)"),
    ("high", "High Quality"),
    ("medium", "Medium Quality"),
    ("low", "Low Quality"),
    ("standard", "Standard Quality"),
    ("unknown", "Audio"),
]

DEFAULT_LABEL = "Standard"


def _as_text(raw_quality: Any) -> str:
    if raw_quality is None:
        return ""
    return str(raw_quality).strip()


def quality_tier(raw_quality: Any) -> QualityTier:
    """Return the tier for a raw quality label, UNKNOWN if none matches."""
    q = _as_text(raw_quality).lower()
    for patterns, tier in TIER_PATTERNS:
        if any(p in q for p in patterns):
            return tier
    return QualityTier.UNKNOWN


def classify(raw_quality: Any) -> QualityInfo:
    """Classify a raw quality label.

    Args:
        raw_quality: Quality string (or number) as returned by the API.

    Returns:
        QualityInfo with tier, HD flag and display label. Never raises.
    """
    text = _as_text(raw_quality)
    q = text.lower()
    tier = quality_tier(text)
    is_hd = tier >= QualityTier.TIER_720P or any(m in q for m in HD_MARKERS)

    if not text:
        label = DEFAULT_LABEL
    elif tier is not QualityTier.UNKNOWN and text.isdigit():
        label = f"{text}p"
    else:
        label = text

    return QualityInfo(tier=tier, is_hd=is_hd, display_label=label)


def audio_quality_phrase(raw_quality: Optional[Any]) -> str:
    """Return the descriptive phrase for an audio quality label."""
    text = _as_text(raw_quality)
    q = text.lower()
    if not q:
        return "Audio"
    for key, phrase in AUDIO_QUALITY_PHRASES:
        if key in q:
            return phrase
    return f"Audio ({text})"

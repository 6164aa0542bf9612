"""Unit tests for the download item builder."""

from dataclasses import replace

from universal_downloader.normalization.builder import (
    audio_label,
    build,
    image_label,
    video_label,
)
from universal_downloader.normalization.schema import (
    DEFAULT_PROFILE,
    MediaCandidate,
    MediaKind,
)


def video(url, quality=None, **kwargs):
    return MediaCandidate(url=url, kind=MediaKind.VIDEO, raw_quality=quality, **kwargs)


class TestLabels:
    """Test label formatting."""

    def test_hd_video_label(self):
        assert video_label(video("https://a.test/1.mp4", "1080p")) == "1080p 🎬"

    def test_sd_video_label(self):
        assert video_label(video("https://a.test/1.mp4", "360p")) == "360p"

    def test_video_label_details(self):
        candidate = video(
            "https://a.test/1.mp4",
            "720",
            raw_extension="mp4",
            size="12.3 MB",
            has_watermark=True,
        )

        assert video_label(candidate) == "720p 🎬 .mp4 (12.3 MB) (watermark)"

    def test_watermark_false_not_shown(self):
        candidate = video("https://a.test/1.mp4", "SD", has_watermark=False)

        assert video_label(candidate) == "SD"

    def test_missing_quality_is_standard(self):
        assert video_label(video("https://a.test/1.mp4")) == "Standard"

    def test_audio_label(self):
        candidate = MediaCandidate(
            url="https://a.test/a.m4a",
            kind=MediaKind.AUDIO,
            raw_quality="128kbps",
            raw_extension="m4a",
        )

        assert audio_label(candidate) == "Standard Quality (128kbps) 🎵 - M4A"

    def test_audio_label_default_extension(self):
        candidate = MediaCandidate(url="https://a.test/a", kind=MediaKind.AUDIO)

        assert audio_label(candidate) == "Audio 🎵 - MP3"
        assert audio_label(candidate, "ogg") == "Audio 🎵 - OGG"

    def test_image_label(self):
        assert image_label(2) == "Image 2 📸"


class TestBuild:
    """Test ordering and filtering."""

    def test_videos_sorted_by_tier_descending(self):
        items = build([
            video("https://a.test/360.mp4", "360p"),
            video("https://a.test/1080.mp4", "1080p"),
            video("https://a.test/720.mp4", "720p"),
        ])

        assert [i.url for i in items] == [
            "https://a.test/1080.mp4",
            "https://a.test/720.mp4",
            "https://a.test/360.mp4",
        ]

    def test_equal_tiers_keep_input_order(self):
        items = build([
            video("https://a.test/a.mp4", "HD"),
            video("https://a.test/b.mp4", "SD"),
            video("https://a.test/c.mp4"),
        ])

        assert [i.url for i in items] == [
            "https://a.test/a.mp4",
            "https://a.test/b.mp4",
            "https://a.test/c.mp4",
        ]

    def test_kind_groups_in_order(self):
        items = build([
            MediaCandidate(url="https://a.test/1.jpg", kind=MediaKind.IMAGE),
            MediaCandidate(url="https://a.test/a.mp3", kind=MediaKind.AUDIO),
            video("https://a.test/v.mp4", "480p"),
            MediaCandidate(url="https://a.test/2.jpg", kind=MediaKind.IMAGE),
        ])

        assert [i.text for i in items] == [
            "480p",
            "Audio 🎵 - MP3",
            "Image 1 📸",
            "Image 2 📸",
        ]

    def test_non_http_urls_dropped(self):
        items = build([
            video("ftp://a.test/1.mp4"),
            video("https://a.test/2.mp4"),
        ])

        assert [i.url for i in items] == ["https://a.test/2.mp4"]

    def test_duplicate_urls_dropped(self):
        items = build([
            video("https://a.test/1.mp4", "720p"),
            MediaCandidate(url="https://a.test/1.mp4", kind=MediaKind.AUDIO),
        ])

        assert len(items) == 1
        assert items[0].text == "720p 🎬"

    def test_image_numbers_skip_duplicates(self):
        items = build([
            MediaCandidate(url="https://a.test/1.jpg", kind=MediaKind.IMAGE),
            MediaCandidate(url="https://a.test/1.jpg", kind=MediaKind.IMAGE),
            MediaCandidate(url="https://a.test/2.jpg", kind=MediaKind.IMAGE),
        ])

        assert [(i.text, i.url) for i in items] == [
            ("Image 1 📸", "https://a.test/1.jpg"),
            ("Image 2 📸", "https://a.test/2.jpg"),
        ]

    def test_profile_audio_extension(self):
        profile = replace(
            DEFAULT_PROFILE,
            default_extensions={MediaKind.AUDIO: "m4a"},
        )

        items = build(
            [MediaCandidate(url="https://a.test/a", kind=MediaKind.AUDIO)],
            profile,
        )

        assert items[0].text == "Audio 🎵 - M4A"

    def test_empty_input(self):
        assert build([]) == []

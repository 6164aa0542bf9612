"""
Pytest Configuration and Shared Fixtures.

This module provides common fixtures for all tests:

- test_settings: Settings isolated from the environment
- reset_circuit_breakers: No endpoint breakers carried between tests
- tiktok_payload, youtube_payload, spotify_payload, twitter_payload,
  instagram_payload: Sample third-party API envelopes
"""

import pytest

from universal_downloader.config.settings import Settings
from universal_downloader.core.circuit_breaker import reset_breakers

UPSTREAM_BASE_URL = "https://upstream.test"


@pytest.fixture
def test_settings() -> Settings:
    """Settings that ignore the local .env file."""
    return Settings(
        _env_file=None,
        app_env="development",
        debug=False,
        log_json=False,
        upstream_base_url=UPSTREAM_BASE_URL,
        upstream_timeout_seconds=5.0,
        upstream_max_retries=2,
        upstream_retry_backoff_seconds=0.0,
        circuit_breaker_failure_threshold=5,
        circuit_breaker_recovery_timeout=60.0,
    )


@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """Endpoint breakers are process-global; start every test without any."""
    reset_breakers()
    yield
    reset_breakers()


@pytest.fixture
def tiktok_payload() -> dict:
    """Return a TikTok envelope with clean, watermarked and audio URLs."""
    return {
        "success": True,
        "data": {
            "title": "Dance challenge #fyp",
            "cover": "https://p16.tiktokcdn.test/cover.jpg",
            "author": {"unique_id": "dancer42", "nickname": "Dancer"},
            "duration": 15,
            "hdplay": "https://v16.tiktokcdn.test/hd.mp4",
            "play": "https://v16.tiktokcdn.test/sd.mp4",
            "wmplay": "https://v16.tiktokcdn.test/wm.mp4",
            "music": "https://sf16.tiktokcdn.test/music.mp3",
        },
    }


@pytest.fixture
def youtube_payload() -> dict:
    """Return a YouTube envelope with a formats array."""
    return {
        "success": True,
        "data": {
            "title": "Lecture 1: Introduction",
            "thumbnail": "https://i.ytimg.test/vi/abc/hq.jpg",
            "channel": "Open Courses",
            "duration": 3725,
            "formats": [
                {
                    "url": "https://rr1.googlevideo.test/360.mp4",
                    "quality": "360p",
                    "ext": "mp4",
                },
                {
                    "url": "https://rr1.googlevideo.test/1080.mp4",
                    "quality": "1080p",
                    "ext": "mp4",
                    "filesize": 52428800,
                },
                {
                    "url": "https://rr1.googlevideo.test/audio.m4a",
                    "quality": "128kbps",
                    "ext": "m4a",
                    "type": "audio",
                },
            ],
        },
    }


@pytest.fixture
def spotify_payload() -> dict:
    """Return a Spotify envelope with a downloadLinks array."""
    return {
        "success": True,
        "data": {
            "title": "Song Title",
            "artist": "Some Artist",
            "cover": "https://i.scdn.test/cover.jpg",
            "duration": "3:45",
            "downloadLinks": [
                {
                    "url": "https://cdn.spotify-dl.test/track.mp3",
                    "quality": "320",
                    "extension": "mp3",
                    "type": "audio",
                }
            ],
        },
    }


@pytest.fixture
def twitter_payload() -> dict:
    """Return a Twitter envelope whose data is a bare media list."""
    return {
        "success": True,
        "data": [
            {"url": "https://video.twimg.test/480.mp4", "quality": "480p"},
            {"url": "https://video.twimg.test/720.mp4", "quality": "720p"},
        ],
    }


@pytest.fixture
def instagram_payload() -> dict:
    """Return an Instagram carousel envelope."""
    return {
        "success": True,
        "data": {
            "caption": "Weekend trip",
            "owner": {"username": "traveller"},
            "images": [
                "https://scontent.cdninstagram.test/1.jpg",
                {"url": "https://scontent.cdninstagram.test/2.jpg"},
            ],
        },
    }

"""Integration tests for the download and health endpoints."""

import httpx
import pytest

YOUTUBE_URL = "https://www.youtube.com/watch?v=abc"
INSTAGRAM_URL = "https://www.instagram.com/p/Cabc/"


class TestDownloadSuccess:
    """Successful downloads across platforms."""

    def test_get_youtube(self, api_client, fake_upstream, youtube_payload):
        fake_upstream.json("/api/youtube/download", youtube_payload)

        response = api_client.get("/api/youtube", params={"url": YOUTUBE_URL})

        assert response.status_code == 200
        assert response.headers["cache-control"] == (
            "public, s-maxage=3600, stale-while-revalidate=7200"
        )
        body = response.json()
        assert body["success"] is True
        assert body["data"]["title"] == "Lecture 1: Introduction"
        assert body["data"]["downloads"][0] == {
            "text": "1080p 🎬 .mp4 (50.0 MB)",
            "url": "https://rr1.googlevideo.test/1080.mp4",
        }
        assert body["meta"] == {"platform": "youtube", "source_url": YOUTUBE_URL}
        assert fake_upstream.requests[-1].url.params["url"] == YOUTUBE_URL

    def test_post_body(self, api_client, fake_upstream, tiktok_payload):
        fake_upstream.json("/api/tiktok/download", tiktok_payload)

        response = api_client.post(
            "/api/tiktok",
            json={"url": "https://www.tiktok.com/@dancer42/video/1"},
        )

        assert response.status_code == 200
        assert response.headers["cache-control"].startswith("public, s-maxage=600")
        texts = [d["text"] for d in response.json()["data"]["downloads"]]
        assert texts[0] == "HD 🎬"
        assert "SD (watermark)" in texts

    def test_spotify_sends_frontend_headers(self, api_client, fake_upstream, spotify_payload):
        fake_upstream.json("/api/spotify", spotify_payload)

        response = api_client.get(
            "/api/spotify",
            params={"url": "https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC"},
        )

        assert response.json()["data"]["downloads"][0]["text"] == (
            "High Quality (320kbps) 🎵 - MP3"
        )
        assert fake_upstream.requests[-1].headers["Referer"] == (
            "https://spotify.downloaderize.com/"
        )

    @pytest.mark.parametrize("path", ["/api/x", "/api/twitter", "/api/twitter/download"])
    def test_twitter_routes(self, api_client, fake_upstream, twitter_payload, path):
        fake_upstream.json("/api/twitter/download", twitter_payload)

        response = api_client.get(path, params={"url": "https://x.com/user/status/555"})

        body = response.json()
        assert body["success"] is True
        assert body["meta"]["platform"] == "twitter"
        assert body["meta"]["tweet_id"] == "555"
        assert [d["text"] for d in body["data"]["downloads"]] == ["720p 🎬", "480p"]
        assert response.headers["cache-control"].startswith("public, s-maxage=300")

    def test_twitter_short_link_expanded(self, api_client, fake_upstream, twitter_payload):
        fake_upstream.json("/api/twitter/download", twitter_payload)
        fake_upstream.respond(
            "https://t.co/AbC",
            lambda request: httpx.Response(
                301, headers={"Location": "https://x.com/user/status/777"}
            ),
        )
        fake_upstream.json("https://x.com/user/status/777", {})

        response = api_client.get("/api/twitter", params={"url": "https://t.co/AbC"})

        body = response.json()
        assert body["meta"]["tweet_id"] == "777"
        assert body["meta"]["resolved_url"] == "https://x.com/user/status/777"
        assert fake_upstream.requests[-1].url.params["url"] == "https://x.com/user/status/777"

    def test_twitter_short_link_to_other_site(self, api_client, fake_upstream):
        fake_upstream.respond(
            "https://t.co/Off",
            lambda request: httpx.Response(
                302, headers={"Location": "https://phish.example/login"}
            ),
        )
        fake_upstream.json("https://phish.example/login", {})

        response = api_client.get("/api/twitter", params={"url": "https://t.co/Off"})

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "error": "The short link does not point to a Twitter/X post",
        }
        assert all(r.url.path != "/api/twitter/download" for r in fake_upstream.requests)


class TestRequestErrors:
    """Validation failures change the HTTP status."""

    def test_missing_url(self, api_client):
        response = api_client.get("/api/youtube")

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "URL parameter is required"}

    def test_post_without_url(self, api_client):
        response = api_client.post("/api/youtube", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "URL parameter is required"

    def test_invalid_url(self, api_client, fake_upstream):
        response = api_client.get("/api/instagram", params={"url": YOUTUBE_URL})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Please provide a valid Instagram URL",
        }
        assert fake_upstream.requests == []

    def test_unknown_platform(self, api_client):
        response = api_client.get("/api/myspace", params={"url": "https://myspace.com/x"})

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Unsupported platform: myspace"}

    def test_malformed_body(self, api_client):
        response = api_client.post(
            "/api/youtube",
            content="not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestUpstreamFailures:
    """Upstream failures are HTTP 200 with success false."""

    def test_not_found(self, api_client, fake_upstream):
        response = api_client.get("/api/youtube", params={"url": YOUTUBE_URL})

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "error": "The video could not be found. It might be private or deleted.",
        }
        assert "cache-control" not in response.headers

    def test_server_error_retried(self, api_client, fake_upstream):
        fake_upstream.json("/api/youtube/download", {"error": "boom"}, status_code=500)

        response = api_client.get("/api/youtube", params={"url": YOUTUBE_URL})

        assert response.json()["error"] == (
            "The download service encountered an error. Please try again."
        )
        media_calls = [r for r in fake_upstream.requests if r.url.path != "/health"]
        assert len(media_calls) == 3

    def test_rejected(self, api_client, fake_upstream):
        fake_upstream.json(
            "/api/facebook-insta/download",
            {"success": False, "error": "Login required"},
        )

        response = api_client.get(
            "/api/facebook", params={"url": "https://www.facebook.com/watch/?v=1"}
        )

        assert response.json() == {"success": False, "error": "Login required"}

    def test_no_downloadable_media(self, api_client, fake_upstream):
        fake_upstream.json(
            "/api/facebook-insta/download",
            {"success": True, "data": {"title": "Foo", "medias": []}},
        )

        response = api_client.get(
            "/api/instagram", params={"url": "https://www.instagram.com/p/abc/"}
        )

        assert response.json()["error"] == (
            "Post found but no download URLs available. The post might be restricted."
        )

    def test_details_only_in_debug(self, debug_api_client, fake_upstream):
        response = debug_api_client.get("/api/youtube", params={"url": YOUTUBE_URL})

        body = response.json()
        assert body["success"] is False
        assert body["details"]["type"] == "UpstreamStatusError"
        assert body["details"]["status_code"] == 404


class TestServiceEndpoints:
    """Health, metrics and index."""

    def test_health(self, api_client):
        response = api_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["services"]["upstream"]["status"] == "healthy"

    def test_health_reports_open_breaker(self, api_client, fake_upstream, test_settings):
        fake_upstream.json("/api/youtube/download", {}, status_code=500)
        for _ in range(test_settings.circuit_breaker_failure_threshold):
            api_client.get("/api/youtube", params={"url": YOUTUBE_URL})

        blocked = api_client.get("/api/youtube", params={"url": YOUTUBE_URL})
        body = api_client.get("/health").json()

        assert blocked.json()["error"] == (
            "The download service is currently unavailable. Please try again later."
        )
        assert body["status"] == "degraded"
        breaker = body["services"]["breaker:/api/youtube/download"]
        assert breaker["status"] == "unhealthy"
        assert "used by: youtube" in breaker["message"]

    def test_instagram_outage_blocks_facebook(self, api_client, fake_upstream, test_settings):
        fake_upstream.json("/api/facebook-insta/download", {}, status_code=503)
        for _ in range(test_settings.circuit_breaker_failure_threshold):
            api_client.get("/api/instagram", params={"url": INSTAGRAM_URL})
        calls = len(fake_upstream.requests)

        blocked = api_client.get("/api/facebook", params={"url": "https://fb.watch/x/"})

        assert blocked.json()["error"] == (
            "The download service is currently unavailable. Please try again later."
        )
        assert len(fake_upstream.requests) == calls
        services = api_client.get("/health").json()["services"]
        assert "used by: facebook, instagram" in (
            services["breaker:/api/facebook-insta/download"]["message"]
        )

    def test_readiness_fails_when_upstream_down(self, api_client, fake_upstream):
        fake_upstream.json("/health", {}, status_code=503)

        assert api_client.get("/health/ready").status_code == 503

    def test_liveness(self, api_client):
        assert api_client.get("/health/live").json()["status"] == "alive"

    def test_metrics(self, api_client, fake_upstream, youtube_payload):
        fake_upstream.json("/api/youtube/download", youtube_payload)
        api_client.get("/api/youtube", params={"url": YOUTUBE_URL})

        response = api_client.get("/metrics/")

        assert response.status_code == 200
        assert "downloader_upstream_requests_total" in response.text
        assert "downloader_normalization_total" in response.text

    def test_index(self, api_client):
        body = api_client.get("/").json()

        assert body["platforms"]["tiktok"] == "/api/tiktok"
        assert set(body["platforms"]) == {
            "facebook",
            "instagram",
            "tiktok",
            "twitter",
            "spotify",
            "youtube",
        }

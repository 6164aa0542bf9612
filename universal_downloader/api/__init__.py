"""HTTP API for the downloader service."""

"""
Universal Downloader - Main Entry Point

Media download links for Facebook, Instagram, TikTok, Twitter/X, Spotify
and YouTube.

Usage:
    python main.py
"""

from universal_downloader.api.main import run

if __name__ == "__main__":
    run()

"""Universal Downloader.

Turns public post URLs from social platforms into normalized download
links via a third-party media extraction API.
"""

__version__ = "1.0.0"

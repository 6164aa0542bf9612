"""
Universal Downloader Test Suite.

- unit/: Normalization engine, platforms, upstream client, circuit breaker
- integration/: HTTP routes against a mocked upstream
- conftest.py: Shared fixtures and test configuration

Run tests with: pytest
"""

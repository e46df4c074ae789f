"""
Unit tests for utils.url_helpers module.

- get_canonical_url(): Fallback priority (SITE_URL → request → localhost)
- build_absolute_url(): Path normalization and canonical parameter usage
- is_absolute_url() / is_site_url(): Classifying file URLs for the editor toolbar
"""

import pytest
from django.test import RequestFactory

from utils.url_helpers import (
    build_absolute_url,
    get_canonical_url,
    is_absolute_url,
    is_site_url,
)


class TestGetCanonicalURL:
    """Test get_canonical_url() fallback priority."""

    def test_returns_site_url_when_set(self, settings):
        settings.SITE_URL = "https://www.example.org"
        assert get_canonical_url() == "https://www.example.org"

    def test_strips_trailing_slash(self, settings):
        settings.SITE_URL = "https://www.example.org/"
        result = get_canonical_url()
        assert result == "https://www.example.org"
        assert not result.endswith("/")

    def test_uses_request_when_site_url_blank(self, settings):
        settings.SITE_URL = ""
        request = RequestFactory().get("/cms/", HTTP_HOST="localhost")
        assert get_canonical_url(request) == "http://localhost"

    def test_falls_back_to_localhost(self, settings):
        settings.SITE_URL = ""
        assert get_canonical_url() == "http://localhost:8000"


class TestBuildAbsoluteURL:
    """Test build_absolute_url() path normalization."""

    def test_with_leading_slash(self):
        result = build_absolute_url("/assets/a1b2c3d4e5/report.pdf", canonical="https://example.org")
        assert result == "https://example.org/assets/a1b2c3d4e5/report.pdf"

    def test_without_leading_slash(self):
        result = build_absolute_url("assets/report.pdf", canonical="https://example.org/")
        assert result == "https://example.org/assets/report.pdf"

    def test_uses_canonical_url_by_default(self, settings):
        settings.SITE_URL = "https://www.example.org"
        assert build_absolute_url("/cms/about/") == "https://www.example.org/cms/about/"

    def test_absolute_urls_unchanged(self):
        url = "https://cdn.example.net/a.jpg"
        assert build_absolute_url(url, canonical="https://example.org") == url


class TestURLClassification:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("http://example.com/a.pdf", True),
            ("https://example.com", True),
            ("/assets/a.pdf", False),
            ("//example.com/a.pdf", False),
            ("mailto:someone@example.com", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_absolute_url(self, url, expected):
        assert is_absolute_url(url) is expected

    def test_relative_urls_are_site_urls(self):
        assert is_site_url("/assets/a.pdf")
        assert not is_site_url("mailto:someone@example.com")

    def test_canonical_host(self, settings):
        settings.SITE_URL = "https://www.example.org"
        assert is_site_url("https://www.example.org/assets/a.pdf")
        assert not is_site_url("https://www.youtube.com/watch?v=1")

    def test_allowed_hosts(self, settings):
        settings.SITE_URL = ""
        settings.ALLOWED_HOSTS = ["files.example.org", "*"]
        assert is_site_url("http://files.example.org/a.pdf")
        assert not is_site_url("http://other.example.org/a.pdf")

    def test_request_host(self, settings):
        settings.SITE_URL = "https://www.example.org"
        settings.ALLOWED_HOSTS = ["editor.local"]
        request = RequestFactory().get("/", HTTP_HOST="editor.local")
        assert is_site_url("http://editor.local/assets/a.pdf", request)

"""
URL Helper Functions for Canonical URL Management

This module provides centralized functions for building absolute URLs to
assets and pages. Links handed to the editor toolbar use the canonical URL
so they match regardless of which host the editor was opened on.
"""

from urllib.parse import urlsplit

from django.conf import settings


def get_canonical_url(request=None):
    """
    Get the canonical site URL.

    Priority:
    1. settings.SITE_URL (environment variable)
    2. The scheme and host of the current request, when one is given
    3. 'http://localhost:8000' (development fallback)

    Returns:
        str: Canonical URL without trailing slash

    Examples:
        >>> get_canonical_url()
        'https://www.example.org'
    """
    site_url = getattr(settings, "SITE_URL", "").strip()
    if site_url:
        return site_url.rstrip("/")

    if request is not None and hasattr(request, "build_absolute_uri"):
        return request.build_absolute_uri("/").rstrip("/")

    # Development fallback
    return "http://localhost:8000"


def build_absolute_url(path, canonical=None):
    """
    Build absolute URL using the canonical URL.

    Args:
        path: URL path (e.g., '/assets/a1b2c3d4e5/report.pdf' or 'assets/...')
              Can include leading slash or not - will be normalized.
              Already absolute URLs are returned unchanged.
        canonical: Optional precomputed canonical URL to avoid repeated lookups.

    Returns:
        str: Full absolute URL

    Examples:
        >>> build_absolute_url('/assets/a1b2c3d4e5/report.pdf')
        'https://www.example.org/assets/a1b2c3d4e5/report.pdf'
    """
    if is_absolute_url(path):
        return path
    if canonical is None:
        canonical = get_canonical_url()
    # Normalize canonical URL by removing trailing slash to avoid double slashes
    canonical = canonical.rstrip("/")
    path = path.lstrip("/")
    return f"{canonical}/{path}"


def is_absolute_url(url):
    """True when the URL carries both a scheme and a host."""
    if not url:
        return False
    parts = urlsplit(url)
    return bool(parts.scheme and parts.netloc)


def is_site_url(url, request=None):
    """
    True when the URL points at this site.

    Relative URLs are always site URLs. Absolute ones must match the host of
    the canonical URL, the request host, or one of ALLOWED_HOSTS.
    """
    if not url:
        return False
    parts = urlsplit(url)
    if not parts.netloc:
        return not parts.scheme
    host = (parts.hostname or "").lower()
    local_hosts = {urlsplit(get_canonical_url(request)).hostname}
    if request is not None:
        try:
            local_hosts.add(request.get_host().split(":")[0].lower())
        except Exception:
            # Request may be mocked or carry a disallowed host
            pass
    local_hosts.update(h.lower() for h in settings.ALLOWED_HOSTS if h != "*")
    return host in local_hosts

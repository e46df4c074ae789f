"""
File name normalisation for uploaded assets.

Names are transliterated to ASCII and passed through the ordered regex
replacements configured in ``settings.ASSETS_FILENAME_REPLACEMENTS`` so that
stored files have predictable, URL-safe names.
"""

import os
import re
import secrets
import unicodedata

from django.conf import settings

DEFAULT_REPLACEMENTS = [
    (r"\s", "-"),
    (r"_", "-"),
    (r"[^A-Za-z0-9+.\-]+", ""),
    (r"[\-]{2,}", "-"),
    (r"^[\.\-_]+", ""),
]


class FileNameFilter:
    """
    Filter a user supplied file name into one safe for storage and URLs.

    Examples:
        >>> FileNameFilter().filter("HTMLEditorFieldTest_example.jpg")
        'HTMLEditorFieldTest-example.jpg'
        >>> FileNameFilter().filter("My Holiday  Photo.JPG")
        'My-Holiday-Photo.jpg'
    """

    def __init__(self, replacements=None):
        if replacements is None:
            replacements = getattr(
                settings, "ASSETS_FILENAME_REPLACEMENTS", DEFAULT_REPLACEMENTS
            )
        self.replacements = [
            (re.compile(pattern), replacement) for pattern, replacement in replacements
        ]

    def filter(self, name):
        base, ext = os.path.splitext(os.path.basename(name or ""))
        base = self.transliterate(base)
        for pattern, replacement in self.replacements:
            base = pattern.sub(replacement, base)

        # Safeguard against empty names
        if not base:
            base = self.default_name()

        ext = self.transliterate(ext).lower()
        ext = re.sub(r"[^a-z0-9.]+", "", ext)
        return f"{base}{ext}" if ext not in ("", ".") else base

    @staticmethod
    def transliterate(value):
        value = unicodedata.normalize("NFKD", value)
        return value.encode("ascii", "ignore").decode("ascii")

    @staticmethod
    def default_name():
        return secrets.token_hex(5)


def filter_filename(name):
    return FileNameFilter().filter(name)

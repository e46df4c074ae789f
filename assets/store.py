"""
Content-addressed asset store for editor files and images.

Files are written through the Django storage configured under the
``assets`` alias in ``settings.STORAGES``. Every file lives in a directory
named after the first ten characters of the sha1 hash of its content, and
generated variants (resized images, etc.) sit next to the original:

    <folder path>/<hash[:10]>/<name>
    <folder path>/<hash[:10]>/<base>__<variant><ext>

Tests swap the alias for a throwaway ``FileSystemStorage`` to inspect what
was written.
"""

import base64
import hashlib
import json
import logging
import posixpath
from urllib.parse import unquote, urlsplit

from django.core.files.base import ContentFile
from django.core.files.storage import storages

from utils.url_helpers import is_site_url

logger = logging.getLogger(__name__)

ASSETS_STORAGE_ALIAS = "assets"
HASH_DIR_LENGTH = 10
VARIANT_SEPARATOR = "__"
URL_MARKER = "__asset_url_marker__"


def content_hash(data):
    """Return the sha1 hex digest used to address stored content."""
    return hashlib.sha1(data).hexdigest()


def variant_name(method, *args):
    """
    Build the variant name for a manipulation and its arguments.

    Arguments are stringified and JSON encoded, then base64 encoded with the
    padding removed, so the same manipulation always maps to the same file.

    Examples:
        >>> variant_name("ResizedImage", 10, 20)
        'ResizedImageWyIxMCIsIjIwIl0'
    """
    payload = json.dumps([str(arg) for arg in args], separators=(",", ":"))
    encoded = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
    return f"{method}{encoded.rstrip('=')}"


class AssetStore:
    def __init__(self, storage=None):
        self._storage = storage

    @property
    def storage(self):
        # Resolved lazily so overridden STORAGES settings take effect
        return self._storage or storages[ASSETS_STORAGE_ALIAS]

    def get_path(self, filename, file_hash, variant=None):
        directory, name = posixpath.split(filename.strip("/"))
        if variant:
            base, ext = posixpath.splitext(name)
            name = f"{base}{VARIANT_SEPARATOR}{variant}{ext}"
        parts = [directory, file_hash[:HASH_DIR_LENGTH], name]
        return "/".join(part for part in parts if part)

    def set_from_string(self, data, filename, file_hash=None, variant=None):
        """
        Store raw content and return a dict describing where it went.

        Variants must pass the hash of their original so they share its
        directory.
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        if file_hash is None:
            file_hash = content_hash(data)
        path = self.get_path(filename, file_hash, variant)

        # Same hash means same content; replace rather than let the
        # storage pick an alternative name
        if self.storage.exists(path):
            self.storage.delete(path)
        self.storage.save(path, ContentFile(data))
        logger.debug("Stored %s (%d bytes)", path, len(data))
        return {"filename": filename, "hash": file_hash, "variant": variant}

    def set_from_stream(self, stream, filename, file_hash=None, variant=None):
        if hasattr(stream, "seek"):
            stream.seek(0)
        return self.set_from_string(stream.read(), filename, file_hash, variant)

    def set_from_local_file(self, path, filename, file_hash=None, variant=None):
        with open(path, "rb") as fh:
            return self.set_from_string(fh.read(), filename, file_hash, variant)

    def exists(self, filename, file_hash, variant=None):
        if not file_hash:
            return False
        return self.storage.exists(self.get_path(filename, file_hash, variant))

    def get_as_bytes(self, filename, file_hash, variant=None):
        with self.storage.open(self.get_path(filename, file_hash, variant), "rb") as fh:
            return fh.read()

    def get_as_url(self, filename, file_hash, variant=None):
        return self.storage.url(self.get_path(filename, file_hash, variant))

    def delete(self, filename, file_hash):
        """Delete a file along with every variant generated from it."""
        path = self.get_path(filename, file_hash)
        directory, name = posixpath.split(path)
        base, _ext = posixpath.splitext(name)

        deleted = 0
        try:
            _dirs, files = self.storage.listdir(directory)
        except FileNotFoundError:
            files = []
        for entry in files:
            if entry == name or entry.startswith(f"{base}{VARIANT_SEPARATOR}"):
                self.storage.delete(f"{directory}/{entry}")
                deleted += 1
        logger.debug("Deleted %d stored file(s) for %s", deleted, path)
        return deleted

    def get_url_prefix(self):
        """
        URL under which the storage serves its files.

        Derived from a generated URL so backends without ``base_url`` (GCS
        buckets with a location) resolve the same way as local storage.
        """
        url = self.storage.url(URL_MARKER)
        return url[: url.rfind(URL_MARKER)]

    def path_from_url(self, url):
        """Return the storage path for an asset URL, or None for other URLs."""
        if not url:
            return None
        prefix = urlsplit(self.get_url_prefix())
        parts = urlsplit(url)
        if prefix.netloc:
            if parts.netloc.lower() != prefix.netloc.lower():
                return None
        elif parts.netloc and not is_site_url(url):
            return None
        path, prefix_path = unquote(parts.path), unquote(prefix.path)
        if not path.startswith(prefix_path):
            return None
        return path[len(prefix_path) :]

    def find_by_path(self, path):
        """
        Split a storage path back into (filename, hash prefix, variant).

        Returns None when the path does not follow the store layout.
        """
        parts = path.strip("/").split("/")
        if len(parts) < 2 or len(parts[-2]) != HASH_DIR_LENGTH:
            return None
        directory, hash_prefix, name = parts[:-2], parts[-2], parts[-1]
        variant = None
        base, ext = posixpath.splitext(name)
        if VARIANT_SEPARATOR in base:
            base, variant = base.split(VARIANT_SEPARATOR, 1)
            name = f"{base}{ext}"
        return "/".join(directory + [name]), hash_prefix, variant


def get_asset_store():
    return AssetStore()

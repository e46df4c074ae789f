"""
Shared pytest fixtures.

``spy_store`` points the ``assets`` storage alias at a temporary directory so
tests can inspect exactly which files were written, and under which URLs.
"""

import pytest
from django.core.files.storage import storages


@pytest.fixture
def spy_store(settings, tmp_path):
    """
    Return a callable that activates a throwaway asset store.

    ``spy_store("HTMLEditorFieldTest")`` stores files under
    ``<tmp>/HTMLEditorFieldTest`` and serves them from
    ``/assets/HTMLEditorFieldTest/``. Pass ``base_url`` to serve them from
    another prefix, such as an absolute bucket URL.
    """

    def activate(basedir, base_url=None):
        location = tmp_path / basedir
        location.mkdir(parents=True, exist_ok=True)
        settings.STORAGES = {
            **settings.STORAGES,
            "assets": {
                "BACKEND": "django.core.files.storage.FileSystemStorage",
                "OPTIONS": {
                    "location": str(location),
                    "base_url": base_url or f"/assets/{basedir}/",
                },
            },
        }
        return storages["assets"]

    return activate


@pytest.fixture
def make_image():
    """Return a callable producing encoded image bytes of a given size."""
    from io import BytesIO

    from PIL import Image

    def build(width=100, height=50, fmt="JPEG", color=(200, 30, 30)):
        buffer = BytesIO()
        Image.new("RGB", (width, height), color).save(buffer, format=fmt)
        return buffer.getvalue()

    return build

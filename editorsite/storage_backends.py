# editorsite/storage_backends.py

from django.conf import settings
from storages.backends.gcloud import GoogleCloudStorage


class AssetsGCS(GoogleCloudStorage):
    # Editor assets share the media bucket under an "assets/" prefix
    bucket_name = getattr(settings, "GS_BUCKET_NAME", None)
    location = getattr(settings, "GS_ASSETS_LOCATION", "assets")
    file_overwrite = False
    default_acl = None  # Use None with uniform bucket-level access
    # Public bucket: unsigned URLs so editor markup can embed them directly
    querystring_auth = False
    object_parameters = {"cache_control": "public, max-age=3600"}


class StaticRootGCS(GoogleCloudStorage):
    bucket_name = getattr(settings, "GS_BUCKET_NAME", None)
    location = getattr(settings, "GS_STATIC_LOCATION", "static")
    default_acl = None  # Use None with uniform bucket-level access
    querystring_auth = False
    file_overwrite = True
    object_parameters = {"cache_control": "public, max-age=31536000, immutable"}

import logging
import os
import posixpath
from io import BytesIO

from django.conf import settings
from django.db import models
from PIL import Image as PILImage

from utils.url_helpers import build_absolute_url

from .filename_filter import FileNameFilter
from .store import HASH_DIR_LENGTH, get_asset_store, variant_name

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "webp"]


def image_extensions():
    return [
        ext.lower()
        for ext in getattr(settings, "ASSETS_IMAGE_EXTENSIONS", DEFAULT_IMAGE_EXTENSIONS)
    ]


# --- Folders ---


class Folder(models.Model):
    """
    A named folder of editor assets.

    Folders only shape the storage path of the files they contain; the
    path of a file is the chain of folder names from the root down.
    """

    name = models.CharField(max_length=255)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        related_name="children",
        on_delete=models.CASCADE,
    )

    class Meta:
        unique_together = ("parent", "name")
        ordering = ["name"]

    def __str__(self):
        return self.path

    @property
    def path(self):
        parts = [self.name]
        current = self.parent
        while current:
            parts.insert(0, current.name)
            current = current.parent
        return "/".join(parts)

    @classmethod
    def find_or_make(cls, path):
        """Return the folder for a slash separated path, creating missing levels."""
        folder = None
        for name in [part for part in path.strip("/").split("/") if part]:
            folder, _created = cls.objects.get_or_create(parent=folder, name=name)
        return folder


# --- Files ---


class FileQuerySet(models.QuerySet):
    def images(self):
        pattern = r"\.(%s)$" % "|".join(image_extensions())
        return self.filter(name__iregex=pattern)

    def find_by_url(self, url):
        """
        Resolve an asset URL (absolute or site relative) to its File record.

        Variant URLs resolve to the file they were generated from.
        """
        store = get_asset_store()
        path = store.path_from_url(url)
        if path is None:
            return None
        parsed = store.find_by_path(path)
        if parsed is None:
            return None
        filename, hash_prefix, _variant = parsed
        name = posixpath.basename(filename)
        candidates = self.filter(name=name, file_hash__startswith=hash_prefix)
        for candidate in candidates.select_related("parent"):
            if candidate.filename == filename:
                return candidate
        return None


class File(models.Model):
    """
    A file referenced from editor content.

    The binary content lives in the asset store, addressed by ``filename``
    and ``file_hash``; this record holds its metadata.

    Attributes:
        name: Filtered file name, e.g. ``annual-report.pdf``
        title: Display title; derived from the name when blank
        parent: Optional containing folder
        file_hash: sha1 of the stored content
        is_public: Anonymous users may view the file when True
    """

    name = models.CharField(max_length=255)
    title = models.CharField(max_length=255, blank=True)
    parent = models.ForeignKey(
        Folder,
        null=True,
        blank=True,
        related_name="files",
        on_delete=models.CASCADE,
    )
    file_hash = models.CharField(max_length=40, blank=True)
    is_public = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = FileQuerySet.as_manager()

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.filename

    @property
    def filename(self):
        if self.parent_id:
            return f"{self.parent.path}/{self.name}"
        return self.name

    @property
    def extension(self):
        return os.path.splitext(self.name)[1].lstrip(".").lower()

    @property
    def is_image(self):
        return self.extension in image_extensions()

    def get_title(self):
        """Title, or one derived from the file name ('my-report_v2.pdf' -> 'my report v2')."""
        if self.title:
            return self.title
        base = os.path.splitext(self.name)[0]
        return base.replace("-", " ").replace("_", " ")

    # Content

    def _store(self, result):
        self.file_hash = result["hash"]

    def _assign_filename(self, filename):
        directory, name = posixpath.split(filename.strip("/"))
        self.parent = Folder.find_or_make(directory) if directory else None
        self.name = FileNameFilter().filter(name)

    def set_from_string(self, data, filename):
        self._assign_filename(filename)
        self._store(get_asset_store().set_from_string(data, self.filename))
        return self

    def set_from_local_file(self, path, filename=None):
        self._assign_filename(filename or os.path.basename(path))
        self._store(get_asset_store().set_from_local_file(path, self.filename))
        return self

    def set_from_stream(self, stream, filename):
        self._assign_filename(filename)
        self._store(get_asset_store().set_from_stream(stream, self.filename))
        return self

    def exists_on_disk(self):
        return get_asset_store().exists(self.filename, self.file_hash)

    def get_bytes(self):
        return get_asset_store().get_as_bytes(self.filename, self.file_hash)

    def get_url(self):
        if not self.file_hash:
            return None
        return get_asset_store().get_as_url(self.filename, self.file_hash)

    def get_absolute_url(self):
        url = self.get_url()
        return build_absolute_url(url) if url else None

    def delete_content(self):
        if self.file_hash:
            get_asset_store().delete(self.filename, self.file_hash)

    @property
    def hash_dir(self):
        return self.file_hash[:HASH_DIR_LENGTH]

    def can_view(self, user=None):
        if self.is_public:
            return True
        return bool(user and user.is_authenticated and user.is_active)

    def as_image(self):
        """Return this record as an Image, or None when it is not one."""
        if not self.is_image:
            return None
        return Image.objects.filter(pk=self.pk).first()


# --- Images ---


class ImageManager(models.Manager):
    def get_queryset(self):
        return FileQuerySet(self.model, using=self._db).images()


class ImageVariant:
    """A generated variant of an image, stored next to the original."""

    def __init__(self, image, variant, width, height):
        self.image = image
        self.variant = variant
        self.width = width
        self.height = height

    def __repr__(self):
        return f"<ImageVariant {self.filename} {self.variant}>"

    @property
    def filename(self):
        return self.image.filename

    @property
    def file_hash(self):
        return self.image.file_hash

    def get_url(self):
        return get_asset_store().get_as_url(self.filename, self.file_hash, self.variant)

    def exists_on_disk(self):
        return get_asset_store().exists(self.filename, self.file_hash, self.variant)


class Image(File):
    """File proxy restricted to image extensions, with resizing support."""

    objects = ImageManager()

    class Meta:
        proxy = True

    def _open(self):
        try:
            return PILImage.open(BytesIO(self.get_bytes()))
        except Exception as e:
            raise ValueError(f"Invalid image file: {e}")

    def get_dimensions(self):
        """Return (width, height) of the stored original, cached per instance."""
        if not hasattr(self, "_dimensions"):
            with self._open() as img:
                self._dimensions = img.size
        return self._dimensions

    @property
    def width(self):
        return self.get_dimensions()[0]

    @property
    def height(self):
        return self.get_dimensions()[1]

    def manipulate(self, method, args, callback):
        """
        Return the variant produced by ``callback`` for ``method(args)``.

        The callback receives a PIL image and returns the manipulated one.
        Variants already present in the store are reused.
        """
        variant = variant_name(method, *args)
        store = get_asset_store()
        if store.exists(self.filename, self.file_hash, variant):
            with PILImage.open(
                BytesIO(store.get_as_bytes(self.filename, self.file_hash, variant))
            ) as existing:
                return ImageVariant(self, variant, *existing.size)

        with self._open() as img:
            img_format = img.format or "JPEG"
            result = callback(img)
            if img_format == "JPEG" and result.mode not in ("RGB", "L"):
                result = result.convert("RGB")
            buffer = BytesIO()
            result.save(buffer, format=img_format, quality=85)

        store.set_from_string(
            buffer.getvalue(), self.filename, file_hash=self.file_hash, variant=variant
        )
        logger.info(
            "Generated %s variant %s (%dx%d)",
            self.filename,
            variant,
            result.width,
            result.height,
        )
        return ImageVariant(self, variant, result.width, result.height)

    def resized_image(self, width, height):
        """Exact resize to ``width`` x ``height``, ignoring aspect ratio."""
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError("Image dimensions must be positive")
        return self.manipulate(
            "ResizedImage",
            [width, height],
            lambda img: img.resize((width, height), PILImage.Resampling.LANCZOS),
        )

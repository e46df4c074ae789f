from django.db import models
from django.utils.text import slugify
from tinymce.models import HTMLField

from assets.models import File

# --- CMS Content Pages ---


class Page(models.Model):
    """
    A content-bearing record edited through the HTML editor field.

    Content is stored as sanitised HTML which may contain shortcodes such as
    ``[image id=3 width=100 height=80]`` or ``[file_link,id=7]``. Shortcodes
    are expanded when the page is rendered, and scanned on save to keep the
    broken-reference flags and ``linked_files`` current.

    Attributes:
        title: Display name for the page
        slug: URL-friendly identifier (auto-generated if not provided)
        content: Rich HTML content (TinyMCE field)
        is_public: Anonymous users may view the page when True
        has_broken_file: Content references a file that no longer exists
        has_broken_link: Content links to a page that no longer exists
        linked_files: Files referenced from the content
    """

    title = models.CharField(max_length=200)
    slug = models.SlugField(
        max_length=100,
        unique=True,
        help_text="URL path for this page, e.g. 'club-documents', 'bylaws', etc.",
    )
    content = HTMLField(blank=True)
    is_public = models.BooleanField(default=True)
    has_broken_file = models.BooleanField(default=False, editable=False)
    has_broken_link = models.BooleanField(default=False, editable=False)
    linked_files = models.ManyToManyField(
        File, blank=True, related_name="linked_pages", editable=False
    )
    updated_at = models.DateTimeField(auto_now=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "CMS Page"
        verbose_name_plural = "CMS Pages"
        ordering = ["title"]

    def __str__(self):
        return self.title

    def get_absolute_url(self):
        return f"/cms/{self.slug}/"

    def save(self, *args, **kwargs):
        """
        Save the page, generating a slug from the title if none was given.

        Broken reference flags are refreshed from the content before every
        save; ``linked_files`` is synced afterwards by a post_save handler.
        """
        from .link_tracking import update_broken_flags

        if not self.slug:
            self.slug = slugify(self.title)
        update_broken_flags(self)
        super().save(*args, **kwargs)

    def can_view(self, user=None):
        """
        Public pages are visible to everyone; private pages need an active,
        authenticated user.
        """
        if self.is_public:
            return True
        return bool(user and user.is_authenticated and user.is_active)

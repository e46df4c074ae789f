"""
Editor toolbar: resolves the files, images, media and anchors that the
HTML editor's insert dialogs work with.

Remote file references are only accepted when their scheme and host are in
``HTMLEDITOR_FILEURL_SCHEME_WHITELIST`` and
``HTMLEDITOR_FILEURL_DOMAIN_WHITELIST`` (an empty list accepts anything).
Rejections are raised as Django's request exceptions so views answer with
the matching HTTP status:

- BadRequest (400): relative URL, scheme or host not whitelisted, no file given
- Http404 (404): unknown file or page
- PermissionDenied (403): the user may not view the file or page
"""

import logging
import os
import posixpath
import re
from io import BytesIO
from urllib.parse import unquote, urlsplit

import requests
from bs4 import BeautifulSoup
from django.conf import settings
from django.core.exceptions import BadRequest, PermissionDenied
from django.http import Http404
from django.utils.html import escape
from PIL import Image as PILImage

from assets.models import File, image_extensions
from assets.store import get_asset_store
from utils.url_helpers import is_absolute_url, is_site_url

from .forms import InsertImageForm, InsertLinkForm, InsertMediaForm
from .models import Page
from .shortcodes import strip_shortcodes
from .signals import image_form_created, media_form_created

logger = logging.getLogger(__name__)

ANCHOR_RE = re.compile(r"""\s(name|id)="([^"]+?)"|\s(name|id)='([^']+?)'""", re.I | re.M)

YOUTUBE_EMBED_RE = re.compile(r"youtube(-nocookie)?\.com/embed", re.I)
YOUTUBE_ALLOW = (
    "accelerometer; autoplay; clipboard-write; encrypted-media; "
    "gyroscope; picture-in-picture; web-share"
)


def extract_anchors(content):
    """
    Return the distinct name/id attribute values in ``content``, in order.

    Only quoted values directly after whitespace count; shortcode arguments
    are not anchors. Values are HTML escaped for reuse in markup.
    """
    anchors = []
    for match in ANCHOR_RE.finditer(strip_shortcodes(content)):
        value = match.group(2) or match.group(4)
        if value:
            value = escape(value).replace("&#x27;", "&#039;")
            if value not in anchors:
                anchors.append(value)
    return anchors


def prepare_embed_html(html):
    """
    Make oEmbed iframe markup safe to drop into content.

    YouTube iframes get the referrer policy and allow list YouTube needs to
    verify the embedding site, other attributes are left as returned.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for iframe in soup.find_all("iframe"):
        if YOUTUBE_EMBED_RE.search(iframe.get("src", "")):
            iframe["referrerpolicy"] = "strict-origin-when-cross-origin"
            iframe["allow"] = YOUTUBE_ALLOW
    return str(soup)


# --- File wrappers ---


class EditorFile:
    """
    A file reference as seen by the toolbar: a URL plus, for files stored on
    this site, the File record behind it.
    """

    kind = "file"

    def __init__(self, url, file=None):
        self.url = url
        self.file = file

    def __repr__(self):
        return f"<{type(self).__name__} {self.url}>"

    @property
    def name(self):
        if self.file is not None:
            return self.file.name
        return posixpath.basename(unquote(urlsplit(self.url).path))

    @property
    def extension(self):
        return os.path.splitext(self.name)[1].lstrip(".").lower()

    @property
    def is_image(self):
        return self.extension in image_extensions()

    def get_title(self):
        if self.file is not None:
            return self.file.get_title()
        base = os.path.splitext(self.name)[0]
        return base.replace("-", " ").replace("_", " ")

    def initial(self):
        return {
            "url": self.url,
            "file_id": self.file.pk if self.file is not None else None,
        }

    def describe(self):
        return {
            "url": self.url,
            "name": self.name,
            "extension": self.extension,
            "type": self.kind,
            "title": self.get_title(),
            "file_id": self.file.pk if self.file is not None else None,
        }


class EditorImage(EditorFile):
    kind = "image"

    def __init__(self, url, file=None):
        super().__init__(url, file)
        self._dimensions = None

    def get_dimensions(self):
        """(width, height), read from the store or fetched; (None, None) if unknown."""
        if self._dimensions is None:
            self._dimensions = self._read_dimensions()
        return self._dimensions

    def _read_dimensions(self):
        image = self.file.as_image() if self.file is not None else None
        if image is not None:
            try:
                return image.get_dimensions()
            except (ValueError, OSError):
                logger.warning("Could not read dimensions of %s", image.filename)
                return None, None
        return self._fetch_remote_dimensions()

    def _fetch_remote_dimensions(self):
        timeout = getattr(settings, "HTMLEDITOR_REMOTE_TIMEOUT", 10)
        try:
            response = requests.get(self.url, timeout=timeout)
            response.raise_for_status()
            with PILImage.open(BytesIO(response.content)) as img:
                return img.size
        except requests.RequestException as e:
            logger.warning("Failed to fetch remote image %s: %s", self.url, e)
        except OSError as e:
            logger.warning("Remote file %s is not a readable image: %s", self.url, e)
        return None, None

    @property
    def width(self):
        return self.get_dimensions()[0]

    @property
    def height(self):
        return self.get_dimensions()[1]

    def initial(self):
        initial = super().initial()
        initial.update(
            {
                "alt": self.get_title(),
                "width": self.width,
                "height": self.height,
            }
        )
        return initial

    def describe(self):
        data = super().describe()
        data.update({"width": self.width, "height": self.height})
        return data


class EditorEmbed(EditorFile):
    """Remote media described through the provider's oEmbed endpoint."""

    kind = "embed"

    def __init__(self, url, file=None):
        super().__init__(url, file)
        self._oembed = None
        self._fetched = False

    def get_endpoint(self):
        providers = getattr(settings, "HTMLEDITOR_OEMBED_PROVIDERS", {})
        host = (urlsplit(self.url).hostname or "").lower()
        return providers.get(host)

    def get_oembed(self):
        """oEmbed data for the URL, or None when there is no provider or it fails."""
        if self._fetched:
            return self._oembed
        self._fetched = True
        endpoint = self.get_endpoint()
        if not endpoint:
            return None
        timeout = getattr(settings, "HTMLEDITOR_REMOTE_TIMEOUT", 10)
        try:
            response = requests.get(
                endpoint, params={"url": self.url, "format": "json"}, timeout=timeout
            )
            response.raise_for_status()
            self._oembed = response.json()
        except requests.RequestException as e:
            logger.warning("oEmbed lookup failed for %s: %s", self.url, e)
        except ValueError:
            logger.warning("oEmbed endpoint %s returned invalid JSON", endpoint)
        return self._oembed

    @property
    def is_media(self):
        return self.get_oembed() is not None

    def get_title(self):
        oembed = self.get_oembed() or {}
        return oembed.get("title") or super().get_title()

    @property
    def width(self):
        return (self.get_oembed() or {}).get("width")

    @property
    def height(self):
        return (self.get_oembed() or {}).get("height")

    def get_html(self):
        oembed = self.get_oembed() or {}
        return prepare_embed_html(oembed.get("html", ""))

    def initial(self):
        initial = super().initial()
        initial.update({"width": self.width, "height": self.height})
        return initial

    def describe(self):
        data = super().describe()
        oembed = self.get_oembed() or {}
        data.update(
            {
                "width": self.width,
                "height": self.height,
                "provider": oembed.get("provider_name"),
                "html": self.get_html(),
            }
        )
        return data


def wrap_file(url, file=None):
    """Pick the wrapper for a URL: image, remote embed, or plain file."""
    wrapper = EditorFile(url, file)
    if wrapper.is_image:
        return EditorImage(url, file)
    if file is None:
        return EditorEmbed(url)
    return wrapper


# --- Toolbar ---


class HTMLEditorToolbar:
    def __init__(self, request=None):
        self.request = request

    @property
    def user(self):
        return getattr(self.request, "user", None)

    @property
    def fileurl_scheme_whitelist(self):
        schemes = getattr(settings, "HTMLEDITOR_FILEURL_SCHEME_WHITELIST", [])
        return [scheme.lower() for scheme in schemes]

    @property
    def fileurl_domain_whitelist(self):
        domains = getattr(settings, "HTMLEDITOR_FILEURL_DOMAIN_WHITELIST", [])
        return [domain.lower() for domain in domains]

    def get_remote_file_by_url(self, file_url):
        """
        Accept an absolute URL whose scheme and host are whitelisted.

        Returns:
            tuple: (wrapper, url). The wrapper carries the local File when
            the URL points at this site's asset store.
        """
        if not is_absolute_url(file_url):
            raise BadRequest("Only absolute urls can be embedded")

        parts = urlsplit(file_url)
        scheme = parts.scheme.lower()
        allowed_schemes = self.fileurl_scheme_whitelist
        if not scheme or (allowed_schemes and scheme not in allowed_schemes):
            logger.warning("Rejected file URL %s: scheme not whitelisted", file_url)
            raise BadRequest("This file scheme is not included in the whitelist")

        domain = (parts.hostname or "").lower()
        allowed_domains = self.fileurl_domain_whitelist
        if not domain or (allowed_domains and domain not in allowed_domains):
            logger.warning("Rejected file URL %s: host not whitelisted", file_url)
            raise BadRequest("This file hostname is not included in the whitelist")

        local_file = None
        if self.is_local_url(file_url):
            local_file = File.objects.find_by_url(file_url)
        return wrap_file(file_url, local_file), file_url

    def _check_can_view(self, file):
        if not file.can_view(self.user):
            raise PermissionDenied("You don't have access to this file")

    def get_local_file_by_id(self, file_id):
        try:
            file = File.objects.filter(pk=int(file_id)).first()
        except (TypeError, ValueError):
            raise BadRequest("Invalid file ID")
        if file is None:
            raise Http404("Unable to find file to view")
        self._check_can_view(file)
        url = file.get_url()
        return wrap_file(url, file), url

    def get_local_file_by_url(self, file_url):
        file = File.objects.find_by_url(file_url)
        if file is None:
            raise Http404("Unable to find file to view")
        self._check_can_view(file)
        url = file.get_url()
        return wrap_file(url, file), url

    def is_local_url(self, file_url):
        """True for URLs on this site or served by the asset store."""
        if is_site_url(file_url, self.request):
            return True
        return get_asset_store().path_from_url(file_url) is not None

    def view_file(self, params):
        """
        Resolve the ``FileURL`` or ``ID`` parameter and build its insert form.

        Returns:
            tuple: (wrapper, form)
        """
        file_url = params.get("FileURL")
        file_id = params.get("ID")
        if file_url:
            if self.is_local_url(file_url):
                wrapper, _url = self.get_local_file_by_url(file_url)
            else:
                wrapper, _url = self.get_remote_file_by_url(file_url)
        elif file_id:
            wrapper, _url = self.get_local_file_by_id(file_id)
        else:
            raise BadRequest('Need either "ID" or "FileURL" parameter to identify the file')
        return wrapper, self.get_file_form(wrapper)

    def get_file_form(self, wrapper):
        if isinstance(wrapper, EditorImage):
            form = InsertImageForm(initial=wrapper.initial())
            image_form_created.send(sender=type(self), form=form, file=wrapper)
        elif isinstance(wrapper, EditorEmbed) and wrapper.is_media:
            form = InsertMediaForm(initial=wrapper.initial())
            media_form_created.send(sender=type(self), form=form, file=wrapper)
        elif wrapper.file is not None:
            form = InsertLinkForm(initial={"link_type": "file", "file": wrapper.file.pk})
        else:
            form = InsertLinkForm(
                initial={"link_type": "external", "external_url": wrapper.url}
            )
        return form

    def get_anchors(self, page_id):
        try:
            page = Page.objects.filter(pk=int(page_id)).first()
        except (TypeError, ValueError):
            page = None
        if page is None:
            raise Http404("Page not found")
        if not page.can_view(self.user):
            raise PermissionDenied("You don't have access to this page")
        return extract_anchors(page.content)

"""
Track which files and pages a page's content refers to.

References come from shortcodes (``[image id=..]``, ``[file_link id=..]``,
``[page_link id=..]``) and from plain ``<img src>`` / ``<a href>`` URLs that
point into the asset store. A reference to a record that no longer exists
marks the page as having a broken file or link.
"""

import logging

from assets.models import File
from assets.store import get_asset_store

from .html_value import HTMLValue
from .shortcodes import extract_shortcodes

logger = logging.getLogger(__name__)

FILE_SHORTCODES = {"image", "file_link"}
PAGE_SHORTCODES = {"page_link"}


def _int_or_none(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _asset_urls(content):
    store = get_asset_store()
    value = HTMLValue(content)
    urls = [img.get("src") for img in value.find_all("img")]
    urls += [a.get("href") for a in value.find_all("a")]
    return [url for url in urls if url and store.path_from_url(url) is not None]


def collect_references(content):
    """
    Return the references found in ``content``.

    Returns:
        dict: ``file_ids`` and ``page_ids`` (sets of referenced primary keys),
        plus ``file_urls`` (asset URLs used directly in markup).
    """
    refs = {"file_ids": set(), "page_ids": set(), "file_urls": set()}
    for tag, args in extract_shortcodes(content):
        pk = _int_or_none(args.get("id"))
        if tag in FILE_SHORTCODES:
            if pk is not None:
                refs["file_ids"].add(pk)
            elif args.get("src"):
                refs["file_urls"].add(args["src"])
        elif tag in PAGE_SHORTCODES and pk is not None:
            refs["page_ids"].add(pk)
    refs["file_urls"].update(_asset_urls(content))
    return refs


def resolve_linked_files(refs):
    """Return (files, broken) for the file references in ``refs``."""
    files = list(File.objects.filter(pk__in=refs["file_ids"]))
    broken = len(files) != len(refs["file_ids"])
    for file in files:
        if not file.exists_on_disk():
            broken = True
    for url in refs["file_urls"]:
        file = File.objects.find_by_url(url)
        if file is None:
            broken = True
        elif file not in files:
            files.append(file)
    return files, broken


def update_broken_flags(page):
    """Set ``has_broken_file`` and ``has_broken_link`` from the page content."""
    from .models import Page

    refs = collect_references(page.content)
    _files, page.has_broken_file = resolve_linked_files(refs)
    existing_pages = Page.objects.filter(pk__in=refs["page_ids"]).count()
    page.has_broken_link = existing_pages != len(refs["page_ids"])
    if page.has_broken_file or page.has_broken_link:
        logger.info(
            "Page %s has broken references (file=%s, link=%s)",
            page.slug,
            page.has_broken_file,
            page.has_broken_link,
        )


def sync_linked_files(page):
    files, _broken = resolve_linked_files(collect_references(page.content))
    page.linked_files.set(files)

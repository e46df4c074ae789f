"""
Shortcode handlers for asset and page references in editor content.

Registered on the ``default`` parser (rendering) and the ``regenerator``
parser (rewriting stored shortcodes with current URLs) when the cms app is
ready.
"""

import logging

from django.utils.html import escape

from assets.models import File

from .shortcodes import build_shortcode, get_parser

logger = logging.getLogger(__name__)


def find_file_record(args):
    """Find the File a shortcode points at, by id first and then by src URL."""
    file_id = args.get("id")
    if file_id:
        try:
            return File.objects.filter(pk=int(file_id)).first()
        except (TypeError, ValueError):
            logger.warning("Ignoring shortcode with non-numeric id %r", file_id)
            return None
    src = args.get("src")
    if src:
        return File.objects.find_by_url(src)
    return None


def render_attributes(attrs):
    return " ".join(f'{escape(name)}="{escape(value)}"' for name, value in attrs.items())


def handle_image_shortcode(args, content, parser, tag):
    """
    Render ``[image ...]`` as an ``<img>`` tag.

    The alt text defaults to the file title, the id attribute is dropped and
    empty attributes are removed. When both width and height are given and
    differ from the original, the src points at a resized variant.
    """
    record = find_file_record(args)
    if record is None:
        logger.warning("Image shortcode references missing file: %s", args)
        return ""

    src = record.get_url()
    image = record.as_image()
    if image is not None:
        width, height = args.get("width"), args.get("height")
        if width and height:
            try:
                if (int(width), int(height)) != image.get_dimensions():
                    src = image.resized_image(width, height).get_url()
            except (ValueError, OSError):
                logger.warning("Could not resize %s to %sx%s", record, width, height)

    attrs = {"src": "", "alt": record.get_title()}
    attrs.update(args)
    attrs.update({"id": "", "src": src})
    attrs = {name: value for name, value in attrs.items() if value}
    return f"<img {render_attributes(attrs)}>"


def regenerate_image_shortcode(args, content, parser, tag):
    """Rewrite the src of an image shortcode to the record's current URL."""
    record = find_file_record(args)
    if record is not None:
        args["src"] = record.get_url()
    return build_shortcode(tag, args)


def handle_file_link_shortcode(args, content, parser, tag):
    """Render ``[file_link id=..]`` as the file URL, or a link around enclosed text."""
    record = find_file_record(args)
    if record is None:
        logger.warning("File link shortcode references missing file: %s", args)
        return "" if content is None else content
    url = escape(record.get_url() or "")
    if content is None:
        return url
    return f'<a href="{url}">{parser.parse(content)}</a>'


def handle_page_link_shortcode(args, content, parser, tag):
    from .models import Page

    page = None
    try:
        page = Page.objects.filter(pk=int(args.get("id", ""))).first()
    except ValueError:
        pass
    if page is None:
        logger.warning("Page link shortcode references missing page: %s", args)
        return "" if content is None else content
    url = escape(page.get_absolute_url())
    if content is None:
        return url
    return f'<a href="{url}">{parser.parse(content)}</a>'


def register_shortcodes():
    get_parser("default").register("image", handle_image_shortcode).register(
        "file_link", handle_file_link_shortcode
    ).register("page_link", handle_page_link_shortcode)
    get_parser("regenerator").register("image", regenerate_image_shortcode)


def render_shortcodes(content):
    """Expand shortcodes for display."""
    return get_parser("default").parse(content or "")


def regenerate_shortcodes(content):
    """Rewrite stored shortcodes so the editor sees current URLs."""
    return get_parser("regenerator").parse(content or "")

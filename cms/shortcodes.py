"""
Shortcode parsing for editor content.

Shortcodes are bracketed placeholders embedded in stored HTML:

    [image src="/assets/a1b2c3d4e5/photo.jpg" width="10" height="20" id="3"]
    <a href="[file_link,id=7]">Annual report</a>
    [page_link id=4]Contact us[/page_link]

Attribute separators may be spaces or commas (commas keep shortcodes intact
inside HTML attribute values). Handlers are registered per named parser:
the ``default`` parser renders shortcodes into HTML for display, the
``regenerator`` parser rewrites them in place before content is handed back
to the editor.
"""

import html
import re

SHORTCODE_RE = re.compile(
    r"\[(?P<tag>[A-Za-z][\w-]*)"
    r"(?P<attrs>(?:[\s,]+[\w-]+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s,\]\"']+))?)*)"
    r"[\s,]*\]"
)
ATTR_RE = re.compile(
    r"([\w-]+)(?:\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s,\]\"']+)))?"
)


def parse_attributes(attr_string):
    """
    Parse shortcode attributes into an ordered dict.

    Values are HTML-unescaped; bare attributes map to an empty string.

    Examples:
        >>> parse_attributes(' src="a.jpg" width=10,id=3')
        {'src': 'a.jpg', 'width': '10', 'id': '3'}
    """
    args = {}
    for match in ATTR_RE.finditer(attr_string or ""):
        name, double, single, bare = match.groups()
        value = next((v for v in (double, single, bare) if v is not None), "")
        args[name] = html.unescape(value)
    return args


def build_shortcode(tag, args):
    """Serialise a shortcode with double-quoted attribute values."""
    parts = [
        '%s="%s"' % (name, html.escape(str(value or name), quote=True))
        for name, value in args.items()
    ]
    if not parts:
        return f"[{tag}]"
    return "[%s %s]" % (tag, " ".join(parts))


def extract_shortcodes(content):
    """Return (tag, args) for every shortcode in ``content``, in order."""
    return [
        (match.group("tag"), parse_attributes(match.group("attrs")))
        for match in SHORTCODE_RE.finditer(content or "")
    ]


def strip_shortcodes(content):
    return SHORTCODE_RE.sub("", content or "")


class ShortcodeParser:
    """
    Expand registered shortcodes through handler callables.

    A handler is called as ``handler(args, content, parser, tag)`` where
    ``content`` is the enclosed text for ``[tag]...[/tag]`` forms and None
    otherwise. Returning None leaves the shortcode untouched; any other value
    replaces it. Unregistered shortcodes are always left as they are.
    """

    def __init__(self, name):
        self.name = name
        self.handlers = {}

    def __repr__(self):
        return f"<ShortcodeParser {self.name} {sorted(self.handlers)}>"

    def register(self, tag, handler):
        self.handlers[tag] = handler
        return self

    def unregister(self, tag):
        self.handlers.pop(tag, None)
        return self

    def is_registered(self, tag):
        return tag in self.handlers

    def _find_close(self, content, tag, start):
        close = f"[/{tag}]"
        close_at = content.find(close, start)
        if close_at == -1:
            return None
        # Another opening of the same tag first means this one is self-closing
        reopen = SHORTCODE_RE.search(content, start, close_at)
        while reopen and reopen.group("tag") != tag:
            reopen = SHORTCODE_RE.search(content, reopen.end(), close_at)
        if reopen:
            return None
        return close_at, close_at + len(close)

    def parse(self, content):
        if not content:
            return content

        output = []
        pos = 0
        while True:
            match = SHORTCODE_RE.search(content, pos)
            if match is None:
                break
            tag = match.group("tag")
            start, end = match.span()
            handler = self.handlers.get(tag)
            if handler is None:
                output.append(content[pos:end])
                pos = end
                continue

            enclosed = None
            closing = self._find_close(content, tag, end)
            if closing is not None:
                enclosed = content[end : closing[0]]
                end = closing[1]

            args = parse_attributes(match.group("attrs"))
            result = handler(args, enclosed, self, tag)
            output.append(content[pos:start])
            output.append(content[start:end] if result is None else str(result))
            pos = end

        output.append(content[pos:])
        return "".join(output)


_parsers = {}


def get_parser(name="default"):
    """Return the named parser, creating it on first use."""
    if name not in _parsers:
        _parsers[name] = ShortcodeParser(name)
    return _parsers[name]

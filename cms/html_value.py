"""
Parsed HTML fragments for editor content.

Fragments are parsed with html5lib through BeautifulSoup, so unclosed and
implicitly closed tags (``<p>a<p>b``, ``<li>x<li>y``) are repaired the way a
browser would repair them. Only the children of ``<body>`` make up the
fragment.
"""

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

# Minimal entity escaping, HTML5 style void elements (<br> not <br/>)
EDITOR_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)


class HTMLValue:
    """
    An HTML fragment that can be inspected and rewritten before saving.

    Examples:
        >>> HTMLValue("<p>Unclosed Tag").get_content()
        '<p>Unclosed Tag</p>'
        >>> HTMLValue("<ul><li>x<li>y</ul>").get_content()
        '<ul><li>x</li><li>y</li></ul>'
    """

    def __init__(self, content=None):
        self.set_content(content)

    def __str__(self):
        return self.get_content()

    def set_content(self, content):
        # An explicit <body> keeps leading <script>/<style> out of <head>
        self.soup = BeautifulSoup(f"<body>{content or ''}", "html5lib")
        return self

    @property
    def body(self):
        return self.soup.body

    def get_content(self):
        return self.body.decode_contents(formatter=EDITOR_FORMATTER)

    def find_all(self, *args, **kwargs):
        return self.body.find_all(*args, **kwargs)

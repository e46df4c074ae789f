"""
Server-side sanitising of editor HTML.

TinyMCE filters markup in the browser using its ``valid_elements`` rules,
but nothing stops a client from posting arbitrary HTML. This module parses
the same rule syntax and enforces it on the server before content is saved.

Rule syntax (comma separated element rules):

    @[id|class]          global attributes, allowed on every element
    a[href|target]       element with its allowed attributes
    -strong/-b           '-' removes the element when empty; 'b' becomes 'strong'
    #p                   '#' pads the element with a non-breaking space when empty
    h?, data*            '?' and '*' wildcards in element and attribute names
    img[!src|alt=]       '!' required attribute, '=' default value
    a[rel:nofollow]      ':' forced value
    a[target<_blank?_top]  '<' list of allowed values separated by '?'
"""

import logging
import re

from bs4 import NavigableString

logger = logging.getLogger(__name__)

# Elements dropped together with their content when not allowed
DROP_CONTENT_ELEMENTS = {"script", "style", "iframe", "object", "embed", "noscript"}

URL_ATTRIBUTES = {"href", "src", "action", "formaction", "background", "longdesc", "data"}
# Browsers ignore control characters and whitespace anywhere in a URL scheme
URL_IGNORED_CHARS_RE = re.compile(r"[\x00-\x20\x7f]+")
UNSAFE_URL_RE = re.compile(r"^(?:(?:java|vb)script:|data:text/html)", re.I)

ELEMENT_RULE_RE = re.compile(r"([^\[\],]+)(?:\[([^\]]*)\])?")
ATTRIBUTE_RULE_RE = re.compile(r"^(!?)([\w\-*?]+)(?:(=|:|<)(.*))?$")


def wildcard_pattern(name):
    """Compile a rule name with '*' and '?' wildcards into a regex, or None."""
    if "*" not in name and "?" not in name:
        return None
    escaped = re.escape(name).replace(r"\*", ".*").replace(r"\?", ".")
    return re.compile(f"^{escaped}$", re.I)


class AttributeRule:
    def __init__(self, name, required=False, default=None, forced=None, valid_values=None):
        self.name = name
        self.pattern = wildcard_pattern(name)
        self.required = required
        self.default = default
        self.forced = forced
        self.valid_values = valid_values

    def __repr__(self):
        return f"<AttributeRule {self.name}>"

    def matches(self, name):
        if self.pattern is not None:
            return bool(self.pattern.match(name))
        return self.name == name

    @classmethod
    def parse(cls, text):
        match = ATTRIBUTE_RULE_RE.match(text.strip())
        if not match:
            return None
        required, name, operator, value = match.groups()
        rule = cls(name.lower(), required=bool(required))
        if operator == "=":
            rule.default = value or ""
        elif operator == ":":
            rule.forced = value or ""
        elif operator == "<":
            rule.valid_values = [v for v in (value or "").split("?")]
        return rule


class ElementRule:
    def __init__(self, name, output_name=None):
        self.name = name
        self.output_name = output_name or name
        self.pattern = wildcard_pattern(name)
        self.attributes = []
        self.remove_empty = False
        self.pad_empty = False

    def __repr__(self):
        return f"<ElementRule {self.name}>"

    def matches(self, tag_name):
        if self.pattern is not None:
            return bool(self.pattern.match(tag_name))
        return self.name == tag_name

    def get_attribute_rule(self, name):
        for rule in self.attributes:
            if rule.matches(name):
                return rule
        return None


class HTMLEditorSanitiser:
    """
    Strip elements and attributes not allowed by an editor configuration.

    Disallowed elements are unwrapped (their children are kept) except for
    script-like elements, which are removed along with their content.

    Examples:
        >>> from cms.html_value import HTMLValue
        >>> value = HTMLValue('<p onclick="x()">Hi<script>bad()</script></p>')
        >>> HTMLEditorSanitiser("p").sanitise(value).get_content()
        '<p>Hi</p>'
    """

    def __init__(self, config=None):
        self.global_attributes = []
        self.element_rules = []
        self._exact_rules = {}
        if config is None:
            return
        if isinstance(config, str):
            self.add_valid_elements(config)
        else:
            self.add_valid_elements(config.get_valid_elements())

    def add_valid_elements(self, valid_elements):
        """Parse a TinyMCE ``valid_elements`` string and add its rules."""
        for match in ELEMENT_RULE_RE.finditer(valid_elements or ""):
            names, attr_rules = match.group(1).strip(), match.group(2)
            if not names:
                continue
            attributes = []
            for text in (attr_rules or "").split("|"):
                if text.strip():
                    rule = AttributeRule.parse(text)
                    if rule is not None:
                        attributes.append(rule)

            if names == "@":
                self.global_attributes.extend(attributes)
                continue

            output_name = None
            for raw_name in names.split("/"):
                prefix = raw_name[:1] if raw_name[:1] in "-#+" else ""
                name = raw_name[len(prefix):].strip().lower()
                if not name:
                    continue
                # In 'strong/b' the first name is the one written out
                output_name = output_name or name
                element = self._exact_rules.get(name) or ElementRule(name, output_name)
                if element.name not in self._exact_rules:
                    self.element_rules.append(element)
                    if element.pattern is None:
                        self._exact_rules[name] = element
                element.remove_empty = prefix == "-"
                element.pad_empty = prefix == "#"
                element.attributes.extend(attributes)
        return self

    def get_element_rule(self, tag_name):
        tag_name = tag_name.lower()
        if tag_name in self._exact_rules:
            return self._exact_rules[tag_name]
        for rule in self.element_rules:
            if rule.matches(tag_name):
                return rule
        return None

    def get_attribute_rule(self, element_rule, name):
        name = name.lower()
        rule = element_rule.get_attribute_rule(name)
        if rule is not None:
            return rule
        for rule in self.global_attributes:
            if rule.matches(name):
                return rule
        return None

    def is_valid_attribute(self, element_rule, name, value):
        rule = self.get_attribute_rule(element_rule, name)
        if rule is None:
            return False
        if rule.valid_values is not None and value not in rule.valid_values:
            return False
        if name.lower() in URL_ATTRIBUTES and self.is_unsafe_url(value):
            return False
        return True

    @staticmethod
    def is_unsafe_url(value):
        return bool(UNSAFE_URL_RE.match(URL_IGNORED_CHARS_RE.sub("", value or "")))

    def sanitise(self, html_value):
        """Sanitise an HTMLValue in place and return it."""
        for element in list(html_value.find_all(True)):
            if element.decomposed:
                continue
            rule = self.get_element_rule(element.name)
            if rule is None:
                logger.debug("Removing disallowed element <%s>", element.name)
                if element.name in DROP_CONTENT_ELEMENTS:
                    element.decompose()
                else:
                    element.unwrap()
                continue
            if not self._sanitise_attributes(element, rule):
                element.unwrap()
                continue
            if element.name != rule.output_name:
                element.name = rule.output_name
            self._add_link_safety(element)

        # Children first, so emptied parents are seen as empty too
        for element in reversed(list(html_value.find_all(True))):
            if element.decomposed:
                continue
            rule = self.get_element_rule(element.name)
            if rule is None or not self._is_empty(element):
                continue
            if rule.remove_empty and not element.attrs.get("id") and not element.attrs.get("name"):
                element.decompose()
            elif rule.pad_empty:
                element.append(NavigableString("\xa0"))
        return html_value

    def _sanitise_attributes(self, element, rule):
        for name in list(element.attrs):
            value = element.attrs[name]
            if isinstance(value, list):
                value = " ".join(value)
            if not self.is_valid_attribute(rule, name, value):
                logger.debug("Removing attribute %s from <%s>", name, element.name)
                del element.attrs[name]

        for attribute in rule.attributes + self.global_attributes:
            if attribute.pattern is not None:
                continue
            if attribute.forced is not None:
                element.attrs[attribute.name] = attribute.forced
            elif attribute.default is not None and attribute.name not in element.attrs:
                element.attrs[attribute.name] = attribute.default
            if attribute.required and attribute.name not in element.attrs:
                return False
        return True

    @staticmethod
    def _add_link_safety(element):
        if element.name != "a" or element.attrs.get("target") != "_blank":
            return
        rel = element.attrs.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        for value in ("noopener", "noreferrer"):
            if value not in rel:
                rel.append(value)
        element.attrs["rel"] = " ".join(rel)

    @staticmethod
    def _is_empty(element):
        if element.name in ("br", "hr", "img", "input", "area", "param", "col"):
            return False
        return not element.contents

"""
Tests for server-side sanitising against TinyMCE valid_elements rules.
"""

import pytest

from cms.editor_config import HTMLEditorConfig
from cms.html_value import HTMLValue
from cms.sanitiser import AttributeRule, HTMLEditorSanitiser


def sanitise(rules, html):
    return HTMLEditorSanitiser(rules).sanitise(HTMLValue(html)).get_content()


class TestAttributeRuleParsing:
    def test_plain(self):
        rule = AttributeRule.parse("href")
        assert rule.name == "href"
        assert not rule.required

    def test_required_with_default(self):
        rule = AttributeRule.parse("!alt=")
        assert rule.required
        assert rule.default == ""

    def test_forced_value(self):
        assert AttributeRule.parse("rel:nofollow").forced == "nofollow"

    def test_valid_values(self):
        assert AttributeRule.parse("target<_blank?_top").valid_values == ["_blank", "_top"]

    def test_wildcard(self):
        rule = AttributeRule.parse("data*")
        assert rule.matches("data-id")
        assert not rule.matches("id")


class TestHTMLEditorSanitiser:
    @pytest.mark.parametrize(
        "rules, given, expected",
        [
            ("p,strong", "<p>Leave Alone</p>", "<p>Leave Alone</p>"),
            ("p", "<p><span>Unwrapped</span> text</p>", "<p>Unwrapped text</p>"),
            ("p", '<p onclick="x()">Hi<script>bad()</script></p>', "<p>Hi</p>"),
            ("p", "<p>Styled<style>p {color: red}</style></p>", "<p>Styled</p>"),
            ("@[class],p", '<p class="a" title="b">Global</p>', '<p class="a">Global</p>'),
            ("p[id]", '<p id="x" class="y">Specific</p>', '<p id="x">Specific</p>'),
            ("strong/b", "<b>Alias</b>", "<strong>Alias</strong>"),
            ("h?", "<h3>Heading</h3>", "<h3>Heading</h3>"),
            ("img[src|data*]", '<img src="a.jpg" data-id="3">', '<img src="a.jpg" data-id="3">'),
            ("img[src|alt=]", '<img src="a.jpg">', '<img src="a.jpg" alt="">'),
            ("a[href|rel:nofollow]", '<a href="/x">Forced</a>', '<a href="/x" rel="nofollow">Forced</a>'),
            ("a[!href],p", "<p><a>Required</a></p>", "<p>Required</p>"),
            ("a[target<_blank?_top]", '<a target="_self">Self</a>', "<a>Self</a>"),
            ("a[target<_blank?_top]", '<a target="_top">Top</a>', '<a target="_top">Top</a>'),
        ],
    )
    def test_rules(self, rules, given, expected):
        assert sanitise(rules, given) == expected

    def test_remove_empty(self):
        assert sanitise("-p", "<p></p><p>Kept</p>") == "<p>Kept</p>"

    def test_remove_empty_keeps_anchors(self):
        assert sanitise("-p[id]", '<p id="top"></p>') == '<p id="top"></p>'

    def test_remove_empty_cascades_to_parents(self):
        assert sanitise("-div,-p", "<div><p></p></div>") == ""

    def test_pad_empty(self):
        assert sanitise("#p", "<p></p>") == "<p>\xa0</p>"

    def test_script_urls_removed(self):
        assert sanitise("a[href]", '<a href="javascript:alert(1)">x</a>') == "<a>x</a>"
        assert sanitise("a[href]", '<a href=" JavaScript :alert(1)">x</a>') == "<a>x</a>"
        assert sanitise("img[src]", '<img src="data:text/html;base64,PHNjcmlwdD4=">') == "<img>"

    @pytest.mark.parametrize(
        "href",
        [
            "java&#9;script:alert(1)",
            "java&#10;script:alert(1)",
            "jav&#x09;ascript:alert(1)",
            "vb&#13;script:msgbox(1)",
        ],
    )
    def test_script_urls_with_control_characters_removed(self, href):
        assert sanitise("a[href]", f'<a href="{href}">x</a>') == "<a>x</a>"

    def test_lookalike_relative_urls_kept(self):
        html = '<a href="javascript-guide.html">Guide</a>'
        assert sanitise("a[href]", html) == html

    def test_target_blank_gets_rel(self):
        assert sanitise("a[href|target|rel]", '<a href="/x" target="_blank">x</a>') == (
            '<a href="/x" target="_blank" rel="noopener noreferrer">x</a>'
        )

    def test_with_editor_config(self):
        sanitiser = HTMLEditorSanitiser(HTMLEditorConfig.get("basic"))
        result = sanitiser.sanitise(
            HTMLValue('<h1>Title</h1><p>Text <img src="a.jpg"> <b>bold</b></p>')
        ).get_content()
        assert result == "Title<p>Text  <strong>bold</strong></p>"

    def test_default_config_keeps_iframes(self):
        sanitiser = HTMLEditorSanitiser(HTMLEditorConfig.get("cms"))
        html = '<iframe src="https://www.youtube.com/embed/abc" width="480"></iframe>'
        assert sanitiser.sanitise(HTMLValue(html)).get_content() == html

"""
Tests for TinyMCE configuration and the named editor configs built on it.
URLs typed by editors must be saved as typed, and the server-side sanitiser
must enforce the same element rules the browser editor uses.
"""

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.test import TestCase, override_settings

from cms.editor_config import HTMLEditorConfig
from cms.forms import HTMLEditorField


class TinyMCEConfigurationTest(TestCase):
    """Test TinyMCE configuration for relative URL handling."""

    def test_global_tinymce_config_preserves_user_urls(self):
        """Test that global TinyMCE config preserves user input URLs without conversion."""
        config = settings.TINYMCE_DEFAULT_CONFIG

        self.assertFalse(
            config.get("relative_urls"),
            "relative_urls should be False to prevent ugly ../../../ paths",
        )
        self.assertTrue(
            config.get("remove_script_host"),
            "remove_script_host should be True to strip protocol+host from URLs",
        )
        # Shortcodes like [file_link,id=3] in hrefs must survive untouched
        self.assertFalse(
            config.get("convert_urls"),
            "convert_urls should be False to preserve user input like '[file_link,id=3]'",
        )

    def test_editor_configs_inherit_url_settings(self):
        """Every named config keeps the URL handling of the default config."""
        for name in settings.HTMLEDITOR_CONFIGS:
            config = HTMLEditorConfig.get(name)
            self.assertFalse(config.get_option("convert_urls"), name)
            self.assertFalse(config.get_option("relative_urls"), name)


class HTMLEditorConfigTest(TestCase):
    def test_active_config(self):
        self.assertEqual(HTMLEditorConfig.get().name, settings.HTMLEDITOR_ACTIVE_CONFIG)

    def test_named_config_overrides_defaults(self):
        config = HTMLEditorConfig.get("basic")
        self.assertEqual(config.get_option("toolbar"), "bold italic | link")
        self.assertEqual(config.get_option("height"), 500)

    def test_unknown_config(self):
        with self.assertRaises(ImproperlyConfigured):
            HTMLEditorConfig.get("missing")

    def test_set_option_does_not_leak(self):
        HTMLEditorConfig.get("cms").set_option("height", 100)
        self.assertEqual(HTMLEditorConfig.get("cms").get_option("height"), 500)
        self.assertEqual(settings.TINYMCE_DEFAULT_CONFIG["height"], 500)

    def test_valid_elements_include_extended(self):
        valid = HTMLEditorConfig.get("cms").get_valid_elements()
        self.assertIn("#p[id|dir|class|align|style]", valid)
        self.assertIn("iframe[", valid)

    def test_basic_config_has_no_extended_elements(self):
        self.assertEqual(
            HTMLEditorConfig.get("basic").get_valid_elements(),
            "-p,br,-strong/-b,-em/-i,a[href|target|title]",
        )

    @override_settings(HTMLEDITOR_ACTIVE_CONFIG="basic")
    def test_field_uses_active_config(self):
        field = HTMLEditorField("content")
        self.assertEqual(field.editor_config.name, "basic")
        self.assertEqual(field.clean("<h1>Heading</h1><p>Text</p>"), "Heading<p>Text</p>")

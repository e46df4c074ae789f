"""
Named HTML editor configurations.

Each configuration is a TinyMCE option dict from ``settings.HTMLEDITOR_CONFIGS``
merged over ``settings.TINYMCE_DEFAULT_CONFIG``. The same options drive the
TinyMCE widget in the browser and the server-side sanitiser, so what the
editor allows and what is saved stay in step.
"""

import copy

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


class HTMLEditorConfig:
    def __init__(self, name, options=None):
        self.name = name
        self.options = copy.deepcopy(getattr(settings, "TINYMCE_DEFAULT_CONFIG", {}))
        self.options.update(options or {})

    def __repr__(self):
        return f"<HTMLEditorConfig {self.name}>"

    @classmethod
    def get(cls, name=None):
        """Return the named configuration, or the active one when name is None."""
        if isinstance(name, cls):
            return name
        if name is None:
            name = getattr(settings, "HTMLEDITOR_ACTIVE_CONFIG", "cms")
        configs = getattr(settings, "HTMLEDITOR_CONFIGS", {})
        if name not in configs:
            raise ImproperlyConfigured(
                f"Unknown HTML editor config '{name}'. "
                f"Available: {', '.join(sorted(configs)) or 'none'}"
            )
        return cls(name, configs[name])

    def get_option(self, key, default=None):
        return self.options.get(key, default)

    def set_option(self, key, value):
        self.options[key] = value
        return self

    def get_valid_elements(self):
        """Element rules from ``valid_elements`` plus ``extended_valid_elements``."""
        rules = [
            self.get_option("valid_elements", ""),
            self.get_option("extended_valid_elements", ""),
        ]
        return ",".join(rule for rule in rules if rule)

    def get_widget_options(self):
        """Options handed to the TinyMCE widget as ``mce_attrs``."""
        return copy.deepcopy(self.options)

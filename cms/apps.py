from django.apps import AppConfig


class CmsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "cms"
    verbose_name = "CMS"

    def ready(self):
        from . import signals  # noqa: F401
        from .shortcode_providers import register_shortcodes

        register_shortcodes()

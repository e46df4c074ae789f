from django.apps import AppConfig


class AssetsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "assets"
    verbose_name = "Editor Assets"

    def ready(self):
        # Ensure signal handlers are imported when app is ready
        from . import signals  # noqa: F401

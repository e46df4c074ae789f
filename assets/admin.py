from django.contrib import admin
from django.utils.html import format_html

from .models import File, Folder


@admin.register(Folder)
class FolderAdmin(admin.ModelAdmin):
    list_display = ("name", "parent")
    search_fields = ("name",)


@admin.register(File)
class FileAdmin(admin.ModelAdmin):
    list_display = ("name", "title", "parent", "is_public", "preview_link", "updated_at")
    search_fields = ("name", "title")
    list_filter = ("is_public", "parent")
    readonly_fields = ("file_hash", "created_at", "updated_at")

    @admin.display(description="Link")
    def preview_link(self, obj):
        url = obj.get_url()
        if not url:
            return "-"
        return format_html('<a href="{}" target="_blank">{}</a>', url, obj.name)

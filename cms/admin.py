from django.contrib import admin
from tinymce.models import HTMLField

from .forms import HTMLEditorField
from .models import Page


@admin.register(Page)
class PageAdmin(admin.ModelAdmin):
    list_display = ("title", "slug", "is_public", "has_broken_file", "has_broken_link", "updated_at")
    search_fields = ("title", "slug")
    list_filter = ("is_public", "has_broken_file", "has_broken_link")
    prepopulated_fields = {"slug": ("title",)}
    readonly_fields = ("has_broken_file", "has_broken_link")
    # Route content through the sanitising editor field
    formfield_overrides = {HTMLField: {"form_class": HTMLEditorField}}

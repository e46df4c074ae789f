from django import template
from django.utils.safestring import mark_safe

from cms.forms import HTMLReadonlyField
from cms.shortcode_providers import render_shortcodes

register = template.Library()


@register.filter
def shortcodes(content):
    """Expand image, file and page shortcodes in stored editor content."""
    if not content:
        return ""
    return mark_safe(render_shortcodes(content))


@register.filter
def readonly_html(content, name="content"):
    """Render editor content as a read-only field."""
    return HTMLReadonlyField(name, content).field()


@register.filter
def add_class(field, css_class):
    """Add CSS class to a form field widget."""
    return field.as_widget(attrs={"class": css_class})

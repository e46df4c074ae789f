from django import forms
from django.conf import settings
from django.core.exceptions import FieldDoesNotExist, ImproperlyConfigured
from django.utils.html import format_html
from django.utils.safestring import mark_safe
from tinymce.models import HTMLField
from tinymce.widgets import TinyMCE

from assets.models import File

from .editor_config import HTMLEditorConfig
from .html_value import HTMLValue
from .models import Page
from .sanitiser import HTMLEditorSanitiser
from .shortcode_providers import regenerate_shortcodes, render_shortcodes
from .signals import process_html

# --- HTML editor field ---


class HTMLEditorField(forms.CharField):
    """
    Rich text field backed by TinyMCE.

    Submitted HTML is parsed (closing any unclosed tags), sanitised against
    the editor configuration when ``HTMLEDITOR_SANITISE_SERVER_SIDE`` is on,
    and offered to ``process_html`` receivers before it is saved.

    Besides normal form use, the field can be driven directly:

        editor = HTMLEditorField("content")
        editor.set_value("<p>Unclosed Tag")
        editor.save_into(page)
        # page.content == "<p>Unclosed Tag</p>"
    """

    def __init__(self, name=None, *, config=None, rows=30, **kwargs):
        self.name = name
        self.editor_config = HTMLEditorConfig.get(config)
        kwargs.setdefault("required", False)
        # Model HTMLFields hand over a widget class (TinyMCE or AdminTinyMCE)
        widget = kwargs.get("widget") or TinyMCE
        if isinstance(widget, type) and issubclass(widget, TinyMCE):
            kwargs["widget"] = widget(
                attrs={"cols": 80, "rows": rows, "class": "form-control"},
                mce_attrs=self.editor_config.get_widget_options(),
            )
        # Whitespace is significant inside <pre> and friends
        kwargs.setdefault("strip", False)
        super().__init__(**kwargs)
        self.value = ""

    def set_value(self, value):
        """Set the value, rewriting shortcodes so the editor sees current URLs."""
        self.value = regenerate_shortcodes(value or "")
        return self

    def sanitise_server_side(self):
        return getattr(settings, "HTMLEDITOR_SANITISE_SERVER_SIDE", True)

    def process(self, value):
        """Return the normalised HTML that would be saved for ``value``."""
        html_value = HTMLValue(value)
        if self.sanitise_server_side():
            HTMLEditorSanitiser(self.editor_config).sanitise(html_value)
        process_html.send(sender=self.__class__, field=self, html_value=html_value)
        return html_value.get_content()

    def clean(self, value):
        value = super().clean(value)
        return self.process(value)

    def save_into(self, record):
        """Normalise the current value and assign it to ``record.<name>``."""
        try:
            model_field = record._meta.get_field(self.name)
        except FieldDoesNotExist:
            raise ImproperlyConfigured(
                f"HTMLEditorField.save_into(): {type(record).__name__} has no field '{self.name}'."
            )
        if not isinstance(model_field, HTMLField):
            raise ImproperlyConfigured(
                "HTMLEditorField.save_into(): this field should save into an HTMLField, "
                f"but '{self.name}' is a {type(model_field).__name__}."
            )
        setattr(record, self.name, self.process(self.value))

    def perform_readonly_transformation(self):
        return HTMLReadonlyField(self.name, self.value)


class HTMLReadonlyField:
    """Read-only rendering of editor content, with shortcodes expanded."""

    def __init__(self, name, value="", include_hidden_field=False):
        self.name = name
        self.value = value or ""
        self.include_hidden_field = include_hidden_field

    def __str__(self):
        return self.field()

    def __html__(self):
        return self.field()

    @property
    def id(self):
        return f"id_{self.name}"

    def set_include_hidden_field(self, include=True):
        self.include_hidden_field = include
        return self

    def field(self):
        if self.value:
            content = mark_safe(render_shortcodes(self.value))
        else:
            content = mark_safe("<i>(none)</i>")
        html = format_html(
            '<span class="readonly typography" id="{}">\n\t{}\n</span>', self.id, content
        )
        if self.include_hidden_field:
            html += format_html(
                '\n\t<input type="hidden" name="{}" value="{}" />', self.name, self.value
            )
        return html


# --- Page editing ---


class PageForm(forms.ModelForm):
    content = HTMLEditorField("content")

    class Meta:
        model = Page
        fields = ["title", "slug", "content", "is_public"]
        widgets = {
            "title": forms.TextInput(attrs={"class": "form-control"}),
            "slug": forms.TextInput(attrs={"class": "form-control"}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance and self.instance.content:
            self.initial["content"] = regenerate_shortcodes(self.instance.content)


# --- Toolbar forms ---


class InsertLinkForm(forms.Form):
    LINK_TYPE_CHOICES = [
        ("internal", "Page on this site"),
        ("external", "Another website"),
        ("anchor", "Anchor on this page"),
        ("email", "Email address"),
        ("file", "Download a file"),
    ]

    link_type = forms.ChoiceField(
        choices=LINK_TYPE_CHOICES,
        initial="internal",
        widget=forms.RadioSelect,
    )
    page = forms.ModelChoiceField(queryset=Page.objects.all(), required=False)
    external_url = forms.URLField(label="URL", required=False, assume_scheme="https")
    anchor = forms.CharField(max_length=255, required=False)
    email = forms.EmailField(required=False)
    file = forms.ModelChoiceField(queryset=File.objects.all(), required=False)
    description = forms.CharField(max_length=255, required=False)
    target_blank = forms.BooleanField(label="Open in a new window", required=False)

    REQUIRED_BY_TYPE = {
        "internal": "page",
        "external": "external_url",
        "anchor": "anchor",
        "email": "email",
        "file": "file",
    }

    def clean(self):
        cleaned = super().clean()
        required = self.REQUIRED_BY_TYPE.get(cleaned.get("link_type"))
        if required and not cleaned.get(required):
            self.add_error(required, "This field is required for this type of link.")
        return cleaned

    def get_href(self):
        """Return the href (shortcode for site records) for a valid form."""
        data = self.cleaned_data
        link_type = data["link_type"]
        if link_type == "internal":
            href = f"[page_link,id={data['page'].pk}]"
        elif link_type == "file":
            href = f"[file_link,id={data['file'].pk}]"
        elif link_type == "email":
            href = f"mailto:{data['email']}"
        elif link_type == "anchor":
            href = f"#{data['anchor']}"
        else:
            href = data["external_url"]
        if link_type in ("internal", "external", "file") and data.get("anchor"):
            href = f"{href}#{data['anchor']}"
        return href


ALIGNMENT_CHOICES = [
    ("leftAlone", "On the left, on its own"),
    ("center", "Centered, on its own"),
    ("left", "On the left, with text wrapping around"),
    ("right", "On the right, with text wrapping around"),
]


class InsertImageForm(forms.Form):
    url = forms.CharField(widget=forms.HiddenInput)
    file_id = forms.IntegerField(widget=forms.HiddenInput, required=False)
    alt = forms.CharField(
        label="Alternative text (alt)",
        max_length=255,
        required=False,
        help_text="Shown to screen readers or if the image can't be displayed",
    )
    title = forms.CharField(
        label="Title text (tooltip)",
        max_length=255,
        required=False,
        help_text="For additional information about the image",
    )
    css_class = forms.ChoiceField(label="Alignment", choices=ALIGNMENT_CHOICES, required=False)
    width = forms.IntegerField(min_value=1, required=False)
    height = forms.IntegerField(min_value=1, required=False)
    caption = forms.CharField(max_length=255, required=False)


class InsertMediaForm(forms.Form):
    url = forms.CharField(widget=forms.HiddenInput)
    file_id = forms.IntegerField(widget=forms.HiddenInput, required=False)
    caption = forms.CharField(max_length=255, required=False)
    css_class = forms.ChoiceField(label="Alignment", choices=ALIGNMENT_CHOICES, required=False)
    width = forms.IntegerField(min_value=1, required=False)
    height = forms.IntegerField(min_value=1, required=False)

import tinymce.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("assets", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Page",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("title", models.CharField(max_length=200)),
                (
                    "slug",
                    models.SlugField(
                        help_text="URL path for this page, e.g. 'club-documents', 'bylaws', etc.",
                        max_length=100,
                        unique=True,
                    ),
                ),
                ("content", tinymce.models.HTMLField(blank=True)),
                ("is_public", models.BooleanField(default=True)),
                ("has_broken_file", models.BooleanField(default=False, editable=False)),
                ("has_broken_link", models.BooleanField(default=False, editable=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "linked_files",
                    models.ManyToManyField(
                        blank=True,
                        editable=False,
                        related_name="linked_pages",
                        to="assets.file",
                    ),
                ),
            ],
            options={
                "verbose_name": "CMS Page",
                "verbose_name_plural": "CMS Pages",
                "ordering": ["title"],
            },
        ),
    ]

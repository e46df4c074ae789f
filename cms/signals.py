"""
Signals for the cms app.

Extension points:
- ``process_html``: sent by HTMLEditorField before a value is saved, with the
  parsed ``html_value`` so receivers can rewrite markup in place.
- ``image_form_created`` / ``media_form_created``: sent by the editor toolbar
  after building the insert form for a file, so receivers can add or adjust
  fields.

Also keeps ``Page.linked_files`` in step with page content.
"""

import logging

from django.db.models.signals import post_save
from django.dispatch import Signal, receiver

from .link_tracking import sync_linked_files
from .models import Page

logger = logging.getLogger(__name__)

process_html = Signal()
image_form_created = Signal()
media_form_created = Signal()


@receiver(post_save, sender=Page)
def update_linked_files(sender, instance, raw=False, **kwargs):
    if raw:
        # Fixture loading: references may point at rows not loaded yet
        return
    sync_linked_files(instance)
    logger.debug(
        "Page %s links %d file(s)", instance.slug, instance.linked_files.count()
    )

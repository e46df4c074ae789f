"""
Signals for the assets app.

Keeps the asset store in step with File records: deleting a record removes
its stored content and every generated variant.
"""

import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver

from .models import File, Folder, Image

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=File)
@receiver(post_delete, sender=Image)
def delete_stored_content(sender, instance, **kwargs):
    try:
        instance.delete_content()
    except (OSError, Folder.DoesNotExist):
        # Record is gone either way; leave the orphaned content for cleanup
        logger.exception("Failed to delete stored content for %s", instance.name)

"""
Signal handlers for imageup.
"""
import logging
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from .models import HasImageUploads

logger = logging.getLogger(__name__)


@receiver(post_save, dispatch_uid='imageup_auto_upload')
def auto_upload_on_save(sender, instance, raw=False, update_fields=None, **kwargs):
    """Upload request files into declared fields after a model is saved."""
    if not isinstance(instance, HasImageUploads):
        return

    instance.sync_original(update_fields)

    # Skip fixture loading and the uploader's own save of the new path
    if raw or instance.is_saving_upload or instance.auto_upload_disabled:
        return

    instance.auto_upload()


@receiver(post_delete, dispatch_uid='imageup_auto_delete')
def auto_delete_on_delete(sender, instance, **kwargs):
    """Delete stored files once their record is deleted."""
    if not isinstance(instance, HasImageUploads):
        return

    logger.debug(f"Removing uploads of deleted {sender._meta.label}")
    instance.auto_delete_uploads()

"""
Storage disks for imageup.

A disk is an alias in settings.STORAGES, so 'public', 'local' or an S3/GCS
backend configured through django-storages can all be targeted by name.
"""
import logging

from django.core.exceptions import SuspiciousFileOperation
from django.core.files.base import ContentFile
from django.core.files.storage import InvalidStorageError, Storage, storages

from .exceptions import StorageFailure

logger = logging.getLogger(__name__)


def get_disk(alias: str) -> Storage:
    try:
        return storages[alias]
    except InvalidStorageError as e:
        raise StorageFailure(f"Storage disk '{alias}' is not configured in STORAGES") from e


def put(disk: Storage, path: str, content: bytes) -> str:
    """
    Write ``content`` at ``path``, replacing any existing file.

    Returns:
        Name the storage saved the file under
    """
    try:
        if disk.exists(path):
            disk.delete(path)
        saved = disk.save(path, ContentFile(content))
    except (OSError, SuspiciousFileOperation) as e:
        raise StorageFailure(f"Failed to write {path}: {e}") from e

    logger.info(f"Stored {len(content)} bytes at {saved}")
    return saved


def exists(disk: Storage, path: str) -> bool:
    return bool(path) and disk.exists(path)


def delete(disk: Storage, path: str) -> bool:
    """Delete ``path`` if it exists. Returns whether a file was removed."""
    try:
        if not exists(disk, path):
            return False
        disk.delete(path)
    except (OSError, SuspiciousFileOperation) as e:
        raise StorageFailure(f"Failed to delete {path}: {e}") from e

    logger.info(f"Deleted stored file {path}")
    return True


def url(disk: Storage, path: str) -> str:
    return disk.url(path)


def physical_path(disk: Storage, path: str) -> str:
    """Absolute filesystem path, for disks backed by the local filesystem."""
    return disk.path(path)

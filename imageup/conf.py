"""
Settings for the imageup app.

Projects override any of these through an ``IMAGEUP`` dict in their Django
settings, e.g.::

    IMAGEUP = {
        'upload_disk': 'public',
        'upload_directory': 'uploads',
        'auto_upload_images': True,
    }
"""
from django.conf import settings

DEFAULTS = {
    # Storage alias (key of settings.STORAGES) files are written to
    'upload_disk': 'public',

    # Directory on the disk, eg. 'uploads' or 'user/avatar'
    'upload_directory': 'uploads',

    # Upload files found in the current request under the field name
    # (or the field's file_input option) whenever a model is saved.
    # Can be overridden per field with the auto_upload option.
    'auto_upload_images': False,

    # Delete stored files once their record is deleted
    'auto_delete_images': True,

    # Encoder quality for resized images
    'resize_image_quality': 80,
}


def get_setting(name):
    """Read an imageup setting, falling back to the app default."""
    overrides = getattr(settings, 'IMAGEUP', None) or {}
    return overrides.get(name, DEFAULTS[name])

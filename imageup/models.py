"""
Model mixin giving Django models automatic image and file uploads.

    class User(HasImageUploads):
        avatar = models.CharField(max_length=255, null=True, blank=True)
        resume = models.CharField(max_length=255, null=True, blank=True)

        image_fields = {'avatar': {'width': 200, 'height': 200, 'crop': True}}
        file_fields = ['resume']

    user.upload_image(request.FILES['avatar'])
    user.image_url('avatar')
"""
import logging
from typing import Dict, Optional

from django.db import models
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from . import storage
from .conf import get_setting
from .middleware import get_current_request, request_file, request_has_file
from .options import (
    resolve_auto_upload_allowed,
    resolve_crop_option,
    resolve_field_name,
    resolve_field_options,
    resolve_file_input,
    resolve_upload_disk,
)
from .processor import ImageHandle
from .registry import (
    Declarations,
    FieldKind,
    as_options_map,
    has_field,
    merge_declarations,
    normalize_declarations,
)
from .uploader import Uploader

logger = logging.getLogger(__name__)


def stored_path(value) -> Optional[str]:
    """Storage path held by a model attribute (plain string or FieldFile)."""
    if value is None or isinstance(value, str):
        return value or None
    return getattr(value, 'name', None) or None


class HasImageUploads(models.Model):
    """
    Abstract model adding upload handling for declared fields.

    Class attributes:
        image_fields: image field declarations (resized and re-encoded)
        file_fields: file field declarations (stored byte for byte)
        images_upload_path: directory used when a field sets no path option
        images_upload_disk: storage alias used when a field sets no disk option
        auto_upload_images: model-wide auto_upload default
    """
    image_fields = None
    file_fields = None
    images_upload_path = None
    images_upload_disk = None
    auto_upload_images = None

    class Meta:
        abstract = True

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance.sync_original()
        return instance

    def refresh_from_db(self, using=None, fields=None, **kwargs):
        super().refresh_from_db(using=using, fields=fields, **kwargs)
        self.sync_original(fields)

    # Persisted state

    def sync_original(self, update_fields=None):
        """Record the current column values as the persisted ones."""
        original = dict(self.__dict__.get('_imageup_original', {}))
        for field in self._meta.concrete_fields:
            if update_fields is not None and field.name not in update_fields:
                continue
            if field.attname not in self.__dict__:
                continue
            value = self.__dict__[field.attname]
            if isinstance(field, models.FileField):
                value = stored_path(value)
            original[field.attname] = value
        self._imageup_original = original

    def get_original(self, name: str):
        """Value of ``name`` as last loaded from or saved to the database."""
        return self.__dict__.get('_imageup_original', {}).get(name)

    # Field registry

    def get_image_declarations(self) -> Declarations:
        overrides = self.__dict__.get('_imageup_image_fields')
        if overrides is not None:
            return overrides
        return normalize_declarations(type(self).image_fields, FieldKind.IMAGE)

    def get_file_declarations(self) -> Declarations:
        overrides = self.__dict__.get('_imageup_file_fields')
        if overrides is not None:
            return overrides
        return normalize_declarations(type(self).file_fields, FieldKind.FILE)

    def get_upload_declarations(self) -> Declarations:
        # Image fields win over file fields of the same name
        return merge_declarations(self.get_file_declarations(), self.get_image_declarations())

    def set_images_field(self, fields) -> 'HasImageUploads':
        """Declare image fields for this instance, merged over class-level ones if any."""
        declared = normalize_declarations(fields, FieldKind.IMAGE)
        if type(self).image_fields is not None:
            declared = merge_declarations(self.get_image_declarations(), declared)
        self._imageup_image_fields = declared
        return self

    def set_files_field(self, fields) -> 'HasImageUploads':
        """Declare file fields for this instance, merged over class-level ones if any."""
        declared = normalize_declarations(fields, FieldKind.FILE)
        if type(self).file_fields is not None:
            declared = merge_declarations(self.get_file_declarations(), declared)
        self._imageup_file_fields = declared
        return self

    def get_defined_upload_fields(self) -> Dict[str, dict]:
        return as_options_map(self.get_upload_declarations())

    def get_defined_file_fields(self) -> Dict[str, dict]:
        return as_options_map(self.get_file_declarations())

    def has_image_field(self, field: Optional[str]) -> bool:
        return has_field(field, self.get_upload_declarations())

    def has_file_field(self, field: Optional[str]) -> bool:
        return has_field(field, self.get_file_declarations())

    def get_upload_field_name(self, field: Optional[str] = None) -> Optional[str]:
        return resolve_field_name(self.get_upload_declarations(), field)

    def get_upload_field_options(self, field: Optional[str] = None) -> dict:
        return resolve_field_options(self.get_upload_declarations(), field)

    # URLs

    def image_url(self, field: Optional[str] = None) -> str:
        """
        Public URL of the file stored for ``field``.

        Falls back to the field's placeholder option when nothing is stored,
        and to an empty string when there is no placeholder either.
        """
        name = self.get_upload_field_name(field)
        options = self.get_upload_field_options(name)

        if options.get('update_database', True):
            value = self.get_original(name)
        else:
            value = stored_path(getattr(self, name, None))

        if not value:
            return options.get('placeholder') or ''

        disk = storage.get_disk(resolve_upload_disk(options, self.images_upload_disk))
        return storage.url(disk, value)

    def file_url(self, field: Optional[str] = None) -> str:
        return self.image_url(field)

    def image_tag(self, field: Optional[str] = None, attributes: str = '') -> str:
        """<img> tag for an image field, or '' for file fields and on any error."""
        try:
            name = self.get_upload_field_name(field)
            if not self.has_image_field(name) or self.has_file_field(name):
                return ''
            return format_html('<img src="{}" {} />', self.image_url(name), mark_safe(attributes))
        except Exception as e:
            logger.error(f"Failed to render image tag for field {field}: {str(e)}", exc_info=True)
            return ''

    # Uploads

    def upload_image(self, file, field: Optional[str] = None) -> 'HasImageUploads':
        Uploader(self).upload(file, field)
        return self

    def upload_file(self, file, field: Optional[str] = None) -> 'HasImageUploads':
        return self.upload_image(file, field)

    def resize_image(self, file, options: dict) -> ImageHandle:
        """Decode ``file`` and apply width/height/crop ``options`` to it."""
        crop = resolve_crop_option(options, self.consume_crop_coordinates())
        return Uploader(self).resize(file, options, crop)

    def crop_to(self, x: int, y: int) -> 'HasImageUploads':
        """Crop the next resized image at (x, y) instead of the field's crop option."""
        self._imageup_crop_coordinates = [x, y]
        return self

    def consume_crop_coordinates(self):
        return self.__dict__.pop('_imageup_crop_coordinates', None)

    def store_upload_path(self, field: str, path: str):
        """Point ``field`` at ``path`` and save without triggering auto upload."""
        setattr(self, field, path)
        self._imageup_saving = True
        try:
            if self._state.adding:
                self.save()
            else:
                self.save(update_fields=[field])
        finally:
            self._imageup_saving = False

    @property
    def is_saving_upload(self) -> bool:
        return self.__dict__.get('_imageup_saving', False)

    # Deletes

    def delete_image(self, file_path: str, field: Optional[str] = None):
        """Delete ``file_path`` from the disk of ``field`` (or the default disk)."""
        options = self.get_upload_field_options(field) if field else {}
        disk = storage.get_disk(resolve_upload_disk(options, self.images_upload_disk))
        storage.delete(disk, file_path)

    def delete_file(self, file_path: str, field: Optional[str] = None):
        self.delete_image(file_path, field)

    # Lifecycle

    def disable_auto_upload(self) -> 'HasImageUploads':
        self._imageup_auto_upload_disabled = True
        return self

    def enable_auto_upload(self) -> 'HasImageUploads':
        self._imageup_auto_upload_disabled = False
        return self

    @property
    def auto_upload_disabled(self) -> bool:
        return self.__dict__.get('_imageup_auto_upload_disabled', False)

    def auto_upload(self, request=None):
        """
        Upload every declared field that has a file in ``request``.

        Uses the request tracked by CurrentRequestMiddleware when ``request``
        is None. Fields whose auto_upload resolves to False are skipped.
        """
        request = request or get_current_request()
        if request is None:
            return

        for name, declaration in self.get_upload_declarations().items():
            options = declaration.get_options()
            if not resolve_auto_upload_allowed(options, self.auto_upload_images):
                continue

            input_name = resolve_file_input(name, options)
            if request_has_file(request, input_name):
                self.upload_image(request_file(request, input_name), name)

    def auto_delete_uploads(self):
        """Delete the stored files of every declared field, if auto_delete_images is on."""
        if not get_setting('auto_delete_images'):
            return

        for name in self.get_upload_declarations():
            path = self.get_original(name)
            if path:
                self.delete_image(path, name)

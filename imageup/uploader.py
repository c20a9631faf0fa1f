"""
Upload orchestration for models using HasImageUploads.

Each call builds an UploadContext and threads it through the steps:
validate, resize (images only), store, update the record, delete the file the
record pointed to before.
"""
import logging
import mimetypes
import os
import uuid
from dataclasses import dataclass
from typing import Optional

from . import storage
from .hooks import trigger_hook
from .options import (
    resolve_crop_option,
    resolve_field_name,
    resolve_field_options,
    resolve_image_quality,
    resolve_upload_disk,
    resolve_upload_path,
)
from .processor import ImageHandle, ImageProcessor
from .registry import FieldKind
from .validation import validate_upload

logger = logging.getLogger(__name__)


@dataclass
class UploadContext:
    """Everything one upload call resolved about its target field."""
    field: str
    kind: FieldKind
    options: dict
    disk_alias: str
    directory: str
    crop: object = False

    @property
    def disk(self):
        return storage.get_disk(self.disk_alias)

    @property
    def update_database(self) -> bool:
        return bool(self.options.get('update_database', True))


def hash_name(file) -> str:
    """Random file name keeping the upload's extension."""
    name = getattr(file, 'name', '') or ''
    extension = os.path.splitext(name)[1].lower()
    if not extension:
        content_type = getattr(file, 'content_type', None)
        extension = (mimetypes.guess_extension(content_type) or '') if content_type else ''
    if extension in ('.jpeg', '.jpe'):
        extension = '.jpg'
    return f"{uuid.uuid4().hex}{extension}"


def read_bytes(file) -> bytes:
    if hasattr(file, 'seek'):
        file.seek(0)
    if hasattr(file, 'chunks'):
        return b''.join(file.chunks())
    return file.read()


class Uploader:
    """Uploads files into the declared fields of one record."""

    def __init__(self, record):
        self.record = record

    def build_context(self, field: Optional[str] = None) -> UploadContext:
        declared = self.record.get_upload_declarations()
        name = resolve_field_name(declared, field)
        options = resolve_field_options(declared, name)
        kind = FieldKind.FILE if self.record.has_file_field(name) else FieldKind.IMAGE

        return UploadContext(
            field=name,
            kind=kind,
            options=options,
            disk_alias=resolve_upload_disk(options, self.record.images_upload_disk),
            directory=resolve_upload_path(options, self.record.images_upload_path),
        )

    def upload(self, file, field: Optional[str] = None) -> str:
        """
        Upload ``file`` into ``field`` (first declared field when None).

        Returns:
            Storage path of the new file
        """
        context = self.build_context(field)

        rules = context.options.get('rules')
        if rules:
            validate_upload(context.field, file, rules)

        if context.kind is FieldKind.FILE:
            path = self.store_file(context, file)
        else:
            context.crop = resolve_crop_option(
                context.options, self.record.consume_crop_coordinates()
            )
            handle = self.resize(file, context.options, context.crop)
            path = self.store_image(context, file, handle)

        current = self.record.get_original(context.field)

        if context.update_database:
            self.record.store_upload_path(context.field, path)

        if current and current != path:
            storage.delete(context.disk, current)

        logger.info(
            f"Uploaded {context.kind.value} for {self.record._meta.label}.{context.field} "
            f"(pk={self.record.pk}) to {context.disk_alias}:{path}"
        )
        return path

    def resize(self, file, options: dict, crop=False) -> ImageHandle:
        handle = ImageProcessor.decode(file)
        return ImageProcessor.resize(handle, options, crop)

    def file_path(self, context: UploadContext, file) -> str:
        """Directory plus file name; models may name files via <field>_upload_file_path(file)."""
        override = getattr(self.record, f"{context.field.lower()}_upload_file_path", None)
        filename = override(file) if callable(override) else hash_name(file)
        return f"{context.directory}/{filename}" if context.directory else filename

    def store_file(self, context: UploadContext, file) -> str:
        trigger_hook(context.options, 'before_save', file)

        path = storage.put(context.disk, self.file_path(context, file), read_bytes(file))

        trigger_hook(context.options, 'after_save', file)
        return path

    def store_image(self, context: UploadContext, file, handle: ImageHandle) -> str:
        try:
            trigger_hook(context.options, 'before_save', handle)

            content = handle.encode(quality=resolve_image_quality(context.options))
            path = storage.put(context.disk, self.file_path(context, file), content)

            trigger_hook(context.options, 'after_save', handle)
        finally:
            handle.release()
        return path

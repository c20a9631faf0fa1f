"""
Resolution of effective upload options.

Field options win over model attributes, which win over the IMAGEUP settings.
"""
from typing import Optional

from .conf import get_setting
from .exceptions import NoUploadFieldDefined, UnknownUploadField
from .registry import Declarations, has_field


def resolve_field_name(declared: Declarations, field: Optional[str] = None) -> Optional[str]:
    """Return ``field`` verbatim, or the first declared field name."""
    if field is not None:
        return field
    return next(iter(declared), None)


def resolve_field_options(declared: Declarations, field: Optional[str] = None) -> dict:
    """
    Options of ``field``, or of the first declared field when ``field`` is None.

    Raises:
        NoUploadFieldDefined: nothing is declared and no field was named
        UnknownUploadField: ``field`` is not declared
    """
    if field is None:
        if not declared:
            raise NoUploadFieldDefined(
                'No upload fields are defined in image_fields/file_fields on model.'
            )
        return next(iter(declared.values())).get_options()

    if not has_field(field, declared):
        raise UnknownUploadField(field)

    return declared[field].get_options()


def resolve_crop_option(options: dict, override=None):
    """Crop coordinates override, else the crop option, else False."""
    if override is not None and len(override) == 2:
        return list(override)
    return options.get('crop', False)


def resolve_upload_path(options: dict, model_path: Optional[str] = None, default: Optional[str] = None) -> str:
    path = options.get('path') or model_path
    if not path:
        path = default if default is not None else get_setting('upload_directory')
    return str(path).strip('/')


def resolve_upload_disk(options: dict, model_disk: Optional[str] = None, default: Optional[str] = None) -> str:
    disk = options.get('disk') or model_disk
    if not disk:
        disk = default if default is not None else get_setting('upload_disk')
    return disk


def resolve_auto_upload_allowed(options: dict, model_flag: Optional[bool] = None, default: Optional[bool] = None) -> bool:
    if 'auto_upload' in options:
        return bool(options['auto_upload'])
    if model_flag is not None:
        return bool(model_flag)
    if default is not None:
        return bool(default)
    return bool(get_setting('auto_upload_images'))


def resolve_file_input(field: str, options: dict) -> str:
    """Name of the request file field feeding ``field``."""
    return options.get('file_input') or field


def resolve_image_quality(options: dict) -> int:
    return int(options.get('resize_image_quality') or get_setting('resize_image_quality'))

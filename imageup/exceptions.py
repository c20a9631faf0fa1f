"""
Exceptions raised by imageup.
"""
from django.core.exceptions import ImproperlyConfigured
from rest_framework import serializers


class ImageUpError(Exception):
    """Base class for imageup errors."""


class InvalidUploadFieldException(ImageUpError):
    """The requested upload field cannot be resolved on the model."""


class NoUploadFieldDefined(InvalidUploadFieldException):
    """No image_fields/file_fields are declared on the model."""


class UnknownUploadField(InvalidUploadFieldException):
    """The named field is not declared in image_fields/file_fields."""

    def __init__(self, field):
        self.field = field
        super().__init__(
            f'Image/File field `{field}` is not defined in image_fields/file_fields on model.'
        )


class ValidationFailed(serializers.ValidationError):
    """Uploaded file rejected by the field's rules."""


class StorageFailure(ImageUpError):
    """Writing to or deleting from a storage disk failed."""


class CodecFailure(ImageUpError):
    """The uploaded image could not be decoded or encoded."""


class InvalidHook(ImproperlyConfigured):
    """A before_save/after_save option is neither a callable nor a handler name."""

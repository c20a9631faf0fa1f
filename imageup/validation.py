"""
Validation of uploaded files against a field's ``rules`` option.

``rules`` may be:

* a DRF serializer field, e.g. ``serializers.ImageField()``
* a list of Django validators, e.g. ``[FileExtensionValidator(['pdf'])]``
* a rule string, e.g. ``'required|image|max:2048|mimes:jpg,png'``
  (``max`` is in kilobytes), or a list mixing rule names and validators
"""
import copy

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import FileExtensionValidator
from django.utils.deconstruct import deconstructible
from rest_framework import serializers

from .exceptions import ValidationFailed


@deconstructible
class MaxFileSizeValidator:
    """Reject files larger than ``kilobytes``."""

    def __init__(self, kilobytes):
        self.kilobytes = int(kilobytes)

    def __call__(self, value):
        if value.size > self.kilobytes * 1024:
            raise DjangoValidationError(
                f'File too large. Maximum size is {self.kilobytes} kilobytes.',
                code='max_size',
            )

    def __eq__(self, other):
        return isinstance(other, MaxFileSizeValidator) and other.kilobytes == self.kilobytes


def build_rules_field(rules) -> serializers.Field:
    """Build the serializer field that checks an upload."""
    if isinstance(rules, serializers.Field):
        return copy.deepcopy(rules)

    if isinstance(rules, str):
        rules = rules.split('|')
    elif callable(rules):
        rules = [rules]

    required = False
    field_class = serializers.FileField
    validators = []

    for rule in rules:
        if callable(rule):
            validators.append(rule)
            continue

        name, _, argument = rule.strip().partition(':')
        if name == 'required':
            required = True
        elif name == 'image':
            field_class = serializers.ImageField
        elif name == 'file':
            continue
        elif name == 'max':
            validators.append(MaxFileSizeValidator(argument))
        elif name == 'mimes':
            validators.append(FileExtensionValidator(
                [ext.strip().lower() for ext in argument.split(',') if ext.strip()]
            ))
        else:
            raise ValueError(f"Unknown upload rule '{name}'")

    return field_class(required=required, allow_null=not required, validators=validators)


def validate_upload(field_name: str, file, rules):
    """
    Validate ``file`` as the value of ``field_name``.

    Raises:
        ValidationFailed: with the serializer's error dict
    """
    # Declared under a fixed key so field names can't shadow Serializer attributes
    serializer_class = type(
        'UploadRulesSerializer',
        (serializers.Serializer,),
        {'upload': build_rules_field(rules)},
    )
    serializer = serializer_class(data={'upload': file})
    if not serializer.is_valid():
        raise ValidationFailed({field_name: serializer.errors.get('upload', serializer.errors)})
    return serializer.validated_data.get('upload')

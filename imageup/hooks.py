"""
before_save/after_save hooks.

A hook option is a callable taking the in-flight payload, a handler class
exposing ``handle(payload)``, or the name of such a class. Handler names are
looked up in the registry first and then imported as a dotted path::

    @register_handler('watermark')
    class WatermarkHandler:
        def handle(self, image):
            ...

    image_fields = {'avatar': {'before_save': 'watermark'}}
"""
from dataclasses import dataclass
from typing import Callable, Dict, Union

from django.utils.module_loading import import_string

from .exceptions import InvalidHook

_handlers: Dict[str, type] = {}


def register_handler(name: str, handler_class: type = None):
    """Register a handler class under ``name``; usable as a decorator."""
    def decorator(cls):
        _handlers[name] = cls
        return cls

    if handler_class is not None:
        return decorator(handler_class)
    return decorator


def unregister_handler(name: str):
    _handlers.pop(name, None)


def resolve_handler(identifier: str) -> type:
    if identifier in _handlers:
        return _handlers[identifier]
    try:
        return import_string(identifier.lstrip('.'))
    except ImportError as e:
        raise InvalidHook(f"Hook handler '{identifier}' is not registered and cannot be imported") from e


@dataclass(frozen=True)
class Inline:
    function: Callable

    def __call__(self, payload):
        return self.function(payload)


@dataclass(frozen=True)
class Handler:
    handler_class: type

    def __call__(self, payload):
        return self.handler_class().handle(payload)


@dataclass(frozen=True)
class Named:
    identifier: str

    def __call__(self, payload):
        return Handler(resolve_handler(self.identifier))(payload)


Hook = Union[Inline, Handler, Named]


def coerce_hook(value) -> Hook:
    """Wrap a raw option value into a Hook."""
    if isinstance(value, (Inline, Handler, Named)):
        return value
    if isinstance(value, str):
        return Named(value)
    # Classes are callable too; they are handlers, not inline hooks
    if isinstance(value, type):
        return Handler(value)
    if callable(value):
        return Inline(value)
    raise InvalidHook(f"Hook must be a callable, a handler class or a handler name, got {type(value).__name__}")


def trigger_hook(options: dict, name: str, payload):
    """Run the ``name`` hook ('before_save' or 'after_save') if the field sets one."""
    value = options.get(name)
    if value is None:
        return
    coerce_hook(value)(payload)

"""
Request context for auto uploads.

Model signals have no access to the request, so the middleware keeps the
request being handled in a context variable for the duration of the view.
"""
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional

from asgiref.sync import iscoroutinefunction, markcoroutinefunction
from django.http import HttpRequest, HttpResponse

_current_request: ContextVar[Optional[HttpRequest]] = ContextVar('imageup_current_request', default=None)


def get_current_request() -> Optional[HttpRequest]:
    return _current_request.get()


@contextmanager
def use_request(request: Optional[HttpRequest]):
    """Make ``request`` the current request inside the block."""
    token = _current_request.set(request)
    try:
        yield request
    finally:
        _current_request.reset(token)


def request_has_file(request: Optional[HttpRequest], name: str) -> bool:
    return request is not None and name in request.FILES


def request_file(request: HttpRequest, name: str):
    return request.FILES.get(name)


class CurrentRequestMiddleware:
    """
    Expose the current request to imageup's auto-upload signal handler.

    Add 'imageup.middleware.CurrentRequestMiddleware' to MIDDLEWARE. Runs
    under WSGI and ASGI alike.
    """
    sync_capable = True
    async_capable = True

    def __init__(self, get_response):
        self.get_response = get_response
        self.async_mode = iscoroutinefunction(get_response)
        if self.async_mode:
            markcoroutinefunction(self)

    def __call__(self, request: HttpRequest):
        if self.async_mode:
            return self.__acall__(request)
        # Set and reset within one call; a token can't cross contexts
        with use_request(request):
            return self.get_response(request)

    async def __acall__(self, request: HttpRequest) -> HttpResponse:
        with use_request(request):
            return await self.get_response(request)
